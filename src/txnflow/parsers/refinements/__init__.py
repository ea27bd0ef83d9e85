"""Format-specific parser refinements.

Each refinement extends GenericCSVParser and overrides only what's different
for that export layout (column names, sign conventions, etc.).
"""

from .checking import CheckingAccountParser
from .credit import CreditCardParser

__all__ = ["CheckingAccountParser", "CreditCardParser"]
