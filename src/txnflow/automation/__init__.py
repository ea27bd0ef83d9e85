"""User-defined automation rules applied after categorization."""

from .engine import AutomationRulesEngine, infer_transaction_type
from .patterns import InvalidPatternError, compile_glob, matches

__all__ = [
    "AutomationRulesEngine",
    "InvalidPatternError",
    "compile_glob",
    "infer_transaction_type",
    "matches",
]
