"""Delimited bank-export parsing.

This module turns CSV/TSV exports into normalized transaction rows using a
hybrid architecture:
- GenericCSVParser handles column resolution common to all exports
- Format-specific refinements override only what's different
"""

from txnflow.parsers.detector import FormatDetector
from txnflow.parsers.factory import ParserFactory, get_parser_factory, parse_csv
from txnflow.parsers.generic import GenericCSVParser, normalize_date, parse_amount

__all__ = [
    "FormatDetector",
    "GenericCSVParser",
    "ParserFactory",
    "get_parser_factory",
    "normalize_date",
    "parse_amount",
    "parse_csv",
]
