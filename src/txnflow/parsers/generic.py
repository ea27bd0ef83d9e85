"""Generic delimited-export parser.

This module provides the GenericCSVParser class which handles column
resolution, amount parsing and date normalization common to every
export layout. Format-specific refinements inherit from this and
override only what's different.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from txnflow.schemas.internal import NormalizedRow, ParsedFile

logger = logging.getLogger(__name__)

CANONICAL_DATE_FORMAT = "%m/%d/%Y"

# (pattern, component order); tried in order, first match wins
DATE_PATTERNS: list[tuple[re.Pattern[str], tuple[str, str, str]]] = [
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), ("month", "day", "year")),  # MM/dd/yyyy
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), ("year", "month", "day")),  # yyyy-MM-dd
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), ("month", "day", "year")),  # MM-dd-yyyy
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$"), ("month", "day", "year")),  # MM/dd/yy
]

_AMOUNT_NOISE = re.compile(r"[$,()\s]")


def normalize_date(text: str | None) -> str | None:
    """Normalize a date string to canonical MM/dd/yyyy text.

    Two-digit years are assumed to be 20xx. Returns None when no pattern
    matches, a component is missing, or the year is not four digits.

    Example:
        >>> normalize_date("3/4/25")
        '03/04/2025'
        >>> normalize_date("2025-03-04")
        '03/04/2025'
    """
    if not text:
        return None

    cleaned = text.strip()
    for pattern, order in DATE_PATTERNS:
        match = pattern.match(cleaned)
        if not match:
            continue

        parts = dict(zip(order, match.groups()))
        month, day, year = parts.get("month"), parts.get("day"), parts.get("year")
        if not (month and day and year):
            return None
        if len(year) == 2:
            year = f"20{year}"
        if len(year) != 4:
            return None
        return f"{int(month):02d}/{int(day):02d}/{year}"

    return None


def parse_amount(text: str | None) -> Decimal:
    """Parse a money string into a signed Decimal.

    Strips currency symbols, thousands separators, parentheses and
    whitespace. A parenthesized value is negative. Unparseable text is 0.
    """
    if not text:
        return Decimal("0")

    raw = text.strip()
    is_paren = raw.startswith("(") and raw.endswith(")")
    cleaned = _AMOUNT_NOISE.sub("", raw)

    try:
        amount = Decimal(cleaned or "0")
    except InvalidOperation:
        return Decimal("0")

    if not amount.is_finite():
        return Decimal("0")

    return -abs(amount) if is_paren else amount


@dataclass
class ColumnMap:
    """Resolved column positions for one export layout."""

    date: int
    description: int
    amount: int | None = None
    debit: int | None = None
    credit: int | None = None
    type: int | None = None


class GenericCSVParser:
    """Universal parser for delimited bank exports.

    The parser resolves columns heuristically from the header row and
    works for most single-amount and debit/credit exports without
    modification.

    Subclasses can override specific hooks to handle format quirks:
        - _resolve_columns(): Different header names
        - _parse_date(): Different date formats
        - _parse_amount(): Different currency formats
        - _correct_sign(): Export-specific sign conventions

    Example:
        >>> parser = GenericCSVParser()
        >>> parsed = parser.parse([(0, "date"), (1, "description"), (2, "amount")], rows)
        >>> print(len(parsed.rows))
    """

    format_code = "generic"

    DESCRIPTION_PRIORITY = ("description", "details", "memo", "payee", "merchant")
    DEBIT_HINTS = ("debit", "withdrawal", "expense")
    CREDIT_HINTS = ("credit", "deposit", "income")

    def parse(self, headers: list[tuple[int, str]], data_rows: list[list[str]]) -> ParsedFile:
        """Parse data rows using the resolved header layout.

        Args:
            headers: (column_index, normalized_name) pairs from the header row
            data_rows: Tokenized rows following the header

        Returns:
            ParsedFile with rows in input order
        """
        header_names = [name for _, name in headers]
        columns = self._resolve_columns(headers)
        if columns is None:
            logger.warning(
                "Could not resolve columns for export",
                extra={"format": self.format_code, "header": header_names},
            )
            return ParsedFile(format_code=self.format_code, headers=header_names)

        rows: list[NormalizedRow] = []
        skipped = 0
        for line_number, cells in enumerate(data_rows, start=2):
            row = self._parse_row(cells, columns)
            if row is None:
                skipped += 1
                logger.warning(
                    "Dropped malformed row",
                    extra={"format": self.format_code, "line": line_number},
                )
                continue
            rows.append(row)

        return ParsedFile(
            format_code=self.format_code,
            headers=header_names,
            rows=rows,
            skipped_rows=skipped,
        )

    def _parse_row(self, cells: list[str], columns: ColumnMap) -> NormalizedRow | None:
        txn_date = self._parse_date(_cell(cells, columns.date))
        description = _cell(cells, columns.description).strip()
        if txn_date is None or not description:
            return None

        if columns.amount is not None:
            amount = self._parse_amount(_cell(cells, columns.amount))
        else:
            debit = self._parse_amount(_cell(cells, columns.debit))
            credit = self._parse_amount(_cell(cells, columns.credit))
            amount = credit - debit

        type_text = _cell(cells, columns.type).strip()
        amount = self._correct_sign(amount, type_text, description)
        return NormalizedRow.from_signed(txn_date, description, amount)

    def _resolve_columns(self, headers: list[tuple[int, str]]) -> ColumnMap | None:
        """Resolve date, description and amount columns by header name.

        Returns:
            ColumnMap, or None when a required column is missing
        """
        date_index = find_containing(headers, ("date",))
        description_index = find_best(headers, self.DESCRIPTION_PRIORITY)
        if date_index is None or description_index is None:
            return None

        amount_index = find_best(headers, ("amount",))
        if amount_index is not None:
            return ColumnMap(date=date_index, description=description_index, amount=amount_index)

        debit_index = find_containing(headers, self.DEBIT_HINTS)
        credit_index = find_containing(headers, self.CREDIT_HINTS)
        if debit_index is None and credit_index is None:
            return None

        return ColumnMap(
            date=date_index,
            description=description_index,
            debit=debit_index,
            credit=credit_index,
        )

    def _parse_date(self, text: str) -> date | None:
        """Parse a date cell; None when it cannot be normalized.

        A canonical text that is not a real calendar date (e.g. 02/30/2024)
        is rejected as well.
        """
        canonical = normalize_date(text)
        if canonical is None:
            return None
        try:
            return datetime.strptime(canonical, CANONICAL_DATE_FORMAT).date()
        except ValueError:
            return None

    def _parse_amount(self, text: str) -> Decimal:
        return parse_amount(text)

    def _correct_sign(self, amount: Decimal, type_text: str, description: str) -> Decimal:
        """Apply export-specific sign conventions. Generic exports are taken as-is."""
        return amount


def _cell(cells: list[str], index: int | None) -> str:
    if index is None or index >= len(cells):
        return ""
    return cells[index]


def find_exact(headers: list[tuple[int, str]], name: str) -> int | None:
    for index, header in headers:
        if header == name:
            return index
    return None


def find_containing(headers: list[tuple[int, str]], hints: tuple[str, ...]) -> int | None:
    for index, header in headers:
        if any(hint in header for hint in hints):
            return index
    return None


def find_best(headers: list[tuple[int, str]], priority: tuple[str, ...]) -> int | None:
    """Exact header match in priority order, then containment in priority order."""
    for name in priority:
        index = find_exact(headers, name)
        if index is not None:
            return index
    for name in priority:
        index = find_containing(headers, (name,))
        if index is not None:
            return index
    return None
