"""Checking-account export refinement.

Layout: Details, Posting Date, Description, Amount, Type, Balance, ...
The Details column labels each row DEBIT or CREDIT, which is trusted
over the sign of the amount cell.
"""

from decimal import Decimal

from txnflow.parsers.generic import ColumnMap, GenericCSVParser, find_exact


class CheckingAccountParser(GenericCSVParser):
    """Parser refinement for checking-account exports."""

    format_code = "checking"

    def _resolve_columns(self, headers: list[tuple[int, str]]) -> ColumnMap | None:
        date_index = find_exact(headers, "posting date")
        description_index = find_exact(headers, "description")
        amount_index = find_exact(headers, "amount")
        if date_index is None or description_index is None or amount_index is None:
            return None

        return ColumnMap(
            date=date_index,
            description=description_index,
            amount=amount_index,
            type=find_exact(headers, "details"),
        )

    def _correct_sign(self, amount: Decimal, type_text: str, description: str) -> Decimal:
        label = type_text.upper()
        if label == "DEBIT" and amount > 0:
            return -amount
        if label == "CREDIT" and amount < 0:
            return abs(amount)
        return amount
