"""Credit-card export refinement.

Layout: Transaction Date, Post Date, Description, Category, Type, Amount, ...
Card issuers disagree on whether purchases are exported as positive or
negative numbers, so the sign is rebuilt from the Type column.
"""

import re
from decimal import Decimal

from txnflow.parsers.generic import ColumnMap, GenericCSVParser, find_exact

PAYMENT_TYPES = re.compile(r"payment|credit|adjustment|return|refund", re.IGNORECASE)
PAYMENT_DESCRIPTIONS = re.compile(r"payment|credit", re.IGNORECASE)
PURCHASE_TYPES = re.compile(r"sale|purchase|charge|fee", re.IGNORECASE)


class CreditCardParser(GenericCSVParser):
    """Parser refinement for credit-card exports.

    Sign policy:
        - payments, credits, adjustments, returns and refunds are inflows
        - sales, purchases, charges and fees are outflows
        - anything else that is positive is treated as an outflow
    """

    format_code = "credit"

    def _resolve_columns(self, headers: list[tuple[int, str]]) -> ColumnMap | None:
        date_index = find_exact(headers, "post date")
        description_index = find_exact(headers, "description")
        amount_index = find_exact(headers, "amount")
        if date_index is None or description_index is None or amount_index is None:
            return None

        return ColumnMap(
            date=date_index,
            description=description_index,
            amount=amount_index,
            type=find_exact(headers, "type"),
        )

    def _correct_sign(self, amount: Decimal, type_text: str, description: str) -> Decimal:
        is_payment = bool(
            PAYMENT_TYPES.search(type_text) or PAYMENT_DESCRIPTIONS.search(description)
        )
        is_purchase = bool(PURCHASE_TYPES.search(type_text))

        if is_payment and amount < 0:
            amount = abs(amount)
        if is_purchase and amount > 0:
            amount = -abs(amount)
        if not is_payment and not is_purchase and amount > 0:
            amount = -amount
        return amount
