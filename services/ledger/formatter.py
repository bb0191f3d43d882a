"""Cell formatting shared by the invoice table and the CSV export.

The export must show exactly what the table shows, so both paths render
cells through the same ``ValueFormatter`` instance. Dispatch is by the
column's semantic type:

- date: ``YYYY-MM-DD`` of the canonical instant, or "Invalid Date"
- currency: two decimals with thousands separator; missing renders as zero
- percentage: ``"{value}%"``; missing renders as "N/A"
- status: the enum label; missing renders as "N/A"
- text: the raw value; missing or empty renders as "N/A"
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any

from services.ledger.columns import ColumnDescriptor, ColumnType, column_type
from services.ledger.dates import INVALID_DATE, is_valid_date, resolve_date
from services.ledger.schema import InvoiceRecord

NOT_AVAILABLE = "N/A"
DATE_FORMAT = "%Y-%m-%d"
CENTS = Decimal("0.01")


class ValueFormatter:
    """Renders record fields as display strings.

    Attributes:
        currency_symbol: Prefix for monetary values
    """

    def __init__(self, currency_symbol: str = "$") -> None:
        self.currency_symbol = currency_symbol

    def format(self, record: InvoiceRecord, column: ColumnDescriptor) -> str:
        """Format the value of ``column`` for ``record``."""
        value = getattr(record, column.key, None)
        return self.format_value(value, column_type(column))

    def format_value(self, value: Any, kind: ColumnType) -> str:
        """Format a raw value according to a semantic column type."""
        if kind is ColumnType.DATE:
            return self.format_date(value)
        if kind is ColumnType.CURRENCY:
            return self.format_currency(value)
        if kind is ColumnType.PERCENTAGE:
            return self.format_percentage(value)
        if kind is ColumnType.STATUS:
            return self.format_status(value)
        if kind is ColumnType.ACTIONS:
            # Rendered as a row menu by the presentation layer
            return ""
        return self.format_text(value)

    def format_date(self, value: Any) -> str:
        resolved = resolve_date(value)
        if not is_valid_date(resolved):
            return INVALID_DATE.value
        return resolved.strftime(DATE_FORMAT)

    def format_currency(self, value: Any) -> str:
        amount = _to_decimal(value)
        if amount is None:
            amount = Decimal("0")
        # quantize needs a digit of precision per integer digit plus the cents
        with localcontext() as context:
            context.prec = max(context.prec, amount.adjusted() + 3)
            amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.currency_symbol}{amount.copy_abs():,.2f}"

    def format_percentage(self, value: Any) -> str:
        rate = _to_decimal(value)
        if rate is None:
            return NOT_AVAILABLE
        return f"{_plain(rate)}%"

    def format_status(self, value: Any) -> str:
        if value is None or value == "":
            return NOT_AVAILABLE
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)

    def format_text(self, value: Any) -> str:
        if value is None or value == "":
            return NOT_AVAILABLE
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _plain(value: Decimal) -> str:
    """Render a decimal without exponent or trailing fractional zeros."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
