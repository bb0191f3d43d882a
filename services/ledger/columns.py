"""Column model driving both the invoice table and the CSV export.

A column list is an ordered sequence of ``ColumnDescriptor`` values; the
position in the list is the display order. Every operation here is a pure
function that returns a new list, so a column configuration can be shared
between the table and the export without either side mutating it.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.ledger.schema import RECORD_FIELDS


class ColumnType(str, Enum):
    """Semantic type that selects how a column's values are formatted."""

    DATE = "date"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    STATUS = "status"
    TEXT = "text"
    ACTIONS = "actions"


ACTIONS_KEY = "actions"

COLUMN_KEYS: tuple[str, ...] = (*RECORD_FIELDS, ACTIONS_KEY)

_TYPES_BY_KEY: dict[str, ColumnType] = {
    "issue_date": ColumnType.DATE,
    "amount": ColumnType.CURRENCY,
    "vat_amount": ColumnType.CURRENCY,
    "vat_rate": ColumnType.PERCENTAGE,
    "status": ColumnType.STATUS,
    ACTIONS_KEY: ColumnType.ACTIONS,
}

Direction = Literal["up", "down"]


class ColumnDescriptor(BaseModel):
    """One column of the invoice table.

    Attributes:
        key: InvoiceRecord attribute name, or 'actions' for the row menu
        label: Header text shown in the table and written to the export
        is_visible: Whether the column is displayed and exported
        column_type: Explicit semantic type; inferred from the key when omitted
    """

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    is_visible: bool = True
    column_type: ColumnType | None = Field(None, description="Formatting override")

    @field_validator("key")
    @classmethod
    def _known_key(cls, value: str) -> str:
        if value not in COLUMN_KEYS:
            available = ", ".join(COLUMN_KEYS)
            raise ValueError(f"Unknown column key: '{value}'. Available keys: {available}")
        return value

    @property
    def is_exportable(self) -> bool:
        """Display-only columns never reach the CSV export."""
        return column_type(self) is not ColumnType.ACTIONS


DEFAULT_COLUMNS: tuple[ColumnDescriptor, ...] = (
    ColumnDescriptor(key="invoice_number", label="Invoice ID"),
    ColumnDescriptor(key="counterparty_name", label="Customer"),
    ColumnDescriptor(key="tax_id", label="Tax ID", is_visible=False),
    ColumnDescriptor(key="address", label="Address", is_visible=False),
    ColumnDescriptor(key="concept", label="Concept", is_visible=False),
    ColumnDescriptor(key="issue_date", label="Date"),
    ColumnDescriptor(key="amount", label="Amount"),
    ColumnDescriptor(key="vat_rate", label="VAT Rate", is_visible=False),
    ColumnDescriptor(key="vat_amount", label="VAT Amount", is_visible=False),
    ColumnDescriptor(key="status", label="Status"),
    ColumnDescriptor(key=ACTIONS_KEY, label="Actions"),
)


def column_type(column: ColumnDescriptor) -> ColumnType:
    """Return the semantic type of a column."""
    if column.column_type is not None:
        return column.column_type
    return _TYPES_BY_KEY.get(column.key, ColumnType.TEXT)


def visible_columns(columns: Sequence[ColumnDescriptor]) -> list[ColumnDescriptor]:
    """Return the visible columns in display order."""
    return [column for column in columns if column.is_visible]


def move_column(
    columns: Sequence[ColumnDescriptor], index: int, direction: Direction
) -> list[ColumnDescriptor]:
    """Swap the column at ``index`` with its neighbour.

    'up' moves towards the front of the list. Moving past either end, or
    from an index outside the list, leaves the order unchanged.
    """
    reordered = list(columns)
    target = index - 1 if direction == "up" else index + 1
    if 0 <= index < len(reordered) and 0 <= target < len(reordered):
        reordered[index], reordered[target] = reordered[target], reordered[index]
    return reordered


def set_visibility(
    columns: Sequence[ColumnDescriptor], key: str, visible: bool
) -> list[ColumnDescriptor]:
    """Return a copy of ``columns`` with the visibility of ``key`` updated."""
    return [
        column.model_copy(update={"is_visible": visible}) if column.key == key else column
        for column in columns
    ]


def index_of(columns: Sequence[ColumnDescriptor], key: str) -> int:
    """Return the position of ``key`` in ``columns``.

    Raises:
        KeyError: If no column has that key
    """
    for position, column in enumerate(columns):
        if column.key == key:
            return position
    raise KeyError(key)
