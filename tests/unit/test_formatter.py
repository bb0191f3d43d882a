"""Unit tests for the value formatter shared by table and export."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from services.ledger.columns import DEFAULT_COLUMNS, ColumnType
from services.ledger.dates import INVALID_DATE
from services.ledger.formatter import NOT_AVAILABLE, ValueFormatter
from services.ledger.schema import InvoiceRecord, InvoiceStatus


@pytest.fixture
def formatter() -> ValueFormatter:
    """Create formatter with the default currency symbol."""
    return ValueFormatter()


@pytest.fixture
def record() -> InvoiceRecord:
    """Sample record with every optional field set."""
    return InvoiceRecord(
        id="r1",
        invoice_number="INV-001",
        counterparty_name="Acme",
        amount=Decimal("1234.5"),
        issue_date=datetime(2024, 1, 15, 22, 30, tzinfo=UTC),
        tax_id="B12345678",
        vat_rate=Decimal("21.00"),
        vat_amount=Decimal("259.25"),
        status=InvoiceStatus.PAID,
    )


def test_format_row(formatter: ValueFormatter, record: InvoiceRecord) -> None:
    """Test formatting every default column of a record."""
    cells = {column.key: formatter.format(record, column) for column in DEFAULT_COLUMNS}

    assert cells == {
        "invoice_number": "INV-001",
        "counterparty_name": "Acme",
        "tax_id": "B12345678",
        "address": NOT_AVAILABLE,
        "concept": NOT_AVAILABLE,
        "issue_date": "2024-01-15",
        "amount": "$1,234.50",
        "vat_rate": "21%",
        "vat_amount": "$259.25",
        "status": "Paid",
        "actions": "",
    }


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("0"), "$0.00"),
        (None, "$0.00"),
        ("", "$0.00"),
        (Decimal("1234567.891"), "$1,234,567.89"),
        (Decimal("0.005"), "$0.01"),
        (Decimal("2.345"), "$2.35"),
        (12.5, "$12.50"),
        (Decimal("-5"), "-$5.00"),
        ("not a number", "$0.00"),
    ],
)
def test_format_currency(formatter: ValueFormatter, value: object, expected: str) -> None:
    """Test currency rendering, rounding half up and defaulting missing to zero."""
    assert formatter.format_value(value, ColumnType.CURRENCY) == expected


def test_format_currency_custom_symbol() -> None:
    """Test a configured currency symbol."""
    assert ValueFormatter(currency_symbol="€").format_currency(Decimal("3")) == "€3.00"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("21"), "21%"),
        (Decimal("21.00"), "21%"),
        (Decimal("10.5"), "10.5%"),
        (0, "0%"),
        (None, NOT_AVAILABLE),
    ],
)
def test_format_percentage(formatter: ValueFormatter, value: object, expected: str) -> None:
    """Test percentage rendering."""
    assert formatter.format_value(value, ColumnType.PERCENTAGE) == expected


def test_format_invalid_date(formatter: ValueFormatter) -> None:
    """Test that the sentinel renders as 'Invalid Date'."""
    assert formatter.format_value(INVALID_DATE, ColumnType.DATE) == "Invalid Date"
    assert formatter.format_value(None, ColumnType.DATE) == "Invalid Date"


def test_format_date_uses_utc_day(formatter: ValueFormatter) -> None:
    """Test that the rendered day is the UTC calendar day."""
    assert formatter.format_value("2024-01-15T23:30:00-05:00", ColumnType.DATE) == "2024-01-16"


def test_format_missing_text_and_status(formatter: ValueFormatter) -> None:
    """Test 'N/A' for missing text and status values."""
    assert formatter.format_value(None, ColumnType.TEXT) == NOT_AVAILABLE
    assert formatter.format_value("", ColumnType.TEXT) == NOT_AVAILABLE
    assert formatter.format_value(None, ColumnType.STATUS) == NOT_AVAILABLE
    assert formatter.format_value(InvoiceStatus.OVERDUE, ColumnType.STATUS) == "Overdue"


def test_format_is_deterministic(formatter: ValueFormatter, record: InvoiceRecord) -> None:
    """Test that formatting the same record twice yields identical cells."""
    first = [formatter.format(record, column) for column in DEFAULT_COLUMNS]
    second = [formatter.format(record, column) for column in DEFAULT_COLUMNS]

    assert first == second


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("1e27"), "$1,000,000,000,000,000,000,000,000,000.00"),
        (
            Decimal("123456789012345678901234567890.125"),
            "$123,456,789,012,345,678,901,234,567,890.13",
        ),
    ],
)
def test_format_currency_beyond_default_precision(
    formatter: ValueFormatter, value: Decimal, expected: str
) -> None:
    """Test that amounts wider than 28 digits keep every digit and their cents."""
    assert formatter.format_value(value, ColumnType.CURRENCY) == expected


def test_format_large_amount_record(formatter: ValueFormatter) -> None:
    """Test formatting a record whose amount exceeds the default decimal precision."""
    record = InvoiceRecord(
        invoice_number="INV-BIG",
        counterparty_name="Acme",
        amount=Decimal("1e27"),
        issue_date="2024-01-15",
    )
    column = next(c for c in DEFAULT_COLUMNS if c.key == "amount")

    assert formatter.format(record, column).endswith(",000.00")
