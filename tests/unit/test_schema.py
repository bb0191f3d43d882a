"""Unit tests for the canonical invoice record.

Tests cover:
- Field alias reconciliation across product variants
- Issue date resolution during validation
- Status normalization
- Validation errors for malformed records
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from services.ledger.dates import INVALID_DATE
from services.ledger.schema import RECORD_FIELDS, InvoiceRecord, InvoiceStatus


def test_record_from_snake_case() -> None:
    """Test validation from canonical field names."""
    record = InvoiceRecord(
        invoice_number="INV-001",
        counterparty_name="Acme",
        amount=Decimal("100.00"),
        issue_date="2024-01-15",
    )

    assert record.invoice_number == "INV-001"
    assert record.counterparty_name == "Acme"
    assert record.issue_date == datetime(2024, 1, 15, tzinfo=UTC)
    assert record.is_draft is True
    assert record.has_valid_date is True


def test_record_from_camel_case_variant() -> None:
    """Test the camelCase variant with tax and VAT fields."""
    record = InvoiceRecord.model_validate(
        {
            "id": "abc",
            "userId": "user-1",
            "invoiceNumber": "F-2024-07",
            "businessName": "Tienda S.L.",
            "cif": "B12345678",
            "amount": 211.77,
            "vatRate": 21,
            "vatAmount": "36.75",
            "date": {"seconds": int(datetime(2024, 7, 1, tzinfo=UTC).timestamp())},
        }
    )

    assert record.owner_id == "user-1"
    assert record.invoice_number == "F-2024-07"
    assert record.counterparty_name == "Tienda S.L."
    assert record.tax_id == "B12345678"
    assert record.vat_rate == Decimal("21")
    assert record.vat_amount == Decimal("36.75")
    assert record.issue_date == datetime(2024, 7, 1, tzinfo=UTC)
    assert record.is_draft is False


def test_record_from_customer_variant() -> None:
    """Test the customer-facing variant with invoiceId, customerName and status."""
    record = InvoiceRecord.model_validate(
        {
            "invoiceId": "INV-9",
            "customerName": "Globex",
            "amount": "10",
            "issueDate": "2024-02-01",
            "status": "paid",
        }
    )

    assert record.invoice_number == "INV-9"
    assert record.counterparty_name == "Globex"
    assert record.status is InvoiceStatus.PAID


def test_unresolvable_date_keeps_sentinel() -> None:
    """Test that a bad date does not fail validation."""
    record = InvoiceRecord(
        invoice_number="INV-001", counterparty_name="Acme", amount=1, issue_date="garbage"
    )

    assert record.issue_date is INVALID_DATE
    assert record.has_valid_date is False


def test_empty_status_is_none() -> None:
    """Test that an empty status string becomes None."""
    record = InvoiceRecord(
        invoice_number="INV-001",
        counterparty_name="Acme",
        amount=1,
        issue_date="2024-01-15",
        status="  ",
    )

    assert record.status is None


def test_unknown_status_rejected() -> None:
    """Test that statuses outside Paid/Pending/Overdue are rejected."""
    with pytest.raises(ValidationError):
        InvoiceRecord(
            invoice_number="INV-001",
            counterparty_name="Acme",
            amount=1,
            issue_date="2024-01-15",
            status="refunded",
        )


def test_negative_amount_rejected() -> None:
    """Test that amounts must be non-negative."""
    with pytest.raises(ValidationError):
        InvoiceRecord(
            invoice_number="INV-001", counterparty_name="Acme", amount=-1, issue_date="2024-01-15"
        )


def test_missing_required_field_rejected() -> None:
    """Test that required fields are enforced."""
    with pytest.raises(ValidationError):
        InvoiceRecord.model_validate({"invoice_number": "INV-001", "amount": 1})


def test_vat_rate_bounds() -> None:
    """Test that VAT rate must lie in 0..100."""
    with pytest.raises(ValidationError):
        InvoiceRecord(
            invoice_number="INV-001",
            counterparty_name="Acme",
            amount=1,
            issue_date="2024-01-15",
            vat_rate=150,
        )


def test_record_is_immutable() -> None:
    """Test that records cannot be mutated in place."""
    record = InvoiceRecord(
        invoice_number="INV-001", counterparty_name="Acme", amount=1, issue_date="2024-01-15"
    )

    with pytest.raises(ValidationError):
        record.amount = Decimal("5")  # type: ignore[misc]


def test_unknown_fields_ignored() -> None:
    """Test that extra store fields are dropped."""
    record = InvoiceRecord.model_validate(
        {
            "invoice_number": "INV-001",
            "counterparty_name": "Acme",
            "amount": 1,
            "issue_date": "2024-01-15",
            "createdAt": "2024-01-15",
        }
    )

    assert not hasattr(record, "createdAt")


def test_record_fields_in_declaration_order() -> None:
    """Test the attribute names exposed to the column model."""
    assert RECORD_FIELDS[:4] == ("id", "owner_id", "invoice_number", "counterparty_name")
    assert "issue_date" in RECORD_FIELDS
    assert "vat_rate" in RECORD_FIELDS
