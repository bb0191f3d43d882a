"""Invoice record model shared by the ledger, the store decoder, and the API.

Records arrive from manual entry, AI extraction, and document store reads, and
each source names its fields differently. ``InvoiceRecord`` accepts all of
those spellings and normalizes them into one canonical shape:

- snake_case names (``invoice_number``)
- camelCase names (``invoiceNumber``)
- legacy product variants (``invoiceId``, ``businessName``, ``customerName``,
  ``date``, ``userId``, ``cif``)

The issue date is resolved to a canonical instant during validation; see
``services.ledger.dates``.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from services.ledger.dates import InvalidDate, is_valid_date, resolve_date


class InvoiceStatus(str, Enum):
    """Payment status of an invoice."""

    PAID = "Paid"
    PENDING = "Pending"
    OVERDUE = "Overdue"


CanonicalDate = Annotated[datetime | InvalidDate, BeforeValidator(resolve_date)]


class InvoiceRecord(BaseModel):
    """Canonical invoice record.

    Drafts (manual entry or extraction output) have no ``id`` or ``owner_id``
    until a persistence collaborator assigns them. Records are immutable;
    changes are made by full replacement.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = Field(None, description="Opaque identifier, stable across reads")
    owner_id: str | None = Field(
        None,
        validation_alias=AliasChoices("owner_id", "ownerId", "userId"),
        description="Owner of the record",
    )
    invoice_number: str = Field(
        ...,
        validation_alias=AliasChoices("invoice_number", "invoiceNumber", "invoiceId"),
        description="Invoice number as printed on the document",
    )
    counterparty_name: str = Field(
        ...,
        validation_alias=AliasChoices(
            "counterparty_name", "counterpartyName", "businessName", "customerName"
        ),
        description="Business or customer name",
    )
    amount: Decimal = Field(..., ge=0, description="Total amount, currency agnostic")
    issue_date: CanonicalDate = Field(
        ...,
        validation_alias=AliasChoices("issue_date", "issueDate", "date"),
        description="Canonical issue instant, or the invalid-date sentinel",
    )

    # Variant-dependent optional fields
    tax_id: str | None = Field(
        None,
        validation_alias=AliasChoices("tax_id", "taxId", "cif"),
        description="Tax ID (CIF, NIF, VAT ID)",
    )
    address: str | None = Field(None, description="Counterparty address")
    concept: str | None = Field(None, description="What the invoice is for")
    vat_rate: Decimal | None = Field(
        None,
        ge=0,
        le=100,
        validation_alias=AliasChoices("vat_rate", "vatRate"),
        description="VAT rate in percent",
    )
    vat_amount: Decimal | None = Field(
        None,
        validation_alias=AliasChoices("vat_amount", "vatAmount"),
        description="VAT amount",
    )
    status: InvoiceStatus | None = Field(None, description="Payment status")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, InvoiceStatus):
            cleaned = value.strip()
            return cleaned.capitalize() if cleaned else None
        return value

    @property
    def has_valid_date(self) -> bool:
        """True when the issue date resolved to a real instant."""
        return is_valid_date(self.issue_date)

    @property
    def is_draft(self) -> bool:
        """True until a persistence collaborator has assigned an id."""
        return self.id is None


# Attribute names a column may point at, in declaration order
RECORD_FIELDS: tuple[str, ...] = tuple(InvoiceRecord.model_fields)
