"""Invoice fields returned by AI document scanning.

The extraction output is trusted as-is; it is turned into a draft
``InvoiceRecord`` that a persistence collaborator later completes with an id
and an owner.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from services.ledger.schema import InvoiceRecord


class ExtractedInvoice(BaseModel):
    """Structured invoice data extracted from a scanned document."""

    invoice_number: str = Field(
        ..., description="Invoice identifier (plausible one generated if absent)"
    )
    counterparty_name: str = Field(..., description="Business or customer being invoiced")
    tax_id: str | None = Field(None, description="Tax ID (CIF, NIF, VAT ID)")
    address: str | None = Field(None, description="Full address of the invoiced business")
    concept: str | None = Field(None, description="Short description of what was invoiced")
    amount: Decimal = Field(..., ge=0, description="Total amount due")
    vat_rate: Decimal | None = Field(None, ge=0, le=100, description="VAT rate in percent")
    vat_amount: Decimal | None = Field(None, description="VAT amount")
    issue_date: str = Field(..., description="Issue date as YYYY-MM-DD")

    def to_draft(self) -> InvoiceRecord:
        """Convert to a draft record without id or owner."""
        return InvoiceRecord.model_validate(self.model_dump())
