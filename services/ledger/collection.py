"""Working-collection operations.

The working collection is treated as immutable per render: adding, replacing
and removing records each return a new list and leave the input untouched.
"""

from collections.abc import Sequence

from services.ledger.schema import InvoiceRecord


class RecordNotFoundError(LookupError):
    """Raised when a record id is not present in the working collection."""

    def __init__(self, record_id: str | None) -> None:
        super().__init__(f"Invoice not found: {record_id}")
        self.record_id = record_id


def find_record(records: Sequence[InvoiceRecord], record_id: str) -> InvoiceRecord:
    """Return the record with ``record_id``.

    Raises:
        RecordNotFoundError: If no record has that id
    """
    for record in records:
        if record.id == record_id:
            return record
    raise RecordNotFoundError(record_id)


def add_record(records: Sequence[InvoiceRecord], record: InvoiceRecord) -> list[InvoiceRecord]:
    """Return a new collection with ``record`` appended."""
    return [*records, record]


def replace_record(
    records: Sequence[InvoiceRecord], record: InvoiceRecord
) -> list[InvoiceRecord]:
    """Return a new collection where the record sharing ``record.id`` is replaced.

    Raises:
        RecordNotFoundError: If the id is missing or unknown
    """
    if record.id is None or not any(existing.id == record.id for existing in records):
        raise RecordNotFoundError(record.id)
    return [record if existing.id == record.id else existing for existing in records]


def remove_record(records: Sequence[InvoiceRecord], record_id: str) -> list[InvoiceRecord]:
    """Return a new collection without the record ``record_id``.

    Raises:
        RecordNotFoundError: If no record has that id
    """
    remaining = [record for record in records if record.id != record_id]
    if len(remaining) == len(records):
        raise RecordNotFoundError(record_id)
    return remaining
