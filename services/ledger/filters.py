"""Filter predicates for the invoice ledger.

A predicate combines a free-text search and an inclusive date range. Either
part defaults to "accept everything", so an empty ``FilterState`` is the
identity filter.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, time

from pydantic import BaseModel, Field

from services.ledger.dates import is_valid_date
from services.ledger.schema import InvoiceRecord

logger = logging.getLogger(__name__)

RecordPredicate = Callable[[InvoiceRecord], bool]


class DateRange(BaseModel):
    """Inclusive calendar-day range.

    Attributes:
        start: First day of the range
        end: Last day of the range; defaults to ``start`` (a single day)
    """

    start: date
    end: date | None = None

    def bounds(self) -> tuple[datetime, datetime]:
        """Return (start of first day, end of last day) in UTC.

        Reversed bounds are swapped rather than producing an empty range.
        """
        first = self.start
        last = self.end if self.end is not None else first
        if last < first:
            first, last = last, first
        return (
            datetime.combine(first, time.min, tzinfo=UTC),
            datetime.combine(last, time.max, tzinfo=UTC),
        )

    def contains(self, record: InvoiceRecord) -> bool:
        if not is_valid_date(record.issue_date):
            return False
        lower, upper = self.bounds()
        return lower <= record.issue_date <= upper


class FilterState(BaseModel):
    """User-controlled filter inputs."""

    search: str = Field(default="", description="Free-text search term")
    date_range: DateRange | None = Field(default=None, description="Optional date range")

    def predicate(self) -> RecordPredicate:
        return build_predicate(self.search, self.date_range)


def matches_search(record: InvoiceRecord, search_term: str | None) -> bool:
    """Case-insensitive substring match on counterparty name or invoice number."""
    normalized = (search_term or "").strip().lower()
    if not normalized:
        return True
    return any(
        normalized in value.lower()
        for value in (record.counterparty_name, record.invoice_number)
        if value
    )


def build_predicate(
    search_term: str | None = None, date_range: DateRange | None = None
) -> RecordPredicate:
    """Build a record predicate from a search term and an optional date range.

    Args:
        search_term: Text matched against counterparty name and invoice number
        date_range: Inclusive day range; records with an invalid date never match

    Returns:
        Function returning True for records that pass both filters
    """

    def predicate(record: InvoiceRecord) -> bool:
        if not matches_search(record, search_term):
            return False
        return date_range is None or date_range.contains(record)

    return predicate


def filter_records(
    records: Iterable[InvoiceRecord], predicate: RecordPredicate
) -> list[InvoiceRecord]:
    """Return a new list with the records accepted by ``predicate``."""
    matched = [record for record in records if predicate(record)]
    logger.debug(f"Filter kept {len(matched)} records")
    return matched
