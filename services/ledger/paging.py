"""Deterministic ordering and page slicing for invoice records."""

import math
from collections.abc import Iterable, Sequence

from pydantic import BaseModel

from services.ledger.dates import is_valid_date
from services.ledger.schema import InvoiceRecord


class Page(BaseModel):
    """A single page of records.

    Attributes:
        items: Records on this page (empty when the page is out of range)
        page: Requested page number (1-indexed)
        page_size: Maximum number of records per page
        total: Number of records across all pages
        total_pages: Number of pages, at least 1
    """

    items: list[InvoiceRecord]
    page: int
    page_size: int
    total: int
    total_pages: int

    @property
    def has_more(self) -> bool:
        """Return True when a later page exists."""
        return self.page < self.total_pages


def _newest_first_key(record: InvoiceRecord) -> tuple[bool, float]:
    if is_valid_date(record.issue_date):
        return True, record.issue_date.timestamp()
    return False, 0.0


def sort_descending_by_date(records: Iterable[InvoiceRecord]) -> list[InvoiceRecord]:
    """Return records newest first.

    Records with an invalid date follow every dated record. Equal dates, and
    the invalid-date group, keep their input order.
    """
    # reverse=True keeps equal keys in input order
    return sorted(records, key=_newest_first_key, reverse=True)


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` records; never less than 1."""
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, page_count: int) -> int:
    """Clamp a requested page number into ``[1, page_count]``."""
    return min(max(page, 1), max(page_count, 1))


def paginate(records: Sequence[InvoiceRecord], page_size: int, page_number: int) -> Page:
    """Slice one page out of ``records``.

    The page number is not clamped: pages outside ``[1, total_pages]`` come
    back empty.

    Raises:
        ValueError: If page_size is less than 1
    """
    pages = total_pages(len(records), page_size)
    if 1 <= page_number <= pages:
        start = (page_number - 1) * page_size
        items = list(records[start : start + page_size])
    else:
        items = []
    return Page(
        items=items,
        page=page_number,
        page_size=page_size,
        total=len(records),
        total_pages=pages,
    )
