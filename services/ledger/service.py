"""Ledger facade composing filtering, sorting, paging, formatting and export.

The table view and the CSV export both start from ``select``, which applies
the filter state and the descending-date sort, and both render cells through
the same ``ValueFormatter``. The view then slices a page; the export keeps
every matching record.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime

from pydantic import BaseModel

from services.ledger.columns import ColumnDescriptor, visible_columns
from services.ledger.export import export_filename, to_csv
from services.ledger.filters import FilterState, filter_records
from services.ledger.formatter import ValueFormatter
from services.ledger.paging import paginate, sort_descending_by_date
from services.ledger.schema import InvoiceRecord
from services.shared.config import Settings

logger = logging.getLogger(__name__)


class TableRow(BaseModel):
    """One rendered table row.

    Attributes:
        record: Source record
        cells: Formatted cell text keyed by column key, in display order
    """

    record: InvoiceRecord
    cells: dict[str, str]


class LedgerView(BaseModel):
    """Everything the table needs to render one page."""

    columns: list[ColumnDescriptor]
    rows: list[TableRow]
    page: int
    page_size: int
    total: int
    total_pages: int


class CsvExport(BaseModel):
    """CSV download payload."""

    filename: str
    content: str
    row_count: int

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


class LedgerService:
    """Builds table views and CSV exports from an in-memory record collection.

    Stateless apart from its configuration; every call is a pure function of
    its arguments.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize ledger service.

        Args:
            settings: Application settings (page size, currency, export locale)
        """
        self.settings = settings
        self.formatter = ValueFormatter(currency_symbol=settings.currency_symbol)

    def select(
        self, records: Iterable[InvoiceRecord], filters: FilterState | None = None
    ) -> list[InvoiceRecord]:
        """Apply the filters and sort the survivors newest first."""
        filters = filters or FilterState()
        return sort_descending_by_date(filter_records(records, filters.predicate()))

    def render_page(
        self,
        selected: Sequence[InvoiceRecord],
        columns: Sequence[ColumnDescriptor],
        page: int = 1,
    ) -> LedgerView:
        """Slice ``page`` out of an already selected collection and format its cells."""
        shown = visible_columns(columns)
        sliced = paginate(selected, self.settings.page_size, page)
        rows = [
            TableRow(
                record=record,
                cells={column.key: self.formatter.format(record, column) for column in shown},
            )
            for record in sliced.items
        ]
        return LedgerView(
            columns=shown,
            rows=rows,
            page=sliced.page,
            page_size=sliced.page_size,
            total=sliced.total,
            total_pages=sliced.total_pages,
        )

    def build_view(
        self,
        records: Iterable[InvoiceRecord],
        columns: Sequence[ColumnDescriptor],
        filters: FilterState | None = None,
        page: int = 1,
    ) -> LedgerView:
        """Filter, sort, paginate and format records for the table."""
        return self.render_page(self.select(records, filters), columns, page)

    def export(
        self,
        records: Iterable[InvoiceRecord],
        columns: Sequence[ColumnDescriptor],
        filters: FilterState | None = None,
        today: date | None = None,
    ) -> CsvExport:
        """Export every record matching ``filters`` (ignoring pagination).

        Args:
            records: Working collection
            columns: Column configuration shared with the table
            filters: Filter state shared with the table
            today: Export date for the filename; defaults to the current UTC date

        Returns:
            CsvExport with the dated filename and the CSV text
        """
        selected = self.select(records, filters)
        content = to_csv(
            selected,
            columns,
            formatter=self.formatter,
            decimal_separator=self.settings.export_decimal_separator,
        )
        filename = export_filename(
            today or datetime.now(UTC).date(), prefix=self.settings.export_filename_prefix
        )
        logger.info(f"Exported {len(selected)} invoices to {filename}")
        return CsvExport(filename=filename, content=content, row_count=len(selected))
