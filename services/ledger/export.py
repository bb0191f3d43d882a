"""Spreadsheet-compatible CSV export of invoice records.

Cells are rendered by the same ``ValueFormatter`` the table uses, so the
export matches what is on screen. Two export-only adjustments apply:

- numeric cells can be written with a comma decimal separator for locales
  whose spreadsheets expect it (the table view always uses a point)
- the text starts with a UTF-8 byte-order mark so spreadsheet applications
  detect the encoding of non-ASCII names
"""

import csv
import io
import logging
from collections.abc import Iterable, Sequence
from datetime import date

from services.ledger.columns import ColumnDescriptor, ColumnType, column_type, visible_columns
from services.ledger.formatter import ValueFormatter
from services.ledger.schema import InvoiceRecord

logger = logging.getLogger(__name__)

BOM = "\ufeff"
NUMERIC_TYPES = frozenset({ColumnType.CURRENCY, ColumnType.PERCENTAGE})

_SWAP_SEPARATORS = str.maketrans({",": ".", ".": ","})


def localize_number(text: str, decimal_separator: str) -> str:
    """Rewrite a formatted number for a locale's decimal separator.

    With a comma separator the decimal point and the thousands separator trade
    places: "$1,234.50" becomes "$1.234,50".
    """
    if decimal_separator != ",":
        return text
    return text.translate(_SWAP_SEPARATORS)


def export_columns(columns: Sequence[ColumnDescriptor]) -> list[ColumnDescriptor]:
    """Visible columns that carry data, in display order."""
    return [column for column in visible_columns(columns) if column.is_exportable]


def to_csv(
    records: Iterable[InvoiceRecord],
    columns: Sequence[ColumnDescriptor],
    formatter: ValueFormatter | None = None,
    decimal_separator: str = ".",
) -> str:
    """Serialize records to CSV text.

    Records are written in the order given; callers pass the filtered and
    sorted, but unpaginated, selection. A cell is quoted only when it contains
    a comma, a double quote, a line feed or a carriage return.

    Args:
        records: Records to export
        columns: Full column configuration; hidden and display-only columns are skipped
        formatter: Formatter shared with the table view
        decimal_separator: "." or "," for numeric cells

    Returns:
        CSV text prefixed with a byte-order mark
    """
    formatter = formatter or ValueFormatter()
    selected = export_columns(columns)
    numeric = [column_type(column) in NUMERIC_TYPES for column in selected]

    lines = [format_row([column.label for column in selected])]
    for record in records:
        cells = [formatter.format(record, column) for column in selected]
        lines.append(
            format_row(
                [
                    localize_number(cell, decimal_separator) if is_numeric else cell
                    for cell, is_numeric in zip(cells, numeric, strict=True)
                ]
            )
        )

    logger.debug(f"Exported {len(lines) - 1} rows across {len(selected)} columns")
    return BOM + "".join(lines)


def format_row(cells: Sequence[str]) -> str:
    """Render one CSV row terminated by a line feed.

    A cell is quoted when it holds the delimiter, a double quote, a line feed
    or a carriage return. The writer runs with a CRLF terminator so that a bare
    carriage return also triggers quoting; the terminator is then swapped.
    """
    scratch = io.StringIO()
    csv.writer(scratch, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL).writerow(cells)
    return scratch.getvalue().removesuffix("\r\n") + "\n"


def export_filename(today: date, prefix: str = "invoices") -> str:
    """Return the download filename for an export made on ``today``."""
    return f"{prefix}-{today.isoformat()}.csv"
