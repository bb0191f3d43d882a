"""Export invoices from a JSON file to a dated CSV.

Reads either a plain JSON array of invoice objects (any supported field
spelling) or, with ``--firestore``, the JSON array returned by the Firestore
``runQuery`` REST endpoint. Applies the same filters, sort, and column
model as the API and writes ``invoices-<today>.csv``.

Usage:
    python -m scripts.export_invoices --input data/invoices.json \\
        --search acme --start 2024-01-01 --end 2024-03-31 \\
        --columns invoice_number,counterparty_name,issue_date,amount \\
        --decimal-separator ,
"""

import argparse
import json
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from services.ledger.columns import DEFAULT_COLUMNS, ColumnDescriptor
from services.ledger.filters import DateRange, FilterState
from services.ledger.schema import InvoiceRecord
from services.ledger.service import CsvExport, LedgerService
from services.shared.config import get_settings
from services.store.firestore import records_from_query

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def load_records(path: Path, firestore: bool = False) -> list[InvoiceRecord]:
    """Load invoice records from a JSON file.

    Args:
        path: JSON file containing an array
        firestore: Treat the array as a Firestore runQuery response

    Returns:
        Validated records in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file does not contain a JSON array
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array in {path}, got {type(data).__name__}")

    if firestore:
        return records_from_query(data)

    records = [InvoiceRecord.model_validate(item) for item in data]
    logger.info(f"Loaded {len(records)} invoices from {path.name}")
    return records


def select_columns(keys: Sequence[str] | None) -> list[ColumnDescriptor]:
    """Build the export column list.

    Args:
        keys: Column keys in the desired order, or None for the default layout

    Returns:
        Columns from the default layout; when ``keys`` is given, exactly those
        columns are visible, in that order

    Raises:
        ValueError: If a key is not a known column
    """
    if not keys:
        return list(DEFAULT_COLUMNS)

    by_key = {column.key: column for column in DEFAULT_COLUMNS}
    unknown = [key for key in keys if key not in by_key]
    if unknown:
        available = ", ".join(by_key)
        raise ValueError(f"Unknown columns: {', '.join(unknown)}. Available: {available}")

    return [by_key[key].model_copy(update={"is_visible": True}) for key in keys]


def build_filters(search: str, start: date | None, end: date | None) -> FilterState:
    """Build filter state from CLI options.

    Raises:
        ValueError: If an end date is given without a start date
    """
    if end is not None and start is None:
        raise ValueError("--end requires --start")
    date_range = DateRange(start=start, end=end) if start is not None else None
    return FilterState(search=search, date_range=date_range)


def write_export(export: CsvExport, output_dir: Path) -> Path:
    """Write an export to ``output_dir`` and return the file path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export.filename
    # newline="" keeps the writer's line endings byte-exact
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(export.content)
    logger.info(f"Wrote {export.row_count} invoices to {path}")
    return path


def main(argv: Sequence[str] | None = None) -> Path:
    """Parse arguments, export, and return the written file path."""
    parser = argparse.ArgumentParser(description="Export invoices to CSV")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="JSON file with invoice records",
    )
    parser.add_argument(
        "--firestore",
        action="store_true",
        help="Input is a Firestore runQuery response",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Keep invoices whose customer or invoice number contains this text",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="First day of the date range (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Last day of the date range (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--columns",
        type=lambda value: [key.strip() for key in value.split(",") if key.strip()],
        default=None,
        help="Comma-separated column keys in export order",
    )
    parser.add_argument(
        "--decimal-separator",
        choices=[".", ","],
        default=None,
        help="Decimal separator for amounts and rates (default: APP_EXPORT_DECIMAL_SEPARATOR)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the CSV file",
    )

    args = parser.parse_args(argv)

    settings = get_settings()
    if args.decimal_separator is not None:
        settings = settings.model_copy(update={"export_decimal_separator": args.decimal_separator})

    try:
        columns = select_columns(args.columns)
        filters = build_filters(args.search, args.start, args.end)
    except ValueError as e:
        parser.error(str(e))

    records = load_records(args.input, firestore=args.firestore)
    export = LedgerService(settings).export(records, columns, filters)
    return write_export(export, args.output_dir)


if __name__ == "__main__":
    main()
