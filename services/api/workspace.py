"""Process-local working collection and column configuration for the API.

Holds the session state the ledger reads from: the invoice records and the
column list. Every change swaps in a new immutable snapshot built by the pure
ledger operations, so readers never observe a half-applied update.
"""

import logging
import threading
import uuid
from collections.abc import Iterable, Sequence

from services.ledger.collection import add_record, find_record, remove_record, replace_record
from services.ledger.columns import (
    DEFAULT_COLUMNS,
    ColumnDescriptor,
    Direction,
    index_of,
    move_column,
    set_visibility,
)
from services.ledger.schema import InvoiceRecord

logger = logging.getLogger(__name__)


class InvoiceWorkspace:
    """Thread-safe holder for the working collection and the column list."""

    def __init__(
        self,
        records: Iterable[InvoiceRecord] = (),
        columns: Sequence[ColumnDescriptor] = DEFAULT_COLUMNS,
    ) -> None:
        self._lock = threading.Lock()
        self._records: tuple[InvoiceRecord, ...] = tuple(records)
        self._columns: tuple[ColumnDescriptor, ...] = tuple(columns)

    @property
    def records(self) -> tuple[InvoiceRecord, ...]:
        return self._records

    @property
    def columns(self) -> tuple[ColumnDescriptor, ...]:
        return self._columns

    def get(self, record_id: str) -> InvoiceRecord:
        return find_record(self._records, record_id)

    def create(self, draft: InvoiceRecord, owner_id: str) -> InvoiceRecord:
        """Assign an id and owner to a draft and add it to the collection."""
        record = draft.model_copy(update={"id": uuid.uuid4().hex, "owner_id": owner_id})
        with self._lock:
            self._records = tuple(add_record(self._records, record))
        logger.info(f"Added invoice {record.id} ({record.invoice_number})")
        return record

    def replace(self, record_id: str, replacement: InvoiceRecord) -> InvoiceRecord:
        """Replace a record wholesale, keeping its id and owner.

        Raises:
            RecordNotFoundError: If record_id is unknown
        """
        with self._lock:
            current = find_record(self._records, record_id)
            record = replacement.model_copy(update={"id": record_id, "owner_id": current.owner_id})
            self._records = tuple(replace_record(self._records, record))
        logger.info(f"Replaced invoice {record_id}")
        return record

    def remove(self, record_id: str) -> None:
        """Remove a record.

        Raises:
            RecordNotFoundError: If record_id is unknown
        """
        with self._lock:
            self._records = tuple(remove_record(self._records, record_id))
        logger.info(f"Removed invoice {record_id}")

    def set_columns(self, columns: Sequence[ColumnDescriptor]) -> tuple[ColumnDescriptor, ...]:
        with self._lock:
            self._columns = tuple(columns)
        return self._columns

    def move_column(self, key: str, direction: Direction) -> tuple[ColumnDescriptor, ...]:
        """Move a column one step.

        Raises:
            KeyError: If no column has that key
        """
        with self._lock:
            position = index_of(self._columns, key)
            self._columns = tuple(move_column(self._columns, position, direction))
        return self._columns

    def set_column_visibility(self, key: str, visible: bool) -> tuple[ColumnDescriptor, ...]:
        """Show or hide a column.

        Raises:
            KeyError: If no column has that key
        """
        with self._lock:
            index_of(self._columns, key)
            self._columns = tuple(set_visibility(self._columns, key, visible))
        return self._columns
