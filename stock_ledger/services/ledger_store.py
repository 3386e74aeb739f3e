"""
Ledger store: append-only persistence of stock entries.

A store only ever appends. Every append call is one batch: all of
its entries become visible together or none do. The services
above it depend on the LedgerStore interface, so the SQL table
can be replaced by another medium without touching business rules.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_ledger.errors import StorageError, ValidationError
from stock_ledger.models.stock_entry import StockEntry, new_entry_id, utcnow
from stock_ledger.services.movements import QUANTITY_LIMITS, fits_quantity_column

logger = logging.getLogger(__name__)


class LedgerStore(ABC):

    def append(self, entries: Sequence[StockEntry]) -> list[StockEntry]:
        """
        Append entries as a single batch.

        Every entry is checked and stamped (id, batch_id, date,
        created_at) before anything is written, so a bad entry
        anywhere in the batch means nothing is written at all.
        """
        batch = list(entries)
        if not batch:
            return []

        batch_id = uuid.uuid4()
        now = utcnow()
        for position, entry in enumerate(batch, start=1):
            _check_entry(position, entry)
            entry.id = entry.id or new_entry_id()
            entry.batch_id = batch_id
            entry.date = entry.date or now.date()
            entry.created_at = entry.created_at or now

        written = self._write(batch)
        logger.debug("Appended batch %s with %d entries", batch_id, len(written))
        return written

    @abstractmethod
    def _write(self, batch: list[StockEntry]) -> list[StockEntry]:
        """Persist an already validated batch."""

    @abstractmethod
    def list_all(self) -> list[StockEntry]:
        """Return every entry, newest first."""

    @abstractmethod
    def list_by_key(self, description: str, unit: str) -> list[StockEntry]:
        """Return entries for one (description, unit) key, newest first."""


def _check_entry(position: int, entry: StockEntry) -> None:
    entry.description = (entry.description or "").strip()
    entry.unit = (entry.unit or "").strip()
    if entry.item_code is not None:
        entry.item_code = entry.item_code.strip() or None

    if not entry.description:
        raise ValidationError(f"Entry {position}: description is required")
    if not entry.unit:
        raise ValidationError(
            f"Entry {position} ({entry.description}): unit is required"
        )
    if entry.quantity is None or entry.quantity == 0:
        raise ValidationError(
            f"Entry {position} ({entry.description}): quantity must not be zero"
        )
    if not fits_quantity_column(entry.quantity):
        raise ValidationError(
            f"Entry {position} ({entry.description}): "
            f"quantity must have {QUANTITY_LIMITS}"
        )


class SqlLedgerStore(LedgerStore):
    """
    Ledger stored in the stock_entries table.

    append() only flushes. The batch becomes visible to other
    sessions when the caller commits, which keeps a receipt's
    entries and its shipment status change in one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def _write(self, batch: list[StockEntry]) -> list[StockEntry]:
        try:
            self.db.add_all(batch)
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not append stock entries: {e}") from e
        return batch

    def list_all(self) -> list[StockEntry]:
        return self._select(select(StockEntry))

    def list_by_key(self, description: str, unit: str) -> list[StockEntry]:
        return self._select(
            select(StockEntry).where(
                StockEntry.description == description.strip(),
                StockEntry.unit == unit.strip(),
            )
        )

    def _select(self, stmt) -> list[StockEntry]:
        try:
            entries = self.db.execute(
                stmt.order_by(StockEntry.seq.desc())
            ).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read stock entries: {e}") from e
        return list(entries)


class InMemoryLedgerStore(LedgerStore):
    """
    Ledger kept in a Python list, oldest first.

    A batch is published by swapping in a new list, so a reader
    iterating the old list never sees half of a batch.
    """

    def __init__(self):
        self._entries: list[StockEntry] = []
        self._seq_lock = threading.Lock()
        self._next_seq = 1

    def _write(self, batch: list[StockEntry]) -> list[StockEntry]:
        with self._seq_lock:
            for entry in batch:
                entry.seq = self._next_seq
                self._next_seq += 1
            self._entries = self._entries + batch
        return batch

    def list_all(self) -> list[StockEntry]:
        return list(reversed(self._entries))

    def list_by_key(self, description: str, unit: str) -> list[StockEntry]:
        key = (description.strip(), unit.strip())
        return [e for e in reversed(self._entries) if e.key == key]
