"""
Stock ledger service: the single entry point to the ledger.

Routers and the material-request workflow call this service and
nothing below it. It owns two things the processors do not:

1. The write lock. Every read-validate-append sequence runs under
   one process-wide lock, so two concurrent issuances can never
   both pass the balance check against the same stock.
2. The commit. A write becomes visible only when the session
   commits, so a failed operation leaves no partial batch behind.

Reads take no lock and see the last committed state.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_ledger.errors import LedgerError, StorageError
from stock_ledger.models.shipment import Shipment
from stock_ledger.models.stock_entry import StockEntry
from stock_ledger.schemas.shipment import ShipmentCreate
from stock_ledger.schemas.stock import StockItemIn
from stock_ledger.services.balances import BalanceAggregator
from stock_ledger.services.issuance_processor import IssuanceProcessor
from stock_ledger.services.ledger_store import LedgerStore, SqlLedgerStore
from stock_ledger.services.movements import BalanceKey, StockLine, WriteResult
from stock_ledger.services.receipt_processor import ReceiptProcessor
from stock_ledger.services.shipment_repository import (
    ShipmentRepository,
    SqlShipmentRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Serialises receipts and issuances across all sessions in this process.
# No timeout: the work under it is short and local.
_LEDGER_WRITE_LOCK = threading.Lock()


class StockLedgerService:

    def __init__(
        self,
        db: Session,
        store: LedgerStore | None = None,
        shipments: ShipmentRepository | None = None,
    ):
        self.db = db
        self.store = store or SqlLedgerStore(db)
        self.shipments = shipments or SqlShipmentRepository(db)
        self.balances = BalanceAggregator(self.store)
        self.receipts = ReceiptProcessor(self.store, self.shipments)
        self.issuance = IssuanceProcessor(self.store)

    # --- Reads ---

    def get_stock(self) -> list[StockEntry]:
        """The full ledger, newest first."""
        return self.store.list_all()

    def get_balances(self) -> dict[BalanceKey, Decimal]:
        return self.balances.all_balances()

    def get_balance(self, description: str, unit: str) -> Decimal:
        return self.balances.balance_of(description, unit)

    def list_shipments(self) -> list[Shipment]:
        return self.shipments.list_shipments()

    # --- Writes ---

    def receive_stock(
        self,
        items: Sequence[StockItemIn | StockLine],
        reference: str | None = None,
    ) -> WriteResult:
        """Direct stock entry, bypassing shipments."""
        lines = _to_lines(items)
        return self._locked_write(
            lambda: self.receipts.receive_items(lines, reference)
        )

    def deduct_stock(
        self,
        items: Sequence[StockItemIn | StockLine],
        reference: str | None = None,
    ) -> WriteResult:
        """
        All-or-nothing issuance.

        Not idempotent: a retried issuance deducts again. After an
        ambiguous failure, check balances before retrying.
        """
        lines = _to_lines(items)
        return self._locked_write(
            lambda: self.issuance.deduct(lines, reference)
        )

    def receive_shipment(self, shipment_id: int) -> WriteResult:
        """Credit a pending shipment; refuses one already received."""
        return self._locked_write(
            lambda: self.receipts.receive_shipment(shipment_id)
        )

    def create_shipment(self, request: ShipmentCreate) -> Shipment:
        """Record a pending shipment. Does not touch the ledger."""
        return self._commit(lambda: self.shipments.create_shipment(request))

    # --- Transaction boundary ---

    def _locked_write(self, operation: Callable[[], T]) -> T:
        with _LEDGER_WRITE_LOCK:
            return self._commit(operation)

    def _commit(self, operation: Callable[[], T]) -> T:
        """
        Run operation and commit, or roll back everything it did.

        Domain errors are re-raised unchanged. Database errors are
        raised as StorageError.
        """
        try:
            result = operation()
            self.db.commit()
        except LedgerError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Ledger write failed, rolled back: %s", e)
            raise StorageError(f"Storage failure: {e}") from e
        return result


def _to_lines(items: Sequence[StockItemIn | StockLine]) -> list[StockLine]:
    return [
        item if isinstance(item, StockLine) else StockLine.from_item(item)
        for item in items
    ]
