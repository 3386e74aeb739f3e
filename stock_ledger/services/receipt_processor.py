"""
Receipt processing (GRN: goods received note).

Credits stock to the ledger, either from a shipment or from a
direct manual entry. A shipment is credited exactly once: it is
only marked RECEIVED after its entries were appended, and a
RECEIVED shipment is refused.
"""

import datetime as dt
import logging
from collections.abc import Sequence

from stock_ledger.errors import AlreadyReceived, NotFound, ValidationError
from stock_ledger.models.enums import EntryKind
from stock_ledger.models.stock_entry import StockEntry, utcnow
from stock_ledger.services.balances import BalanceAggregator
from stock_ledger.services.ledger_store import LedgerStore
from stock_ledger.services.movements import (
    QUANTITY_LIMITS,
    BalanceKey,
    StockLine,
    WriteResult,
    fits_quantity_column,
)
from stock_ledger.services.shipment_repository import ShipmentRepository

logger = logging.getLogger(__name__)


class ReceiptProcessor:

    def __init__(self, store: LedgerStore, shipments: ShipmentRepository):
        self.store = store
        self.shipments = shipments
        self.balances = BalanceAggregator(store)

    def receive_shipment(self, shipment_id: int) -> WriteResult:
        """
        Credit every line of a pending shipment to stock.

        Raises NotFound for an unknown shipment and AlreadyReceived
        if it was credited before. Entries are dated to the
        shipment date, or today if the shipment has none.
        """
        shipment = self.shipments.get_shipment(shipment_id)
        if shipment is None:
            raise NotFound(f"Shipment {shipment_id} not found")
        if shipment.is_received:
            raise AlreadyReceived(
                f"Shipment {shipment_id} has already been received"
            )

        entries = build_receipt_entries(
            [StockLine.from_item(line) for line in shipment.lines],
            default_date=shipment.date,
            reference=shipment.reference or f"SHIPMENT-{shipment.id}",
            shipment_id=shipment.id,
        )
        written = self.store.append(entries)

        # Only after the append succeeded
        self.shipments.mark_received(shipment_id, utcnow())

        logger.info(
            "Shipment %s received: %d entries credited",
            shipment_id, len(written),
        )
        return WriteResult(
            entries=written,
            balances=self.balances.balances_for(
                BalanceKey.of(e.description, e.unit) for e in written
            ),
        )

    def receive_items(
        self,
        lines: Sequence[StockLine],
        reference: str | None = None,
    ) -> WriteResult:
        """Direct stock entry, not tied to any shipment."""
        entries = build_receipt_entries(lines, reference=reference)
        written = self.store.append(entries)
        logger.info("Manual receipt: %d entries credited", len(written))
        return WriteResult(
            entries=written,
            balances=self.balances.balances_for(
                BalanceKey.of(e.description, e.unit) for e in written
            ),
        )


def build_receipt_entries(
    lines: Sequence[StockLine],
    default_date: dt.date | None = None,
    reference: str | None = None,
    shipment_id: int | None = None,
) -> list[StockEntry]:
    """
    Turn receipt lines into positive ledger entries.

    Lines with a blank description are skipped. Any other line
    needs a unit and a quantity above zero, otherwise the whole
    receipt is rejected.
    """
    entries = []
    for position, line in enumerate(lines, start=1):
        key = line.key
        if not key.description:
            continue
        if not key.unit:
            raise ValidationError(
                f"Line {position} ({key.description}): unit is required"
            )
        if line.quantity <= 0:
            raise ValidationError(
                f"Line {position} ({key.description}): "
                f"quantity must be greater than zero"
            )
        if not fits_quantity_column(line.quantity):
            raise ValidationError(
                f"Line {position} ({key.description}): "
                f"quantity must have {QUANTITY_LIMITS}"
            )
        entries.append(StockEntry(
            date=line.date or default_date,
            item_code=line.item_code,
            description=key.description,
            quantity=line.quantity,
            unit=key.unit,
            kind=EntryKind.RECEIPT,
            reference=reference,
            shipment_id=shipment_id,
        ))
    return entries
