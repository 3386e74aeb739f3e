"""
Shipment collaborator.

Shipments belong to procurement. The ledger needs only two
things from them: read a shipment with its lines, and mark it
received once its lines are in stock.
"""

import datetime as dt
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from stock_ledger.errors import AlreadyReceived, NotFound, StorageError
from stock_ledger.models.enums import ShipmentStatus
from stock_ledger.models.shipment import Shipment, ShipmentLine
from stock_ledger.schemas.shipment import ShipmentCreate


class ShipmentRepository(ABC):

    @abstractmethod
    def get_shipment(self, shipment_id: int) -> Shipment | None:
        """Return the shipment with its lines, or None."""

    @abstractmethod
    def mark_received(self, shipment_id: int, received_at: dt.datetime) -> Shipment:
        """Move a pending shipment to RECEIVED."""

    @abstractmethod
    def list_shipments(self) -> list[Shipment]:
        """All shipments, newest first."""

    @abstractmethod
    def create_shipment(self, request: ShipmentCreate) -> Shipment:
        """Record a new pending shipment."""


class SqlShipmentRepository(ShipmentRepository):
    """Shipments in the shipments/shipment_lines tables. The caller commits."""

    def __init__(self, db: Session):
        self.db = db

    def get_shipment(self, shipment_id: int) -> Shipment | None:
        try:
            return self.db.execute(
                select(Shipment)
                .options(selectinload(Shipment.lines))
                .where(Shipment.id == shipment_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read shipment {shipment_id}: {e}") from e

    def mark_received(self, shipment_id: int, received_at: dt.datetime) -> Shipment:
        shipment = self.get_shipment(shipment_id)
        if shipment is None:
            raise NotFound(f"Shipment {shipment_id} not found")
        if shipment.is_received:
            raise AlreadyReceived(
                f"Shipment {shipment_id} has already been received"
            )

        shipment.status = ShipmentStatus.RECEIVED
        shipment.received_at = received_at
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageError(
                f"Could not update shipment {shipment_id}: {e}"
            ) from e
        return shipment

    def list_shipments(self) -> list[Shipment]:
        try:
            shipments = self.db.execute(
                select(Shipment)
                .options(selectinload(Shipment.lines))
                .order_by(Shipment.id.desc())
            ).scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read shipments: {e}") from e
        return list(shipments)

    def create_shipment(self, request: ShipmentCreate) -> Shipment:
        shipment = Shipment(
            reference=request.reference,
            date=request.date,
            status=ShipmentStatus.PENDING,
            lines=[
                ShipmentLine(
                    position=position,
                    item_code=line.item_code,
                    description=line.description.strip(),
                    quantity=line.quantity,
                    unit=line.unit.strip(),
                )
                for position, line in enumerate(request.lines, start=1)
            ],
        )
        try:
            self.db.add(shipment)
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not create shipment: {e}") from e
        return shipment
