"""
Shipment models.

Shipments are owned by the procurement side of the application.
The ledger only reads them and flips their status to RECEIVED
once their lines have been credited to stock.
"""

import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_ledger.models.base import Base
from stock_ledger.models.enums import ShipmentStatus
from stock_ledger.models.stock_entry import (
    QUANTITY_PRECISION, QUANTITY_SCALE, utcnow,
)


class Shipment(Base):
    __tablename__ = "shipments"

    id: Mapped[int] = mapped_column(primary_key=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    status: Mapped[ShipmentStatus] = mapped_column(
        SAEnum(
            ShipmentStatus,
            name="shipment_status_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ShipmentStatus.PENDING,
    )
    received_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    lines: Mapped[list["ShipmentLine"]] = relationship(
        back_populates="shipment",
        order_by="ShipmentLine.position",
        cascade="all, delete-orphan",
    )

    @property
    def is_received(self) -> bool:
        return self.status == ShipmentStatus.RECEIVED

    def __repr__(self) -> str:
        return f"<Shipment {self.id} ({self.status.value})>"


class ShipmentLine(Base):
    __tablename__ = "shipment_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    shipment_id: Mapped[int] = mapped_column(
        ForeignKey("shipments.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    item_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(QUANTITY_PRECISION, QUANTITY_SCALE), nullable=False
    )
    unit: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    shipment: Mapped["Shipment"] = relationship(back_populates="lines")
