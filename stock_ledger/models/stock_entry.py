"""
Stock ledger entry model.

Each entry is one signed stock movement: positive quantities
were received into the store, negative quantities were issued
out of it. Entries are immutable. A mistake is corrected by
appending an offsetting entry, never by editing or deleting.
"""

import secrets
import time
import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, CheckConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from stock_ledger.models.base import Base
from stock_ledger.models.enums import EntryKind


# Quantities are stored as Numeric(19, 4)
QUANTITY_PRECISION = 19
QUANTITY_SCALE = 4


def new_entry_id() -> str:
    """Time-based identifier with a random suffix, e.g. stock_1718000000000_9f3a01bc."""
    return f"stock_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class StockEntry(Base):
    """
    An immutable signed movement for one (description, unit) key.

    seq is the append order. Listing the ledger newest-first
    means ordering by seq descending.
    """

    __tablename__ = "stock_entries"
    __table_args__ = (
        CheckConstraint("quantity <> 0", name="ck_stock_entries_quantity_nonzero"),
    )

    seq: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=new_entry_id
    )
    batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    item_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(QUANTITY_PRECISION, QUANTITY_SCALE), nullable=False
    )
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    kind: Mapped[EntryKind] = mapped_column(
        SAEnum(EntryKind, name="entry_kind_enum"),
        nullable=False,
    )
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    shipment_id: Mapped[int | None] = mapped_column(
        ForeignKey("shipments.id"), nullable=True, index=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def key(self) -> tuple[str, str]:
        return (self.description.strip(), self.unit.strip())

    def __repr__(self) -> str:
        return (
            f"<StockEntry {self.id} {self.kind.value} "
            f"{self.quantity} {self.unit} {self.description!r}>"
        )
