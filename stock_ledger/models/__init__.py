"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from stock_ledger.models.base import Base
from stock_ledger.models.enums import EntryKind, ShipmentStatus
from stock_ledger.models.stock_entry import StockEntry
from stock_ledger.models.shipment import Shipment, ShipmentLine

__all__ = [
    "Base",
    "EntryKind",
    "ShipmentStatus",
    "StockEntry",
    "Shipment",
    "ShipmentLine",
]
