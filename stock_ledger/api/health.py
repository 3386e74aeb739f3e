"""
Health check endpoint.

Reports whether the stock ledger can be read, not just whether
the database answers: a missing stock_entries table after a bad
deploy shows up here as "unhealthy".
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_ledger.models.base import get_db
from stock_ledger.models.enums import ShipmentStatus
from stock_ledger.models.shipment import Shipment
from stock_ledger.models.stock_entry import StockEntry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Return service status with ledger and shipment counts."""
    try:
        ledger_entries = db.scalar(select(func.count()).select_from(StockEntry))
        pending_shipments = db.scalar(
            select(func.count())
            .select_from(Shipment)
            .where(Shipment.status == ShipmentStatus.PENDING)
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Health check could not read the ledger: %s", e)
        return {
            "status": "degraded",
            "service": "stock-ledger-service",
            "database": "unhealthy",
            "ledger_entries": None,
            "pending_shipments": None,
        }

    return {
        "status": "healthy",
        "service": "stock-ledger-service",
        "database": "healthy",
        "ledger_entries": ledger_entries,
        "pending_shipments": pending_shipments,
    }
