"""
Shipment and goods-received (GRN) endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stock_ledger.api.errors import to_http_exception
from stock_ledger.api.stock import balance_rows
from stock_ledger.errors import LedgerError
from stock_ledger.models.base import get_db
from stock_ledger.services.stock_service import StockLedgerService
from stock_ledger.schemas.shipment import (
    ShipmentCreate,
    ShipmentListResponse,
    ShipmentResponse,
)
from stock_ledger.schemas.stock import (
    ReceiveShipmentRequest,
    StockEntryResponse,
    StockWriteResponse,
)

router = APIRouter(prefix="/api", tags=["Shipments"])


@router.get("/shipments", response_model=ShipmentListResponse)
def list_shipments(db: Session = Depends(get_db)):
    """All shipments, newest first."""
    service = StockLedgerService(db)
    try:
        shipments = service.list_shipments()
    except LedgerError as e:
        raise to_http_exception(e)
    return ShipmentListResponse(
        shipments=[ShipmentResponse.model_validate(s) for s in shipments]
    )


@router.post("/shipments", response_model=ShipmentResponse, status_code=201)
def create_shipment(
    request: ShipmentCreate,
    db: Session = Depends(get_db),
):
    """Record a pending shipment awaiting receipt."""
    service = StockLedgerService(db)
    try:
        shipment = service.create_shipment(request)
    except LedgerError as e:
        raise to_http_exception(e)
    return ShipmentResponse.model_validate(shipment)


@router.post("/grn", response_model=StockWriteResponse)
def receive_shipment(
    request: ReceiveShipmentRequest,
    db: Session = Depends(get_db),
):
    """
    Credit a shipment's lines to stock.

    404 for an unknown shipment, 409 if it was already received.
    """
    service = StockLedgerService(db)
    try:
        result = service.receive_shipment(request.shipment_id)
        entries = service.get_stock()
    except LedgerError as e:
        raise to_http_exception(e)
    return StockWriteResponse(
        items=[StockEntryResponse.model_validate(e) for e in entries],
        balances=balance_rows(result.balances),
    )
