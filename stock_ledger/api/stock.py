"""
Stock ledger API endpoints.

The API layer is thin: it parses requests, calls
StockLedgerService, and turns ledger errors into HTTP errors.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from stock_ledger.api.errors import to_http_exception
from stock_ledger.errors import LedgerError
from stock_ledger.models.base import get_db
from stock_ledger.services.movements import BalanceKey, WriteResult
from stock_ledger.services.stock_service import StockLedgerService
from stock_ledger.schemas.stock import (
    BalanceResponse,
    BalancesResponse,
    StockEntryResponse,
    StockItemsRequest,
    StockListResponse,
    StockWriteResponse,
)

router = APIRouter(prefix="/api/stock", tags=["Stock"])


@router.get("", response_model=StockListResponse)
def get_stock(db: Session = Depends(get_db)):
    """Full stock ledger, newest first."""
    service = StockLedgerService(db)
    try:
        entries = service.get_stock()
    except LedgerError as e:
        raise to_http_exception(e)
    return StockListResponse(
        items=[StockEntryResponse.model_validate(e) for e in entries]
    )


@router.post("", response_model=StockWriteResponse)
def receive_stock(
    request: StockItemsRequest,
    db: Session = Depends(get_db),
):
    """Direct stock receipt, not tied to a shipment."""
    service = StockLedgerService(db)
    try:
        result = service.receive_stock(request.items, request.reference)
        return _write_response(service, result)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/deduct", response_model=StockWriteResponse)
def deduct_stock(
    request: StockItemsRequest,
    db: Session = Depends(get_db),
):
    """
    Issue stock for every line, or for none.

    A shortfall on any line rejects the whole request with the
    exact available and requested quantities.
    """
    service = StockLedgerService(db)
    try:
        result = service.deduct_stock(request.items, request.reference)
        return _write_response(service, result)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/balances", response_model=BalancesResponse)
def get_balances(db: Session = Depends(get_db)):
    """Current balance of every (description, unit) pair."""
    service = StockLedgerService(db)
    try:
        balances = service.get_balances()
    except LedgerError as e:
        raise to_http_exception(e)
    return BalancesResponse(balances=balance_rows(balances, sort=True))


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    description: str = Query(min_length=1),
    unit: str = Query(min_length=1),
    db: Session = Depends(get_db),
):
    """Balance for one pair; 0 if it has never been stocked."""
    key = BalanceKey.of(description, unit)
    if not key.description or not key.unit:
        raise HTTPException(
            status_code=400, detail="description and unit are required"
        )
    service = StockLedgerService(db)
    try:
        quantity = service.get_balance(*key)
    except LedgerError as e:
        raise to_http_exception(e)
    return BalanceResponse(
        description=key.description, unit=key.unit, quantity=float(quantity)
    )


def balance_rows(
    balances: dict[BalanceKey, Decimal], sort: bool = False
) -> list[BalanceResponse]:
    keys = sorted(balances) if sort else list(balances)
    return [
        BalanceResponse(
            description=key.description,
            unit=key.unit,
            quantity=float(balances[key]),
        )
        for key in keys
    ]


def _write_response(
    service: StockLedgerService, result: WriteResult
) -> StockWriteResponse:
    # Re-read after commit so the caller gets the ledger as stored
    return StockWriteResponse(
        items=[
            StockEntryResponse.model_validate(e) for e in service.get_stock()
        ],
        balances=balance_rows(result.balances),
    )
