"""
Pydantic schemas for the stock ledger API.

Request schemas are deliberately lenient about line contents:
an empty description or a zero quantity is a business-rule
failure reported by the ledger with the offending line, not a
schema failure. The shape (items must be a list) is enforced here.
"""

import uuid
import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from stock_ledger.models.enums import EntryKind


# --- Request Schemas ---

class StockItemIn(BaseModel):
    """One requested movement line as sent by the UI."""
    description: str = ""
    qty: Decimal = Decimal("0")
    unit: str = ""
    date: dt.date | None = None
    item_code: str | None = Field(default=None, max_length=64)

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("description", "unit", mode="before")
    @classmethod
    def none_is_blank(cls, v):
        return "" if v is None else v

    @field_validator("qty", mode="before")
    @classmethod
    def missing_qty_is_zero(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal("0")
        return v


class StockItemsRequest(BaseModel):
    """Body of POST /api/stock and POST /api/stock/deduct."""
    items: list[StockItemIn]
    reference: str | None = Field(default=None, max_length=100)


class ReceiveShipmentRequest(BaseModel):
    """Body of POST /api/grn."""
    shipment_id: int = Field(alias="shipmentId")

    model_config = {"populate_by_name": True}


# --- Response Schemas ---

class StockEntryResponse(BaseModel):
    id: str
    date: dt.date
    item_code: str | None
    description: str
    qty: float = Field(validation_alias="quantity")
    unit: str
    kind: EntryKind
    reference: str | None
    shipment_id: int | None
    batch_id: uuid.UUID
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    description: str
    unit: str
    quantity: float


class StockListResponse(BaseModel):
    """Full ledger, newest first."""
    items: list[StockEntryResponse]


class StockWriteResponse(BaseModel):
    """Ledger after a write, plus the balances the write touched."""
    items: list[StockEntryResponse]
    balances: list[BalanceResponse]


class BalancesResponse(BaseModel):
    balances: list[BalanceResponse]
