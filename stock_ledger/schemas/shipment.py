"""
Pydantic schemas for shipments.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from stock_ledger.models.enums import ShipmentStatus
from stock_ledger.models.stock_entry import QUANTITY_PRECISION, QUANTITY_SCALE


class ShipmentLineCreate(BaseModel):
    """
    One line of a new shipment.

    Strings are stripped before the length checks, so a blank
    unit is refused here instead of failing every later GRN.
    """
    description: str = Field(min_length=1, max_length=255)
    quantity: Decimal = Field(
        gt=0, max_digits=QUANTITY_PRECISION, decimal_places=QUANTITY_SCALE
    )
    unit: str = Field(min_length=1, max_length=32)
    item_code: str | None = Field(default=None, max_length=64)

    model_config = {"str_strip_whitespace": True}


class ShipmentCreate(BaseModel):
    """A pending shipment as raised by procurement."""
    reference: str | None = Field(default=None, max_length=100)
    date: dt.date | None = None
    lines: list[ShipmentLineCreate] = Field(min_length=1)


class ShipmentLineResponse(BaseModel):
    item_code: str | None
    description: str
    quantity: float
    unit: str

    model_config = {"from_attributes": True}


class ShipmentResponse(BaseModel):
    id: int
    reference: str | None
    date: dt.date | None
    status: ShipmentStatus
    received_at: dt.datetime | None
    created_at: dt.datetime
    lines: list[ShipmentLineResponse]

    model_config = {"from_attributes": True}


class ShipmentListResponse(BaseModel):
    shipments: list[ShipmentResponse]
