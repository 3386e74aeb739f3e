"""
Value types passed between the stock ledger services.
"""

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import NamedTuple

from stock_ledger.models.stock_entry import QUANTITY_PRECISION, QUANTITY_SCALE


class BalanceKey(NamedTuple):
    """
    Identity of a stock line: trimmed description and unit.

    Matching is exact and case-sensitive. "Cement"/"bags" and
    "cement"/"bags" are different keys.
    """
    description: str
    unit: str

    @classmethod
    def of(cls, description: str | None, unit: str | None) -> "BalanceKey":
        return cls((description or "").strip(), (unit or "").strip())


@dataclass(frozen=True)
class StockLine:
    """One requested movement, before it becomes a ledger entry."""
    description: str
    quantity: Decimal
    unit: str
    date: dt.date | None = None
    item_code: str | None = None

    @property
    def key(self) -> BalanceKey:
        return BalanceKey.of(self.description, self.unit)

    @classmethod
    def from_item(cls, item) -> "StockLine":
        """Build from an API item (qty) or a shipment line (quantity)."""
        quantity = getattr(item, "qty", None)
        if quantity is None:
            quantity = getattr(item, "quantity", 0)
        return cls(
            description=item.description or "",
            quantity=to_decimal(quantity),
            unit=item.unit or "",
            date=getattr(item, "date", None),
            item_code=getattr(item, "item_code", None),
        )


@dataclass
class WriteResult:
    """Entries written by one ledger operation and the balances they touched."""
    entries: list = field(default_factory=list)
    balances: dict[BalanceKey, Decimal] = field(default_factory=dict)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(value))


def fits_quantity_column(quantity: Decimal) -> bool:
    """
    True if quantity is stored exactly by the quantity column.

    More decimal places than QUANTITY_SCALE would be rounded away
    on write (0.00001 would read back as 0), so such values are
    refused rather than stored.
    """
    if not quantity.is_finite():
        return False
    _, digits, exponent = quantity.normalize().as_tuple()
    decimals = max(-exponent, 0)
    integer_digits = max(len(digits) + exponent, 0)
    return (
        decimals <= QUANTITY_SCALE
        and integer_digits <= QUANTITY_PRECISION - QUANTITY_SCALE
    )


QUANTITY_LIMITS = (
    f"at most {QUANTITY_SCALE} decimal places "
    f"and {QUANTITY_PRECISION - QUANTITY_SCALE} integer digits"
)
