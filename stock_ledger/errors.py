"""
Domain errors raised by the stock ledger.

Validation and business-rule failures also subclass ValueError,
so callers can treat them as bad input. StorageError does not:
it means the medium failed, not the request.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for every error the ledger core raises."""


class ValidationError(LedgerError, ValueError):
    """A line is missing a field or carries an invalid quantity."""


class InsufficientStock(LedgerError, ValueError):
    """A deduction would take a balance below zero."""

    def __init__(
        self,
        description: str,
        unit: str,
        available: Decimal,
        requested: Decimal,
    ):
        self.description = description
        self.unit = unit
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {description} ({unit}). "
            f"Available {_fmt(available)}. Requested {_fmt(requested)}."
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.description, self.unit)


class NotFound(LedgerError, ValueError):
    """The referenced shipment does not exist."""


class AlreadyReceived(LedgerError, ValueError):
    """The shipment has already been credited to the ledger."""


class StorageError(LedgerError):
    """The underlying storage could not be read or written."""


def _fmt(value: Decimal) -> str:
    # 60.0000 -> 60, 2.5000 -> 2.5
    normalized = Decimal(value).normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal(1)))
    return format(normalized, "f")
