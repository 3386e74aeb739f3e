"""
Shared enumerations for database models.
"""

import enum


class EntryKind(str, enum.Enum):
    """Which operation wrote a ledger entry."""
    RECEIPT = "RECEIPT"
    ISSUE = "ISSUE"


class ShipmentStatus(str, enum.Enum):
    PENDING = "pending"
    RECEIVED = "received"
