"""Business logic services."""

from stock_ledger.services.balances import BalanceAggregator
from stock_ledger.services.issuance_processor import IssuanceProcessor
from stock_ledger.services.ledger_store import (
    InMemoryLedgerStore,
    LedgerStore,
    SqlLedgerStore,
)
from stock_ledger.services.receipt_processor import ReceiptProcessor
from stock_ledger.services.stock_service import StockLedgerService

__all__ = [
    "BalanceAggregator",
    "IssuanceProcessor",
    "InMemoryLedgerStore",
    "LedgerStore",
    "SqlLedgerStore",
    "ReceiptProcessor",
    "StockLedgerService",
]
