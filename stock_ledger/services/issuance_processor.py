"""
Issuance processing: multi-line stock withdrawals.

A withdrawal is all-or-nothing. Every line is validated against
one balance snapshot taken at the start, with quantities for the
same key summed across lines, and entries are appended only if
every line can be met. Callers must hold the ledger write lock
across deduct() and the commit; StockLedgerService does this.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from stock_ledger.errors import InsufficientStock, ValidationError
from stock_ledger.models.enums import EntryKind
from stock_ledger.models.stock_entry import StockEntry
from stock_ledger.services.balances import BalanceAggregator
from stock_ledger.services.ledger_store import LedgerStore
from stock_ledger.services.movements import (
    QUANTITY_LIMITS,
    BalanceKey,
    StockLine,
    WriteResult,
    fits_quantity_column,
)

logger = logging.getLogger(__name__)


class IssuanceProcessor:

    def __init__(self, store: LedgerStore):
        self.store = store
        self.balances = BalanceAggregator(store)

    def deduct(
        self,
        lines: Sequence[StockLine],
        reference: str | None = None,
    ) -> WriteResult:
        """
        Withdraw every line from stock, or nothing at all.

        Raises ValidationError for a malformed line and
        InsufficientStock for the first line whose key would go
        negative. available on the error is what remained for that
        key after earlier lines of the same request.
        """
        checked = [
            (self._validate_line(position, line), line)
            for position, line in enumerate(lines, start=1)
        ]

        snapshot = self.balances.all_balances()
        requested: dict[BalanceKey, Decimal] = {}

        for key, line in checked:
            already = requested.get(key, Decimal("0"))
            remaining = snapshot.get(key, Decimal("0")) - already
            if line.quantity > remaining:
                logger.warning(
                    "Deduction rejected for %s (%s): available=%s requested=%s",
                    key.description, key.unit, remaining, line.quantity,
                )
                raise InsufficientStock(
                    key.description, key.unit, remaining, line.quantity
                )
            requested[key] = already + line.quantity

        entries = [
            StockEntry(
                date=line.date,
                item_code=line.item_code,
                description=key.description,
                quantity=-abs(line.quantity),
                unit=key.unit,
                kind=EntryKind.ISSUE,
                reference=reference,
            )
            for key, line in checked
        ]
        written = self.store.append(entries)

        logger.info(
            "Issued %d lines%s",
            len(written), f" for {reference}" if reference else "",
        )
        return WriteResult(
            entries=written,
            balances=self.balances.balances_for(key for key, _ in checked),
        )

    @staticmethod
    def _validate_line(position: int, line: StockLine) -> BalanceKey:
        key = line.key
        if not key.description:
            raise ValidationError(f"Line {position}: description is required")
        if not key.unit:
            raise ValidationError(
                f"Line {position} ({key.description}): unit is required"
            )
        if line.quantity <= 0:
            raise ValidationError(
                f"Line {position} ({key.description}): "
                f"quantity must be greater than zero"
            )
        if not fits_quantity_column(line.quantity):
            raise ValidationError(
                f"Line {position} ({key.description}): "
                f"quantity must have {QUANTITY_LIMITS}"
            )
        return key
