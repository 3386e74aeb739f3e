"""
Balance aggregation.

Balances are never stored. They are folded from the ledger
every time they are asked for, so they are correct as long as
the entries are correct.
"""

from decimal import Decimal

from stock_ledger.services.ledger_store import LedgerStore
from stock_ledger.services.movements import BalanceKey


class BalanceAggregator:

    def __init__(self, store: LedgerStore):
        self.store = store

    def balance_of(self, description: str, unit: str) -> Decimal:
        """Current on-hand quantity for one key, 0 if never seen."""
        key = BalanceKey.of(description, unit)
        if not key.description:
            return Decimal("0")
        return sum(
            (e.quantity for e in self.store.list_by_key(*key)),
            Decimal("0"),
        )

    def all_balances(self) -> dict[BalanceKey, Decimal]:
        """
        Fold every entry's signed quantity into a per-key total.

        Entries without a description are skipped.
        """
        balances: dict[BalanceKey, Decimal] = {}
        for entry in self.store.list_all():
            key = BalanceKey.of(entry.description, entry.unit)
            if not key.description:
                continue
            balances[key] = balances.get(key, Decimal("0")) + entry.quantity
        return balances

    def balances_for(self, keys) -> dict[BalanceKey, Decimal]:
        """
        Balances for the given keys only, in the order given.

        Keys may be any (description, unit) pair; the result is
        always keyed by trimmed BalanceKey.
        """
        balances = self.all_balances()
        result: dict[BalanceKey, Decimal] = {}
        for description, unit in keys:
            key = BalanceKey.of(description, unit)
            result[key] = balances.get(key, Decimal("0"))
        return result
