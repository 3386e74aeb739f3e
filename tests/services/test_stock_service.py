"""
Tests for StockLedgerService, the ledger's transaction boundary.

Tests cover:
- Commit on success, rollback on every failure
- Storage failures surfaced as StorageError
- Idempotent shipment receipt through the service
- Concurrent issuances never over-drawing stock
"""

import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from stock_ledger.errors import (
    AlreadyReceived,
    InsufficientStock,
    StorageError,
    ValidationError,
)
from stock_ledger.models.enums import ShipmentStatus
from stock_ledger.schemas.shipment import ShipmentCreate, ShipmentLineCreate
from stock_ledger.schemas.stock import StockItemIn
from stock_ledger.services.movements import BalanceKey
from stock_ledger.services.stock_service import StockLedgerService


def item(description, qty, unit, **extra):
    return StockItemIn(description=description, qty=qty, unit=unit, **extra)


class TestReceiveAndDeduct:

    def test_receipt_is_committed(self, db_session, session_factory):
        StockLedgerService(db_session).receive_stock(
            [item("Cement", 100, "bags")]
        )

        other = session_factory()
        try:
            assert StockLedgerService(other).get_balance(
                "Cement", "bags"
            ) == Decimal("100")
        finally:
            other.close()

    def test_round_trip(self, db_session):
        service = StockLedgerService(db_session)
        service.receive_stock([item("Cement", 100, "bags")])

        service.deduct_stock([item("Cement", 40, "bags")])
        assert service.get_balance("Cement", "bags") == Decimal("60")

        service.deduct_stock([item("Cement", 60, "bags")])
        assert service.get_balance("Cement", "bags") == Decimal("0")

        with pytest.raises(InsufficientStock):
            service.deduct_stock([item("Cement", 1, "bags")])
        assert service.get_balance("Cement", "bags") == Decimal("0")

    def test_rejected_deduction_leaves_ledger_unchanged(self, db_session):
        service = StockLedgerService(db_session)
        service.receive_stock([
            item("Cement", 10, "bags"),
            item("Sand", 5, "m3"),
        ])
        before = service.get_balances()

        with pytest.raises(InsufficientStock):
            service.deduct_stock([
                item("Sand", 1, "m3"),
                item("Cement", 6, "bags"),
                item("Cement", 6, "bags"),
            ])

        assert service.get_balances() == before
        assert len(service.get_stock()) == 2

    def test_invalid_line_leaves_ledger_unchanged(self, db_session):
        service = StockLedgerService(db_session)
        service.receive_stock([item("Cement", 10, "bags")])

        with pytest.raises(ValidationError):
            service.deduct_stock([item("Cement", 1, "bags"), item("", 1, "bags")])

        assert service.get_balances() == {
            BalanceKey("Cement", "bags"): Decimal("10")
        }

    def test_reference_is_recorded(self, db_session):
        service = StockLedgerService(db_session)
        service.receive_stock([item("Cement", 10, "bags")], reference="OPENING")
        service.deduct_stock([item("Cement", 2, "bags")], reference="MR-0007")

        newest, oldest = service.get_stock()
        assert newest.reference == "MR-0007"
        assert oldest.reference == "OPENING"

    def test_commit_failure_raises_storage_error(self, db_session, monkeypatch):
        service = StockLedgerService(db_session)
        service.receive_stock([item("Cement", 10, "bags")])

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(StorageError, match="disk I/O error"):
            service.deduct_stock([item("Cement", 4, "bags")])

        monkeypatch.undo()
        assert service.get_balance("Cement", "bags") == Decimal("10")


class TestReceiveShipment:

    def _shipment(self, service):
        return service.create_shipment(ShipmentCreate(
            reference="PO-88",
            lines=[
                ShipmentLineCreate(description="Cement", quantity=100, unit="bags"),
                ShipmentLineCreate(description="Bricks", quantity=2000, unit="nos"),
            ],
        ))

    def test_receive_twice_credits_once(self, db_session):
        service = StockLedgerService(db_session)
        shipment = self._shipment(service)

        result = service.receive_shipment(shipment.id)
        assert len(result.entries) == 2

        with pytest.raises(AlreadyReceived):
            service.receive_shipment(shipment.id)

        assert service.get_balance("Cement", "bags") == Decimal("100")
        assert service.get_balance("Bricks", "nos") == Decimal("2000")
        assert len(service.get_stock()) == 2

    def test_failed_status_update_rolls_back_entries(
        self, db_session, monkeypatch
    ):
        service = StockLedgerService(db_session)
        shipment = self._shipment(service)

        def broken_mark_received(shipment_id, received_at):
            raise StorageError("shipment table unavailable")

        monkeypatch.setattr(
            service.shipments, "mark_received", broken_mark_received
        )

        with pytest.raises(StorageError):
            service.receive_shipment(shipment.id)

        assert service.get_stock() == []
        assert service.list_shipments()[0].status == ShipmentStatus.PENDING

    def test_list_shipments_newest_first(self, db_session):
        service = StockLedgerService(db_session)
        first = self._shipment(service)
        second = self._shipment(service)

        assert [s.id for s in service.list_shipments()] == [second.id, first.id]


class TestConcurrentIssuance:

    def test_concurrent_deductions_never_overdraw(self, session_factory):
        setup = session_factory()
        StockLedgerService(setup).receive_stock([item("Cement", 5, "bags")])
        setup.close()

        outcomes = []
        outcomes_lock = threading.Lock()
        start = threading.Barrier(10)

        def worker():
            session = session_factory()
            try:
                start.wait()
                try:
                    StockLedgerService(session).deduct_stock(
                        [item("Cement", 1, "bags")]
                    )
                    outcome = "issued"
                except InsufficientStock:
                    outcome = "rejected"
                with outcomes_lock:
                    outcomes.append(outcome)
            finally:
                session.close()

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("issued") == 5
        assert outcomes.count("rejected") == 5

        check = session_factory()
        try:
            assert StockLedgerService(check).get_balance(
                "Cement", "bags"
            ) == Decimal("0")
        finally:
            check.close()
