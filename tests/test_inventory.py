"""
Batch ledger maintenance and stock views
"""

from decimal import Decimal

import pytest

from pharmaledger.models import InventoryBatch, MovementType, StockTransaction, TransferType
from pharmaledger.schemas.inventory import BatchCreate, BatchUpdate
from pharmaledger.schemas.stock_transfers import TransferCreate, TransferItemIn
from pharmaledger.services import inventory as inv
from pharmaledger.services import stock_transfers as st_svc
from pharmaledger.services.errors import InsufficientStockError, NotFoundError, ReferenceInUseError
from pharmaledger.utils.timezone import today_local


class TestBatchLedger:

    def test_batch_moved_by_confirmed_transfer_is_kept(self, db_session, product, make_batch):
        batch = make_batch(product, "LOT1", 5)
        transfer = st_svc.create_stock_transfer(db_session, TransferCreate(
            transfer_type=TransferType.EXPORT,
            items=[TransferItemIn(product_id=product.id, inventory_batch_id=batch.id, quantity=Decimal("2"))],
        ))
        st_svc.confirm_stock_transfer(db_session, transfer.id)
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match=transfer.transfer_number):
            inv.remove_batch(db_session, batch.id)
        db_session.rollback()

        assert db_session.get(InventoryBatch, batch.id) is not None

    def test_unused_batch_can_be_removed(self, db_session, product, make_batch):
        batch = make_batch(product, "LOT1", 5)

        inv.remove_batch(db_session, batch.id)
        db_session.commit()

        assert db_session.query(InventoryBatch).count() == 0

    def test_raw_create_does_not_merge(self, db_session, product):
        payload = BatchCreate(product_id=product.id, batch_number="LOT1",
                              quantity=Decimal("2"), expiry_date=today_local())

        inv.create_batch(db_session, payload)
        inv.create_batch(db_session, payload)

        assert len(inv.list_batches(db_session, product_id=product.id)) == 2

    def test_adjust_cannot_go_negative(self, db_session, product, make_batch):
        batch = make_batch(product, "LOT1", 3)

        with pytest.raises(InsufficientStockError):
            inv.adjust_quantity(db_session, batch.id, Decimal("-4"))

        assert batch.quantity == Decimal("3")

    def test_adjust_is_journalled(self, db_session, product, make_batch):
        batch = make_batch(product, "LOT1", 3)

        inv.adjust_quantity(db_session, batch.id, Decimal("-1"), note="broken box")
        db_session.commit()

        txn = db_session.query(StockTransaction).one()
        assert txn.txn_type == MovementType.ADJUSTMENT
        assert txn.quantity_change == Decimal("-1")
        assert txn.balance_after == Decimal("2")
        assert txn.note == "broken box"

    def test_update_sets_quantity_and_location(self, db_session, product, make_batch):
        batch = make_batch(product, "LOT1", 3)

        inv.update_batch(db_session, batch.id, BatchUpdate(quantity=Decimal("7"), location="Shelf B2"))

        assert batch.quantity == Decimal("7")
        assert batch.location == "Shelf B2"

    def test_missing_batch(self, db_session):
        with pytest.raises(NotFoundError):
            inv.get_batch(db_session, 12345)


class TestStockViews:

    def test_expiring_window(self, db_session, product, make_batch):
        make_batch(product, "SOON", 1, expires_in_days=5)
        make_batch(product, "LATER", 1, expires_in_days=200)
        make_batch(product, "SOON-EMPTY", 0, expires_in_days=5)

        rows = inv.expiring_batches(db_session, within_days=30)

        assert [b.batch_number for b in rows] == ["SOON"]

    def test_low_stock_products(self, db_session, product, other_product, make_batch):
        make_batch(product, "LOT1", 5)       # min stock 20
        make_batch(other_product, "P1", 1)   # min stock 0

        rows = inv.low_stock_products(db_session)

        assert [(p.sku, total) for p, total in rows] == [("AMOX-500", Decimal("5"))]

    def test_fifo_allocation_does_not_mutate(self, db_session, product, make_batch):
        b1 = make_batch(product, "B1", 2, expires_in_days=3)
        b2 = make_batch(product, "B2", 2, expires_in_days=9)

        plan = inv.allocate_fifo(db_session, product, Decimal("3"))

        assert [(b.batch_number, q) for b, q in plan] == [("B1", Decimal("2")), ("B2", Decimal("1"))]
        assert b1.quantity == Decimal("2") and b2.quantity == Decimal("2")
