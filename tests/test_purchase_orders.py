"""
Purchase order creation, receiving and lifecycle
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from pharmaledger.models import InventoryBatch, MovementType, POStatus, PurchaseOrder, StockTransaction
from pharmaledger.schemas.purchase_orders import POCreate, POItemIn, POUpdate, ReceiveLineIn
from pharmaledger.services import purchase_orders as po_svc
from pharmaledger.services.errors import LedgerValidationError, NotFoundError, StateError
from pharmaledger.utils.timezone import today_local

EXPIRY = date.today() + timedelta(days=400)


def _create(db, supplier, product, qty="10", price="6"):
    return po_svc.create_purchase_order(db, POCreate(
        supplier_id=supplier.id,
        items=[POItemIn(product_id=product.id, quantity=Decimal(qty), unit_price=Decimal(price))],
    ))


def _pending(db, supplier, product, qty="10"):
    po = _create(db, supplier, product, qty=qty)
    po_svc.update_status(db, po.id, POStatus.PENDING)
    db.commit()
    return po


def _receive(db, po, qty, batch="LOT-A"):
    return po_svc.receive_items(db, po.id, [
        ReceiveLineIn(item_id=po.items[0].id, received_quantity=Decimal(qty),
                      batch_number=batch, expiry_date=EXPIRY),
    ])


class TestCreate:

    def test_draft_with_total_and_zero_received(self, db_session, supplier, product, other_product):
        po = po_svc.create_purchase_order(db_session, POCreate(
            supplier_id=supplier.id,
            notes="monthly restock",
            items=[
                POItemIn(product_id=product.id, quantity=Decimal("10"), unit_price=Decimal("6")),
                POItemIn(product_id=other_product.id, quantity=Decimal("4"), unit_price=Decimal("2.5")),
            ],
        ))

        assert po.status == POStatus.DRAFT
        assert po.total_amount == Decimal("70.00")
        assert all(li.received_quantity == 0 for li in po.items)

    def test_order_numbers_follow_month_sequence(self, db_session, supplier, product):
        today = today_local()
        prefix = f"PO{today.year}{today.month:02d}-"

        numbers = [_create(db_session, supplier, product).order_number for _ in range(3)]

        assert numbers == [f"{prefix}0001", f"{prefix}0002", f"{prefix}0003"]

    def test_backdated_order_is_numbered_in_current_month(self, db_session, supplier, product):
        today = today_local()

        po = po_svc.create_purchase_order(db_session, POCreate(
            supplier_id=supplier.id,
            order_date=date(2020, 1, 15),
            items=[POItemIn(product_id=product.id, quantity=Decimal("1"), unit_price=Decimal("6"))],
        ))

        assert po.order_date == date(2020, 1, 15)
        assert po.order_number == f"PO{today.year}{today.month:02d}-0001"

    def test_requires_items(self, db_session, supplier):
        with pytest.raises(LedgerValidationError, match="At least one item"):
            po_svc.create_purchase_order(db_session, POCreate(supplier_id=supplier.id, items=[]))

    def test_rejects_non_positive_quantity(self, db_session, supplier, product):
        with pytest.raises(LedgerValidationError):
            _create(db_session, supplier, product, qty="0")

    def test_unknown_supplier(self, db_session, product):
        with pytest.raises(NotFoundError, match="Supplier"):
            po_svc.create_purchase_order(db_session, POCreate(
                supplier_id=404,
                items=[POItemIn(product_id=product.id, quantity=Decimal("1"))],
            ))

    def test_draft_items_can_be_replaced(self, db_session, supplier, product):
        po = _create(db_session, supplier, product)

        po_svc.update_purchase_order(db_session, po.id, POUpdate(
            items=[POItemIn(product_id=product.id, quantity=Decimal("2"), unit_price=Decimal("5"))],
        ))

        assert len(po.items) == 1
        assert po.total_amount == Decimal("10.00")


class TestReceive:

    def test_receipts_accumulate_until_received(self, db_session, supplier, product):
        po = _pending(db_session, supplier, product, qty="10")

        _receive(db_session, po, "3")
        _receive(db_session, po, "4", batch="LOT-B")
        db_session.commit()
        assert po.items[0].received_quantity == Decimal("7")
        assert po.status == POStatus.PARTIAL
        assert po.items[0].batch_number == "LOT-B"

        _receive(db_session, po, "3", batch="LOT-B")
        db_session.commit()
        assert po.items[0].received_quantity == Decimal("10")
        assert po.status == POStatus.RECEIVED

    def test_every_receipt_inserts_a_new_batch(self, db_session, supplier, product):
        po = _pending(db_session, supplier, product)

        _receive(db_session, po, "2", batch="LOT-A")
        _receive(db_session, po, "3", batch="LOT-A")
        db_session.commit()

        batches = db_session.query(InventoryBatch).filter_by(product_id=product.id).order_by(InventoryBatch.id).all()
        assert [b.quantity for b in batches] == [Decimal("2"), Decimal("3")]
        assert all(b.batch_number == "LOT-A" for b in batches)
        assert all(b.purchase_order_id == po.id and b.supplier_id == supplier.id for b in batches)
        assert all(b.purchase_price == Decimal("6") for b in batches)

        moves = db_session.query(StockTransaction).filter_by(txn_type=MovementType.PURCHASE_RECEIPT).all()
        assert len(moves) == 2

    def test_unknown_line_fails_whole_call(self, db_session, supplier, product):
        po = _pending(db_session, supplier, product)

        with pytest.raises(NotFoundError, match="not on purchase order"):
            po_svc.receive_items(db_session, po.id, [
                ReceiveLineIn(item_id=po.items[0].id, received_quantity=Decimal("5"),
                              batch_number="LOT-A", expiry_date=EXPIRY),
                ReceiveLineIn(item_id=9999, received_quantity=Decimal("1"),
                              batch_number="LOT-A", expiry_date=EXPIRY),
            ])
        db_session.rollback()

        assert po.items[0].received_quantity == 0
        assert po.status == POStatus.PENDING
        assert db_session.query(InventoryBatch).count() == 0

    def test_draft_order_cannot_be_received(self, db_session, supplier, product):
        po = _create(db_session, supplier, product)

        with pytest.raises(StateError):
            _receive(db_session, po, "1")

    def test_received_order_cannot_be_received_again(self, db_session, supplier, product):
        po = _pending(db_session, supplier, product, qty="2")
        _receive(db_session, po, "2")
        db_session.commit()

        with pytest.raises(StateError):
            _receive(db_session, po, "1")


class TestLifecycle:

    def test_only_drafts_can_be_deleted(self, db_session, supplier, product):
        draft = _create(db_session, supplier, product)
        pending = _pending(db_session, supplier, product)

        po_svc.remove_purchase_order(db_session, draft.id)
        db_session.commit()
        with pytest.raises(StateError, match="Only draft"):
            po_svc.remove_purchase_order(db_session, pending.id)

        assert db_session.query(PurchaseOrder).count() == 1

    def test_partial_is_not_a_manual_target(self, db_session, supplier, product):
        po = _create(db_session, supplier, product)

        with pytest.raises(StateError, match="Invalid status change"):
            po_svc.update_status(db_session, po.id, POStatus.PARTIAL)

    def test_pending_can_be_cancelled(self, db_session, supplier, product):
        po = _pending(db_session, supplier, product)

        po_svc.update_status(db_session, po.id, POStatus.CANCELLED)

        assert po.status == POStatus.CANCELLED
