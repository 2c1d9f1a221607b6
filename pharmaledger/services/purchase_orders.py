# FILE: pharmaledger/services/purchase_orders.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from pharmaledger.models import (
    InventoryBatch,
    MovementType,
    POStatus,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
)
from pharmaledger.services.errors import LedgerValidationError, NotFoundError, StateError
from pharmaledger.services.inventory import record_movement
from pharmaledger.services.lookup import get_or_404
from pharmaledger.services.number_series import next_document_number
from pharmaledger.utils.num import D, money2, qty4
from pharmaledger.utils.timezone import today_local

logger = logging.getLogger(__name__)

NUMBER_KEY = "purchase_order"
NUMBER_PREFIX = "PO"

# partial / received are only reached through receive_items
_ALLOWED_TRANSITIONS = {
    POStatus.DRAFT: {POStatus.PENDING, POStatus.CANCELLED},
    POStatus.PENDING: {POStatus.CANCELLED},
    POStatus.PARTIAL: set(),
    POStatus.RECEIVED: set(),
    POStatus.CANCELLED: set(),
}

_RECEIVABLE = {POStatus.PENDING, POStatus.PARTIAL}


def _build_items(db: Session, items) -> List[PurchaseOrderItem]:
    if not items:
        raise LedgerValidationError("At least one item is required")

    out: List[PurchaseOrderItem] = []
    for it in items:
        get_or_404(db, Product, it.product_id, f"Product {it.product_id}")
        qty = D(it.quantity)
        price = D(it.unit_price)
        if qty <= 0:
            raise LedgerValidationError("Quantity must be > 0")
        if price < 0:
            raise LedgerValidationError("Unit price cannot be negative")
        out.append(
            PurchaseOrderItem(
                product_id=it.product_id,
                quantity=qty4(qty),
                unit_price=price,
                line_total=money2(qty * price),
                received_quantity=Decimal("0"),
            )
        )
    return out


def _recalc_total(po: PurchaseOrder) -> None:
    po.total_amount = money2(sum((D(li.line_total) for li in po.items), Decimal("0")))


def get_purchase_order(db: Session, po_id: int, *, lock: bool = False) -> PurchaseOrder:
    return get_or_404(db, PurchaseOrder, po_id, "Purchase order", lock=lock)


def list_purchase_orders(
    db: Session,
    status: Optional[POStatus] = None,
    supplier_id: Optional[int] = None,
) -> List[PurchaseOrder]:
    q = db.query(PurchaseOrder).options(
        selectinload(PurchaseOrder.items),
        selectinload(PurchaseOrder.supplier),
    )
    if status:
        q = q.filter(PurchaseOrder.status == status)
    if supplier_id:
        q = q.filter(PurchaseOrder.supplier_id == supplier_id)
    return q.order_by(PurchaseOrder.id.desc()).all()


def create_purchase_order(db: Session, payload) -> PurchaseOrder:
    get_or_404(db, Supplier, payload.supplier_id, "Supplier")
    items = _build_items(db, payload.items)

    order_date = payload.order_date or today_local()
    po = PurchaseOrder(
        # numbered by creation month, order_date may be backdated
        order_number=next_document_number(db, NUMBER_KEY, NUMBER_PREFIX, today_local()),
        supplier_id=payload.supplier_id,
        order_date=order_date,
        expected_date=payload.expected_date,
        notes=payload.notes or "",
        status=POStatus.DRAFT,
    )
    po.items = items
    _recalc_total(po)

    db.add(po)
    db.flush()
    logger.info("Purchase order %s created (%d lines, total %s)", po.order_number, len(items), po.total_amount)
    return po


def update_purchase_order(db: Session, po_id: int, payload) -> PurchaseOrder:
    po = get_purchase_order(db, po_id, lock=True)
    if po.status != POStatus.DRAFT:
        raise StateError("Only draft purchase orders can be edited")

    data = payload.model_dump(exclude_unset=True)
    if "expected_date" in data:
        po.expected_date = data["expected_date"]
    if data.get("notes") is not None:
        po.notes = data["notes"]
    if payload.items is not None:
        po.items = _build_items(db, payload.items)
        _recalc_total(po)

    db.flush()
    return po


def update_status(db: Session, po_id: int, target: POStatus) -> PurchaseOrder:
    po = get_purchase_order(db, po_id, lock=True)
    allowed = _ALLOWED_TRANSITIONS.get(po.status, set())
    if target not in allowed:
        raise StateError(f"Invalid status change {po.status.value} -> {target.value}")
    po.status = target
    db.flush()
    logger.info("Purchase order %s -> %s", po.order_number, target.value)
    return po


def _recalc_status_from_received(po: PurchaseOrder) -> None:
    all_received = all(D(li.received_quantity) >= D(li.quantity) for li in po.items)
    po.status = POStatus.RECEIVED if all_received else POStatus.PARTIAL


def receive_items(db: Session, po_id: int, lines) -> PurchaseOrder:
    """
    Receive goods against a purchase order.

    Every line adds to the running received quantity, overwrites the line's
    last batch number / expiry and inserts a NEW inventory batch (receipts are
    never merged into an existing batch). All lines are validated first; an
    unknown line id fails the whole call.
    """
    po = get_purchase_order(db, po_id, lock=True)
    if po.status not in _RECEIVABLE:
        raise StateError(f"Purchase order {po.order_number} is {po.status.value}, it cannot be received")
    if not lines:
        raise LedgerValidationError("At least one item is required")

    by_id = {li.id: li for li in po.items}
    plan = []
    for ln in lines:
        li = by_id.get(ln.item_id)
        if li is None:
            raise NotFoundError(f"Item {ln.item_id} is not on purchase order {po.order_number}")
        qty = D(ln.received_quantity)
        if qty <= 0:
            raise LedgerValidationError("Received quantity must be > 0")
        if not (ln.batch_number or "").strip():
            raise LedgerValidationError("Batch number is required")
        if ln.expiry_date is None:
            raise LedgerValidationError("Expiry date is required")
        plan.append((li, ln, qty))

    for li, ln, qty in plan:
        batch_number = ln.batch_number.strip()
        li.received_quantity = qty4(D(li.received_quantity) + qty)
        li.batch_number = batch_number
        li.expiry_date = ln.expiry_date

        batch = InventoryBatch(
            product_id=li.product_id,
            batch_number=batch_number,
            quantity=qty4(qty),
            expiry_date=ln.expiry_date,
            purchase_price=D(li.unit_price),
            supplier_id=po.supplier_id,
            purchase_order_id=po.id,
        )
        db.add(batch)
        db.flush()
        record_movement(
            db,
            batch=batch,
            txn_type=MovementType.PURCHASE_RECEIPT,
            qty_delta=qty,
            ref_type="purchase_order",
            ref_id=po.id,
            note=po.order_number,
        )

    _recalc_status_from_received(po)
    db.flush()
    logger.info("Purchase order %s received %d line(s), status %s", po.order_number, len(plan), po.status.value)
    return po


def remove_purchase_order(db: Session, po_id: int) -> None:
    po = get_purchase_order(db, po_id, lock=True)
    if po.status != POStatus.DRAFT:
        raise StateError("Only draft purchase orders can be deleted")
    db.delete(po)
    db.flush()
    logger.info("Purchase order %s deleted", po.order_number)
