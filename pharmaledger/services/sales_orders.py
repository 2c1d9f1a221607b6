# FILE: pharmaledger/services/sales_orders.py
from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from pharmaledger.models import (
    Customer,
    MovementType,
    Product,
    SalesOrder,
    SalesOrderItem,
    SalesOrderStatusLog,
    Salesman,
    SOStatus,
)
from pharmaledger.services.discounts import get_applicable_for_order, price_line
from pharmaledger.services.errors import LedgerValidationError, NotFoundError, StateError
from pharmaledger.services.inventory import allocate_fifo, apply_batch_delta
from pharmaledger.services.lookup import get_or_404
from pharmaledger.services.number_series import next_document_number
from pharmaledger.utils.num import D, money2, qty4
from pharmaledger.utils.timezone import today_local

logger = logging.getLogger(__name__)

NUMBER_KEY = "sales_order"
NUMBER_PREFIX = "SO"

# partial / completed are only reached through fulfill_items
_ALLOWED_TRANSITIONS = {
    SOStatus.DRAFT: {SOStatus.PENDING, SOStatus.CANCELLED},
    SOStatus.PENDING: {SOStatus.CANCELLED},
    SOStatus.PARTIAL: set(),
    SOStatus.COMPLETED: set(),
    SOStatus.CANCELLED: set(),
}

_FULFILLABLE = {SOStatus.PENDING, SOStatus.PARTIAL}


def _log_status(so: SalesOrder, from_status: Optional[SOStatus], to_status: SOStatus,
                comment: str = "", changed_by: str = "") -> None:
    so.status_logs.append(
        SalesOrderStatusLog(
            from_status=from_status.value if from_status else None,
            to_status=to_status.value,
            comment=comment or "",
            changed_by=changed_by or "",
        )
    )


def get_sales_order(db: Session, so_id: int, *, lock: bool = False) -> SalesOrder:
    return get_or_404(db, SalesOrder, so_id, "Sales order", lock=lock)


def list_sales_orders(
    db: Session,
    status: Optional[SOStatus] = None,
    customer_id: Optional[int] = None,
    salesman_id: Optional[int] = None,
) -> List[SalesOrder]:
    q = db.query(SalesOrder).options(
        selectinload(SalesOrder.items),
        selectinload(SalesOrder.customer),
        selectinload(SalesOrder.salesman),
    )
    if status:
        q = q.filter(SalesOrder.status == status)
    if customer_id:
        q = q.filter(SalesOrder.customer_id == customer_id)
    if salesman_id:
        q = q.filter(SalesOrder.salesman_id == salesman_id)
    return q.order_by(SalesOrder.id.desc()).all()


def create_sales_order(db: Session, payload) -> SalesOrder:
    """
    Creates a draft order with prices and discounts frozen on every line.
    Later edits to discount rules never touch existing orders.
    """
    get_or_404(db, Customer, payload.customer_id, "Customer")
    if payload.salesman_id is not None:
        get_or_404(db, Salesman, payload.salesman_id, "Salesman")
    if not payload.items:
        raise LedgerValidationError("At least one item is required")

    products: Dict[int, Product] = {}
    for it in payload.items:
        products[it.product_id] = get_or_404(db, Product, it.product_id, f"Product {it.product_id}")
        if D(it.quantity) <= 0:
            raise LedgerValidationError("Quantity must be > 0")
        if it.unit_price is not None and D(it.unit_price) < 0:
            raise LedgerValidationError("Unit price cannot be negative")

    applied = get_applicable_for_order(db, payload.customer_id, payload.salesman_id, list(products))

    items: List[SalesOrderItem] = []
    for it in payload.items:
        base = it.unit_price if it.unit_price is not None else products[it.product_id].sale_price
        priced = price_line(base, it.quantity, applied.get(it.product_id))
        items.append(
            SalesOrderItem(
                product_id=it.product_id,
                quantity=qty4(it.quantity),
                fulfilled_quantity=Decimal("0"),
                **priced,
            )
        )

    order_date = payload.order_date or today_local()
    so = SalesOrder(
        # numbered by creation month, order_date may be backdated
        order_number=next_document_number(db, NUMBER_KEY, NUMBER_PREFIX, today_local()),
        customer_id=payload.customer_id,
        salesman_id=payload.salesman_id,
        order_date=order_date,
        notes=payload.notes or "",
        status=SOStatus.DRAFT,
        total_amount=money2(sum((li.line_total for li in items), Decimal("0"))),
        total_discount_amount=money2(sum((li.discount_amount for li in items), Decimal("0"))),
    )
    so.items = items
    _log_status(so, None, SOStatus.DRAFT, comment="created")

    db.add(so)
    db.flush()
    logger.info(
        "Sales order %s created (%d lines, total %s, discount %s)",
        so.order_number, len(items), so.total_amount, so.total_discount_amount,
    )
    return so


def update_status(db: Session, so_id: int, target: SOStatus, comment: str = "", changed_by: str = "") -> SalesOrder:
    so = get_sales_order(db, so_id, lock=True)
    allowed = _ALLOWED_TRANSITIONS.get(so.status, set())
    if target not in allowed:
        raise StateError(f"Invalid status change {so.status.value} -> {target.value}")
    _log_status(so, so.status, target, comment=comment, changed_by=changed_by)
    so.status = target
    db.flush()
    logger.info("Sales order %s -> %s", so.order_number, target.value)
    return so


def fulfill_items(db: Session, so_id: int, lines, changed_by: str = "") -> SalesOrder:
    """
    Ship goods for a sales order, consuming batches FIFO by expiry.

    Availability is checked per product for the whole call before the first
    batch is touched, so a short product fails the call with nothing deducted.
    """
    so = get_sales_order(db, so_id, lock=True)
    if so.status not in _FULFILLABLE:
        raise StateError(f"Sales order {so.order_number} is {so.status.value}, it cannot be fulfilled")
    if not lines:
        raise LedgerValidationError("At least one item is required")

    by_id = {li.id: li for li in so.items}
    plan = []
    needed: Dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    products: Dict[int, Product] = {}
    for ln in lines:
        li = by_id.get(ln.item_id)
        if li is None:
            raise NotFoundError(f"Item {ln.item_id} is not on sales order {so.order_number}")
        qty = D(ln.fulfilled_quantity)
        if qty <= 0:
            raise LedgerValidationError("Fulfilled quantity must be > 0")
        plan.append((li, qty))
        needed[li.product_id] += qty
        products[li.product_id] = li.product

    # dry run: raises InsufficientStockError before any mutation
    for product_id, qty in needed.items():
        allocate_fifo(db, products[product_id], qty)

    for li, qty in plan:
        for batch, take in allocate_fifo(db, li.product, qty):
            apply_batch_delta(
                db, batch, -take,
                txn_type=MovementType.SALE_FULFILMENT,
                ref_type="sales_order",
                ref_id=so.id,
                note=so.order_number,
            )
        li.fulfilled_quantity = qty4(D(li.fulfilled_quantity) + qty)
        db.flush()

    previous = so.status
    all_done = all(D(li.fulfilled_quantity) >= D(li.quantity) for li in so.items)
    so.status = SOStatus.COMPLETED if all_done else SOStatus.PARTIAL
    if so.status != previous:
        _log_status(so, previous, so.status, comment="fulfilment", changed_by=changed_by)

    db.flush()
    logger.info("Sales order %s fulfilled %d line(s), status %s", so.order_number, len(plan), so.status.value)
    return so


def remove_sales_order(db: Session, so_id: int) -> None:
    so = get_sales_order(db, so_id, lock=True)
    if so.status != SOStatus.DRAFT:
        raise StateError("Only draft sales orders can be deleted")
    db.delete(so)
    db.flush()
    logger.info("Sales order %s deleted", so.order_number)


def status_history(db: Session, so_id: int) -> List[SalesOrderStatusLog]:
    so = get_sales_order(db, so_id)
    return list(so.status_logs)
