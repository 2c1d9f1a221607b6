# FILE: pharmaledger/services/inventory.py
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmaledger.core.config import settings
from pharmaledger.models import (
    InventoryBatch,
    MovementType,
    Product,
    StockTransaction,
    StockTransfer,
    StockTransferItem,
    Supplier,
)
from pharmaledger.services.errors import (
    InsufficientStockError,
    LedgerValidationError,
    ReferenceInUseError,
)
from pharmaledger.services.lookup import get_or_404
from pharmaledger.utils.num import D, qty4
from pharmaledger.utils.timezone import today_local

logger = logging.getLogger(__name__)


# -------------------------
# Ledger primitives
# -------------------------
def record_movement(
    db: Session,
    *,
    batch: InventoryBatch,
    txn_type: MovementType,
    qty_delta: Decimal,
    ref_type: str = "",
    ref_id: Optional[int] = None,
    note: str = "",
) -> StockTransaction:
    """
    Central creator for StockTransaction, always use this so the journal is consistent.
    """
    if batch.id is None:
        db.flush()
    st = StockTransaction(
        product_id=batch.product_id,
        batch_id=batch.id,
        txn_type=txn_type,
        ref_type=ref_type or "",
        ref_id=ref_id,
        quantity_change=qty4(qty_delta),
        balance_after=qty4(batch.quantity),
        note=note or "",
    )
    db.add(st)
    return st


def apply_batch_delta(
    db: Session,
    batch: InventoryBatch,
    delta,
    *,
    txn_type: MovementType,
    ref_type: str = "",
    ref_id: Optional[int] = None,
    note: str = "",
) -> StockTransaction:
    """
    Positive delta = stock in, negative delta = stock out.
    Stock never goes below zero.
    """
    new_qty = D(batch.quantity) + D(delta)
    if new_qty < 0:
        raise InsufficientStockError(
            f"Insufficient stock for batch {batch.batch_number}: "
            f"available {qty4(batch.quantity)}, requested {qty4(-D(delta))}"
        )
    batch.quantity = qty4(new_qty)
    return record_movement(
        db,
        batch=batch,
        txn_type=txn_type,
        qty_delta=D(delta),
        ref_type=ref_type,
        ref_id=ref_id,
        note=note,
    )


def available_quantity(db: Session, product_id: int) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(InventoryBatch.quantity), 0))
        .filter(InventoryBatch.product_id == product_id, InventoryBatch.quantity > 0)
        .scalar()
    )
    return qty4(total)


def allocate_fifo(
    db: Session,
    product: Product,
    quantity,
) -> List[Tuple[InventoryBatch, Decimal]]:
    """
    FIFO-by-expiry allocation for one product.

    - Only batches with quantity > 0
    - Earliest expiry first, id as tie-breaker
    - Locks rows FOR UPDATE
    - Returns list of (batch, qty_to_take), nothing is mutated here
    - Raises InsufficientStockError naming the product when stock is short
    """
    quantity = D(quantity)
    if quantity <= 0:
        raise LedgerValidationError("Quantity must be > 0")

    batches = (
        db.query(InventoryBatch)
        .filter(InventoryBatch.product_id == product.id, InventoryBatch.quantity > 0)
        .order_by(InventoryBatch.expiry_date.asc(), InventoryBatch.id.asc())
        .with_for_update()
        .all()
    )

    remaining = quantity
    allocations: List[Tuple[InventoryBatch, Decimal]] = []

    for batch in batches:
        if remaining <= 0:
            break
        available = D(batch.quantity)
        if available <= 0:
            continue
        take = available if available <= remaining else remaining
        allocations.append((batch, take))
        remaining -= take

    if remaining > 0:
        available_total = quantity - remaining
        raise InsufficientStockError(
            f"Insufficient stock for product {product.name}: "
            f"requested {qty4(quantity)}, available {qty4(available_total)}"
        )

    return allocations


# -------------------------
# Batch CRUD
# -------------------------
def list_batches(db: Session, product_id: Optional[int] = None, include_empty: bool = True) -> List[InventoryBatch]:
    q = db.query(InventoryBatch)
    if product_id:
        q = q.filter(InventoryBatch.product_id == product_id)
    if not include_empty:
        q = q.filter(InventoryBatch.quantity > 0)
    return q.order_by(InventoryBatch.expiry_date.asc(), InventoryBatch.id.asc()).all()


def get_batch(db: Session, batch_id: int) -> InventoryBatch:
    return get_or_404(db, InventoryBatch, batch_id, "Inventory batch")


def available_batches(db: Session, product_id: int) -> List[InventoryBatch]:
    get_or_404(db, Product, product_id, "Product")
    return list_batches(db, product_id=product_id, include_empty=False)


def create_batch(db: Session, payload) -> InventoryBatch:
    get_or_404(db, Product, payload.product_id, "Product")
    if payload.supplier_id is not None:
        get_or_404(db, Supplier, payload.supplier_id, "Supplier")
    if not (payload.batch_number or "").strip():
        raise LedgerValidationError("Batch number is required")
    if D(payload.quantity) < 0:
        raise LedgerValidationError("Quantity cannot be negative")

    batch = InventoryBatch(
        product_id=payload.product_id,
        batch_number=payload.batch_number.strip(),
        quantity=qty4(payload.quantity),
        expiry_date=payload.expiry_date,
        purchase_price=D(payload.purchase_price),
        location=payload.location,
        supplier_id=payload.supplier_id,
    )
    db.add(batch)
    db.flush()

    if batch.quantity > 0:
        record_movement(
            db,
            batch=batch,
            txn_type=MovementType.ADJUSTMENT,
            qty_delta=batch.quantity,
            ref_type="manual",
            note="opening stock",
        )
    return batch


def update_batch(db: Session, batch_id: int, payload) -> InventoryBatch:
    batch = get_or_404(db, InventoryBatch, batch_id, "Inventory batch", lock=True)
    data = payload.model_dump(exclude_unset=True)

    if data.get("quantity") is not None:
        target = D(data["quantity"])
        if target < 0:
            raise LedgerValidationError("Quantity cannot be negative")
        delta = target - D(batch.quantity)
        if delta != 0:
            apply_batch_delta(
                db, batch, delta,
                txn_type=MovementType.ADJUSTMENT,
                ref_type="manual",
                note="quantity set",
            )
    if "location" in data:
        batch.location = data["location"]

    db.flush()
    return batch


def adjust_quantity(db: Session, batch_id: int, delta, note: str = "") -> InventoryBatch:
    batch = get_or_404(db, InventoryBatch, batch_id, "Inventory batch", lock=True)
    if D(delta) == 0:
        raise LedgerValidationError("Adjustment must not be zero")
    apply_batch_delta(
        db, batch, delta,
        txn_type=MovementType.ADJUSTMENT,
        ref_type="manual",
        note=note,
    )
    db.flush()
    logger.info("Batch %s (%s) adjusted by %s -> %s", batch.id, batch.batch_number, delta, batch.quantity)
    return batch


def remove_batch(db: Session, batch_id: int) -> None:
    batch = get_or_404(db, InventoryBatch, batch_id, "Inventory batch")
    # any status: confirmed lines keep pointing at the batch they moved
    used = (
        db.query(StockTransfer.transfer_number, StockTransfer.status)
        .join(StockTransferItem, StockTransferItem.stock_transfer_id == StockTransfer.id)
        .filter(StockTransferItem.inventory_batch_id == batch.id)
        .order_by(StockTransfer.id.asc())
        .first()
    )
    if used:
        number, status = used
        raise ReferenceInUseError(
            f"Batch {batch.batch_number} is used on stock transfer {number} ({status.value})"
        )
    db.delete(batch)
    db.flush()
    logger.info("Inventory batch %s (%s) removed", batch_id, batch.batch_number)


# -------------------------
# Stock views
# -------------------------
def stock_totals(db: Session, product_ids: Optional[Iterable[int]] = None) -> Dict[int, Decimal]:
    q = db.query(InventoryBatch.product_id, func.sum(InventoryBatch.quantity)).group_by(InventoryBatch.product_id)
    if product_ids is not None:
        ids = list(product_ids)
        if not ids:
            return {}
        q = q.filter(InventoryBatch.product_id.in_(ids))
    return {pid: qty4(total) for pid, total in q.all()}


def expiring_batches(db: Session, within_days: Optional[int] = None) -> List[InventoryBatch]:
    days = settings.EXPIRY_ALERT_DAYS if within_days is None else within_days
    limit_date = today_local() + timedelta(days=days)
    return (
        db.query(InventoryBatch)
        .filter(InventoryBatch.quantity > 0, InventoryBatch.expiry_date <= limit_date)
        .order_by(InventoryBatch.expiry_date.asc(), InventoryBatch.id.asc())
        .all()
    )


def low_stock_products(db: Session) -> List[Tuple[Product, Decimal]]:
    products = db.query(Product).filter(Product.is_active.is_(True)).order_by(Product.name.asc()).all()
    totals = stock_totals(db, [p.id for p in products])
    out = []
    for p in products:
        total = totals.get(p.id, Decimal("0"))
        if total < D(p.min_stock):
            out.append((p, total))
    return out


def list_transactions(
    db: Session,
    product_id: Optional[int] = None,
    batch_id: Optional[int] = None,
    limit: int = 200,
) -> List[StockTransaction]:
    q = db.query(StockTransaction)
    if product_id:
        q = q.filter(StockTransaction.product_id == product_id)
    if batch_id:
        q = q.filter(StockTransaction.batch_id == batch_id)
    return q.order_by(StockTransaction.id.desc()).limit(limit).all()
