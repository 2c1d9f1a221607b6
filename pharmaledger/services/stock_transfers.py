# FILE: pharmaledger/services/stock_transfers.py
from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from pharmaledger.models import (
    Customer,
    InventoryBatch,
    MovementType,
    PartnerType,
    Product,
    PurchaseOrder,
    ReferenceType,
    SalesOrder,
    StockTransfer,
    StockTransferItem,
    Supplier,
    TransferStatus,
    TransferType,
)
from pharmaledger.services.errors import (
    InsufficientStockError,
    LedgerValidationError,
    StateError,
)
from pharmaledger.services.inventory import apply_batch_delta, available_batches, record_movement
from pharmaledger.services.lookup import get_or_404
from pharmaledger.services.number_series import next_document_number
from pharmaledger.utils.num import D, money2, qty4
from pharmaledger.utils.timezone import now_local, today_local

logger = logging.getLogger(__name__)

TRANSFER_PREFIXES = {
    TransferType.IMPORT: "PN",
    TransferType.IMPORT_RETURN: "PNH",
    TransferType.EXPORT: "PX",
    TransferType.EXPORT_RETURN: "PXT",
    TransferType.EXPORT_GIFT: "PXTG",
    TransferType.EXPORT_DESTRUCTION: "PXH",
}


# -------------------------
# Direction variants
# -------------------------
class TransferDirection:
    """Line validation and ledger settlement for one side of the stock movement."""

    name = ""
    movement: MovementType

    def build_line(self, db: Session, it) -> StockTransferItem:
        raise NotImplementedError

    def check(self, db: Session, transfer: StockTransfer) -> None:
        """Validate the whole transfer against current stock. Must not mutate."""

    def settle(self, db: Session, transfer: StockTransfer) -> None:
        raise NotImplementedError


class Inbound(TransferDirection):
    """import / import_return: stock comes in, merged by (product, batch number)."""

    name = "inbound"
    movement = MovementType.TRANSFER_IN

    def build_line(self, db: Session, it) -> StockTransferItem:
        batch_number = (it.batch_number or "").strip()
        if not batch_number:
            raise LedgerValidationError("Batch number is required for incoming stock")
        if it.expiry_date is None:
            raise LedgerValidationError("Expiry date is required for incoming stock")
        return StockTransferItem(
            product_id=it.product_id,
            inventory_batch_id=None,
            batch_number=batch_number,
            quantity=qty4(it.quantity),
            unit_price=D(it.unit_price),
            expiry_date=it.expiry_date,
            reason=it.reason or "",
        )

    def settle(self, db: Session, transfer: StockTransfer) -> None:
        supplier_id = transfer.partner_id if transfer.partner_type == PartnerType.SUPPLIER else None

        for li in transfer.items:
            batch = (
                db.query(InventoryBatch)
                .filter(
                    InventoryBatch.product_id == li.product_id,
                    InventoryBatch.batch_number == li.batch_number,
                )
                .order_by(InventoryBatch.id.asc())
                .with_for_update()
                .first()
            )
            if batch:
                apply_batch_delta(
                    db, batch, li.quantity,
                    txn_type=self.movement,
                    ref_type="stock_transfer",
                    ref_id=transfer.id,
                    note=transfer.transfer_number,
                )
            else:
                batch = InventoryBatch(
                    product_id=li.product_id,
                    batch_number=li.batch_number,
                    quantity=qty4(li.quantity),
                    expiry_date=li.expiry_date,
                    purchase_price=D(li.unit_price),
                    supplier_id=supplier_id,
                    stock_transfer_id=transfer.id,
                )
                db.add(batch)
                db.flush()
                record_movement(
                    db,
                    batch=batch,
                    txn_type=self.movement,
                    qty_delta=li.quantity,
                    ref_type="stock_transfer",
                    ref_id=transfer.id,
                    note=transfer.transfer_number,
                )
            li.inventory_batch_id = batch.id
            db.flush()


class Outbound(TransferDirection):
    """export / export_return / export_gift / export_destruction: drains pre-selected batches."""

    name = "outbound"
    movement = MovementType.TRANSFER_OUT

    def build_line(self, db: Session, it) -> StockTransferItem:
        if it.inventory_batch_id is None:
            raise LedgerValidationError("An inventory batch must be selected for outgoing stock")
        batch = get_or_404(db, InventoryBatch, it.inventory_batch_id, f"Inventory batch {it.inventory_batch_id}")
        if batch.product_id != it.product_id:
            raise LedgerValidationError(
                f"Batch {batch.batch_number} does not belong to product {it.product_id}"
            )
        return StockTransferItem(
            product_id=it.product_id,
            inventory_batch_id=batch.id,
            batch_number=(it.batch_number or "").strip() or batch.batch_number,
            quantity=qty4(it.quantity),
            unit_price=D(it.unit_price),
            expiry_date=it.expiry_date or batch.expiry_date,
            reason=it.reason or "",
        )

    def _requested(self, transfer: StockTransfer) -> Dict[int, Decimal]:
        requested: Dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
        for li in transfer.items:
            if li.inventory_batch_id is None:
                raise LedgerValidationError("An inventory batch must be selected for outgoing stock")
            requested[li.inventory_batch_id] += D(li.quantity)
        return requested

    def check(self, db: Session, transfer: StockTransfer) -> None:
        for batch_id, qty in self._requested(transfer).items():
            batch = get_or_404(db, InventoryBatch, batch_id, f"Inventory batch {batch_id}", lock=True)
            if D(batch.quantity) < qty:
                raise InsufficientStockError(
                    f"Insufficient stock for batch {batch.batch_number}: "
                    f"available {qty4(batch.quantity)}, requested {qty4(qty)}"
                )

    def settle(self, db: Session, transfer: StockTransfer) -> None:
        for li in transfer.items:
            batch = get_or_404(db, InventoryBatch, li.inventory_batch_id, "Inventory batch", lock=True)
            apply_batch_delta(
                db, batch, -D(li.quantity),
                txn_type=self.movement,
                ref_type="stock_transfer",
                ref_id=transfer.id,
                note=transfer.transfer_number,
            )
        db.flush()


INBOUND = Inbound()
OUTBOUND = Outbound()

_DIRECTIONS = {
    TransferType.IMPORT: INBOUND,
    TransferType.IMPORT_RETURN: INBOUND,
    TransferType.EXPORT: OUTBOUND,
    TransferType.EXPORT_RETURN: OUTBOUND,
    TransferType.EXPORT_GIFT: OUTBOUND,
    TransferType.EXPORT_DESTRUCTION: OUTBOUND,
}


def direction_of(transfer_type: TransferType) -> TransferDirection:
    return _DIRECTIONS[TransferType(transfer_type)]


# -------------------------
# Helpers
# -------------------------
def _check_partner(db: Session, partner_type: Optional[PartnerType], partner_id: Optional[int]) -> None:
    if partner_type is None and partner_id is None:
        return
    if partner_type is None or partner_id is None:
        raise LedgerValidationError("Partner type and partner id go together")
    model = Supplier if partner_type == PartnerType.SUPPLIER else Customer
    get_or_404(db, model, partner_id, partner_type.value.capitalize())


def _check_reference(db: Session, reference_type: Optional[ReferenceType], reference_id: Optional[int]) -> None:
    if reference_type == ReferenceType.PURCHASE_ORDER:
        get_or_404(db, PurchaseOrder, reference_id, "Purchase order")
    elif reference_type == ReferenceType.SALES_ORDER:
        get_or_404(db, SalesOrder, reference_id, "Sales order")


def _build_items(db: Session, direction: TransferDirection, items) -> List[StockTransferItem]:
    if not items:
        raise LedgerValidationError("At least one item is required")
    out = []
    for it in items:
        get_or_404(db, Product, it.product_id, f"Product {it.product_id}")
        if D(it.quantity) <= 0:
            raise LedgerValidationError("Quantity must be > 0")
        if D(it.unit_price) < 0:
            raise LedgerValidationError("Unit price cannot be negative")
        out.append(direction.build_line(db, it))
    return out


def _recalc_total(transfer: StockTransfer) -> None:
    transfer.total_amount = money2(
        sum((D(li.quantity) * D(li.unit_price) for li in transfer.items), Decimal("0"))
    )


def _ensure_draft(transfer: StockTransfer, action: str) -> None:
    if transfer.status != TransferStatus.DRAFT:
        raise StateError(
            f"Stock transfer {transfer.transfer_number} is {transfer.status.value}, only drafts can be {action}"
        )


# -------------------------
# Operations
# -------------------------
def get_stock_transfer(db: Session, transfer_id: int, *, lock: bool = False) -> StockTransfer:
    return get_or_404(db, StockTransfer, transfer_id, "Stock transfer", lock=lock)


def list_stock_transfers(
    db: Session,
    transfer_type: Optional[TransferType] = None,
    status: Optional[TransferStatus] = None,
) -> List[StockTransfer]:
    q = db.query(StockTransfer).options(selectinload(StockTransfer.items))
    if transfer_type:
        q = q.filter(StockTransfer.transfer_type == transfer_type)
    if status:
        q = q.filter(StockTransfer.status == status)
    return q.order_by(StockTransfer.id.desc()).all()


def create_stock_transfer(db: Session, payload) -> StockTransfer:
    transfer_type = TransferType(payload.transfer_type)
    direction = direction_of(transfer_type)

    _check_partner(db, payload.partner_type, payload.partner_id)
    _check_reference(db, payload.reference_type, payload.reference_id)
    items = _build_items(db, direction, payload.items)

    transfer_date = payload.transfer_date or today_local()
    transfer = StockTransfer(
        transfer_number=next_document_number(
            db,
            f"stock_transfer:{transfer_type.value}",
            TRANSFER_PREFIXES[transfer_type],
            today_local(),
        ),
        transfer_type=transfer_type,
        status=TransferStatus.DRAFT,
        partner_type=payload.partner_type,
        partner_id=payload.partner_id,
        reference_type=payload.reference_type,
        reference_id=payload.reference_id,
        transfer_date=transfer_date,
        notes=payload.notes or "",
    )
    transfer.items = items
    _recalc_total(transfer)

    db.add(transfer)
    db.flush()
    logger.info("Stock transfer %s (%s) created with %d line(s)",
                transfer.transfer_number, transfer_type.value, len(items))
    return transfer


def update_stock_transfer(db: Session, transfer_id: int, payload) -> StockTransfer:
    transfer = get_stock_transfer(db, transfer_id, lock=True)
    _ensure_draft(transfer, "edited")

    data = payload.model_dump(exclude_unset=True)
    if "partner_type" in data or "partner_id" in data:
        partner_type = data.get("partner_type", transfer.partner_type)
        partner_id = data.get("partner_id", transfer.partner_id)
        _check_partner(db, partner_type, partner_id)
        transfer.partner_type = partner_type
        transfer.partner_id = partner_id
    if data.get("transfer_date") is not None:
        transfer.transfer_date = data["transfer_date"]
    if data.get("notes") is not None:
        transfer.notes = data["notes"]
    if payload.items is not None:
        transfer.items = _build_items(db, direction_of(transfer.transfer_type), payload.items)
        _recalc_total(transfer)

    db.flush()
    return transfer


def confirm_stock_transfer(db: Session, transfer_id: int) -> StockTransfer:
    transfer = get_stock_transfer(db, transfer_id, lock=True)
    _ensure_draft(transfer, "confirmed")
    if not transfer.items:
        raise LedgerValidationError("Stock transfer has no items")

    direction = direction_of(transfer.transfer_type)
    direction.check(db, transfer)
    direction.settle(db, transfer)

    transfer.status = TransferStatus.CONFIRMED
    transfer.confirmed_at = now_local()
    db.flush()
    logger.info("Stock transfer %s confirmed (%s, %d line(s))",
                transfer.transfer_number, direction.name, len(transfer.items))
    return transfer


def cancel_stock_transfer(db: Session, transfer_id: int) -> StockTransfer:
    transfer = get_stock_transfer(db, transfer_id, lock=True)
    _ensure_draft(transfer, "cancelled")
    transfer.status = TransferStatus.CANCELLED
    transfer.cancelled_at = now_local()
    db.flush()
    logger.info("Stock transfer %s cancelled", transfer.transfer_number)
    return transfer


def remove_stock_transfer(db: Session, transfer_id: int) -> None:
    transfer = get_stock_transfer(db, transfer_id, lock=True)
    _ensure_draft(transfer, "deleted")
    db.delete(transfer)
    db.flush()
    logger.info("Stock transfer %s deleted", transfer.transfer_number)


def available_inventory(db: Session, product_id: int) -> List[InventoryBatch]:
    return available_batches(db, product_id)
