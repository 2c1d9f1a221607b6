# FILE: pharmaledger/models/inventory.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Enum, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local

Qty = Numeric(14, 4)


class MovementType(str, enum.Enum):
    PURCHASE_RECEIPT = "purchase_receipt"
    SALE_FULFILMENT = "sale_fulfilment"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    ADJUSTMENT = "adjustment"


class InventoryBatch(Base):
    """
    One received lot of a product.
    (product_id, batch_number) is NOT unique: every PO receipt inserts a new row,
    only stock-transfer imports merge into an existing batch.
    """
    __tablename__ = "inventory_batches"
    __table_args__ = (
        Index("ix_inventory_batches_product_expiry", "product_id", "expiry_date"),
        Index("ix_inventory_batches_product_batch", "product_id", "batch_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    batch_number = Column(String(100), nullable=False)
    quantity = Column(Qty, nullable=False, default=Decimal("0"))
    expiry_date = Column(Date, nullable=False)
    purchase_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    location = Column(String(255), nullable=True)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True, index=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=True, index=True)
    stock_transfer_id = Column(Integer, ForeignKey("stock_transfers.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    product = relationship("Product", back_populates="batches")
    supplier = relationship("Supplier")
    transactions = relationship("StockTransaction", back_populates="batch")


class StockTransaction(Base):
    __tablename__ = "stock_transactions"
    __table_args__ = (
        Index("ix_stock_txn_product_time", "product_id", "txn_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    # nulled when the batch is removed, the movement row stays
    batch_id = Column(Integer, ForeignKey("inventory_batches.id", ondelete="SET NULL"), nullable=True, index=True)

    txn_time = Column(DateTime, default=now_local, nullable=False)
    txn_type = Column(Enum(MovementType, name="stock_movement_type"), nullable=False)
    ref_type = Column(String(50), nullable=False, default="")  # purchase_order / sales_order / stock_transfer / manual
    ref_id = Column(Integer, nullable=True)

    quantity_change = Column(Qty, nullable=False)  # +IN / -OUT
    balance_after = Column(Qty, nullable=False)
    note = Column(String(1000), nullable=False, default="")

    batch = relationship("InventoryBatch", back_populates="transactions")


class NumberSeries(Base):
    """Per (key, YYYYMM) counter for document numbers."""
    __tablename__ = "number_series"
    __table_args__ = (
        UniqueConstraint("key", "period", name="uq_number_series_key_period"),
    )

    id = Column(Integer, primary_key=True)
    key = Column(String(50), nullable=False)     # purchase_order / sales_order / stock_transfer:import ...
    period = Column(Integer, nullable=False)     # YYYYMM
    next_seq = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)
