# FILE: pharmaledger/models/purchasing.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Text, Enum, Index
)
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local, today_local

Money = Numeric(14, 2)
Qty = Numeric(14, 4)


class POStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    __table_args__ = (
        Index("ix_purchase_orders_supplier_date", "supplier_id", "order_date"),
        Index("ix_purchase_orders_status_date", "status", "order_date"),
    )

    id = Column(Integer, primary_key=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)

    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)

    order_date = Column(Date, nullable=False, default=today_local)
    expected_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=False, default="")

    status = Column(Enum(POStatus, name="purchase_order_status"), nullable=False, default=POStatus.DRAFT)
    total_amount = Column(Money, nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime, nullable=False, default=now_local)
    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)

    supplier = relationship("Supplier", back_populates="purchase_orders")
    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )

    @property
    def supplier_name(self) -> str | None:
        return self.supplier.name if self.supplier else None


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"),
                               nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Qty, nullable=False, default=Decimal("0"))
    unit_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    line_total = Column(Money, nullable=False, default=Decimal("0.00"))

    received_quantity = Column(Qty, nullable=False, default=Decimal("0"))
    # last receipt only; earlier partial receipts live on their inventory batches
    batch_number = Column(String(100), nullable=True)
    expiry_date = Column(Date, nullable=True)

    purchase_order = relationship("PurchaseOrder", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product else None
