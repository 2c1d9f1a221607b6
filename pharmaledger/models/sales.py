# FILE: pharmaledger/models/sales.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Text, Enum, Index, JSON
)
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local, today_local

Money = Numeric(14, 2)
Qty = Numeric(14, 4)


class SOStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SalesOrder(Base):
    __tablename__ = "sales_orders"
    __table_args__ = (
        Index("ix_sales_orders_customer_date", "customer_id", "order_date"),
        Index("ix_sales_orders_status_date", "status", "order_date"),
    )

    id = Column(Integer, primary_key=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)

    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    salesman_id = Column(Integer, ForeignKey("salesmen.id"), nullable=True, index=True)

    order_date = Column(Date, nullable=False, default=today_local)
    notes = Column(Text, nullable=False, default="")

    status = Column(Enum(SOStatus, name="sales_order_status"), nullable=False, default=SOStatus.DRAFT)
    total_amount = Column(Money, nullable=False, default=Decimal("0.00"))
    total_discount_amount = Column(Money, nullable=False, default=Decimal("0.00"))

    created_at = Column(DateTime, nullable=False, default=now_local)
    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)

    customer = relationship("Customer", back_populates="sales_orders")
    salesman = relationship("Salesman", back_populates="sales_orders")
    items = relationship(
        "SalesOrderItem",
        back_populates="sales_order",
        cascade="all, delete-orphan",
        order_by="SalesOrderItem.id",
    )
    status_logs = relationship(
        "SalesOrderStatusLog",
        back_populates="sales_order",
        cascade="all, delete-orphan",
        order_by="SalesOrderStatusLog.id",
    )

    @property
    def customer_name(self) -> str | None:
        return self.customer.name if self.customer else None

    @property
    def salesman_name(self) -> str | None:
        return self.salesman.name if self.salesman else None


class SalesOrderItem(Base):
    """Prices and discount are frozen when the order is created."""
    __tablename__ = "sales_order_items"

    id = Column(Integer, primary_key=True)
    sales_order_id = Column(Integer, ForeignKey("sales_orders.id", ondelete="CASCADE"),
                            nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Qty, nullable=False, default=Decimal("0"))
    base_unit_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    unit_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))  # net of discount
    discount_percent = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    discount_amount = Column(Money, nullable=False, default=Decimal("0.00"))
    applied_discount_types = Column(JSON, nullable=False, default=list)
    line_total = Column(Money, nullable=False, default=Decimal("0.00"))

    fulfilled_quantity = Column(Qty, nullable=False, default=Decimal("0"))

    sales_order = relationship("SalesOrder", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product else None


class SalesOrderStatusLog(Base):
    __tablename__ = "sales_order_status_logs"

    id = Column(Integer, primary_key=True)
    sales_order_id = Column(Integer, ForeignKey("sales_orders.id", ondelete="CASCADE"),
                            nullable=False, index=True)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=False)
    comment = Column(String(1000), nullable=False, default="")
    changed_by = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=now_local)

    sales_order = relationship("SalesOrder", back_populates="status_logs")
