# FILE: pharmaledger/models/stock_transfer.py
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


class TransferType(str, enum.Enum):
    IMPORT = "import"
    IMPORT_RETURN = "import_return"
    EXPORT = "export"
    EXPORT_RETURN = "export_return"
    EXPORT_GIFT = "export_gift"
    EXPORT_DESTRUCTION = "export_destruction"


class TransferStatus(str, enum.Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PartnerType(str, enum.Enum):
    SUPPLIER = "supplier"
    CUSTOMER = "customer"


class ReferenceType(str, enum.Enum):
    PURCHASE_ORDER = "purchase_order"
    SALES_ORDER = "sales_order"
    MANUAL = "manual"


class StockTransfer(Base):
    __tablename__ = "stock_transfers"
    __table_args__ = (
        Index("ix_stock_transfers_type_status", "transfer_type", "status"),
    )

    id = Column(Integer, primary_key=True)
    transfer_number = Column(String(50), unique=True, nullable=False, index=True)
    transfer_type = Column(Enum(TransferType, name="stock_transfer_type"), nullable=False)
    status = Column(Enum(TransferStatus, name="stock_transfer_status"), nullable=False,
                    default=TransferStatus.DRAFT)

    # polymorphic, so no FK
    partner_type = Column(Enum(PartnerType, name="stock_transfer_partner_type"), nullable=True)
    partner_id = Column(Integer, nullable=True)
    reference_type = Column(Enum(ReferenceType, name="stock_transfer_reference_type"), nullable=True)
    reference_id = Column(Integer, nullable=True)

    transfer_date = Column(Date, nullable=False, default=today_local)
    notes = Column(Text, nullable=False, default="")
    total_amount = Column(Money, nullable=False, default=Decimal("0.00"))

    confirmed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=now_local)
    updated_at = Column(DateTime, nullable=False, default=now_local, onupdate=now_local)

    items = relationship(
        "StockTransferItem",
        back_populates="stock_transfer",
        cascade="all, delete-orphan",
        order_by="StockTransferItem.id",
    )


class StockTransferItem(Base):
    __tablename__ = "stock_transfer_items"

    id = Column(Integer, primary_key=True)
    stock_transfer_id = Column(Integer, ForeignKey("stock_transfers.id", ondelete="CASCADE"),
                               nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    # outbound lines point at the batch they drain
    inventory_batch_id = Column(Integer, ForeignKey("inventory_batches.id"), nullable=True, index=True)

    batch_number = Column(String(100), nullable=False)
    quantity = Column(Qty, nullable=False, default=Decimal("0"))
    unit_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    expiry_date = Column(Date, nullable=False)
    reason = Column(String(1000), nullable=False, default="")

    stock_transfer = relationship("StockTransfer", back_populates="items")
    product = relationship("Product")
    inventory_batch = relationship("InventoryBatch")
