# FILE: pharmaledger/models/catalog.py
from __future__ import annotations

from decimal import Decimal
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, Text
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local

Money = Numeric(14, 2)
Qty = Numeric(14, 4)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    products = relationship("Product", back_populates="category")


class Unit(Base):
    """Unit of measure. `value` is the normalised (trimmed, lower-case) key."""
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    value = Column(String(100), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    unit = Column(String(100), nullable=False, default="unit")

    purchase_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    sale_price = Column(Numeric(14, 4), nullable=False, default=Decimal("0"))
    min_stock = Column(Qty, nullable=False, default=Decimal("0"))

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    category = relationship("Category", back_populates="products")
    batches = relationship("InventoryBatch", back_populates="product")
