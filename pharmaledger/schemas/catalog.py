# FILE: pharmaledger/schemas/catalog.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------- Category ----------
class CategoryBase(BaseModel):
    name: str
    description: str = ""
    is_active: bool = True


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryOut(CategoryBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Unit ----------
class UnitCreate(BaseModel):
    name: str
    value: Optional[str] = None  # defaults to the name


class UnitOut(BaseModel):
    id: int
    name: str
    value: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


# ---------- Product ----------
class ProductBase(BaseModel):
    sku: str
    name: str
    description: str = ""
    category_id: Optional[int] = None
    unit: str = "unit"
    purchase_price: Decimal = Decimal("0")
    sale_price: Decimal = Decimal("0")
    min_stock: Decimal = Decimal("0")
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit: Optional[str] = None
    purchase_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    min_stock: Optional[Decimal] = None
    is_active: Optional[bool] = None


class ProductOut(ProductBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductStockOut(ProductOut):
    total_stock: Decimal
    is_low_stock: bool
