# FILE: pharmaledger/schemas/inventory.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pharmaledger.models import MovementType


class BatchCreate(BaseModel):
    product_id: int
    batch_number: str
    quantity: Decimal = Decimal("0")
    expiry_date: date
    purchase_price: Decimal = Decimal("0")
    location: Optional[str] = None
    supplier_id: Optional[int] = None


class BatchUpdate(BaseModel):
    quantity: Optional[Decimal] = None
    location: Optional[str] = None


class BatchAdjust(BaseModel):
    delta: Decimal
    note: str = ""


class BatchOut(BaseModel):
    id: int
    product_id: int
    batch_number: str
    quantity: Decimal
    expiry_date: date
    purchase_price: Decimal
    location: Optional[str] = None
    supplier_id: Optional[int] = None
    purchase_order_id: Optional[int] = None
    stock_transfer_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockTransactionOut(BaseModel):
    id: int
    product_id: int
    batch_id: Optional[int] = None
    txn_time: datetime
    txn_type: MovementType
    ref_type: str
    ref_id: Optional[int] = None
    quantity_change: Decimal
    balance_after: Decimal
    note: str

    model_config = ConfigDict(from_attributes=True)
