# FILE: pharmaledger/schemas/purchase_orders.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pharmaledger.models import POStatus


class POItemIn(BaseModel):
    product_id: int
    quantity: Decimal
    unit_price: Decimal = Decimal("0")


class POCreate(BaseModel):
    supplier_id: int
    order_date: Optional[date] = None
    expected_date: Optional[date] = None
    notes: str = ""

    items: List[POItemIn] = Field(default_factory=list)


class POUpdate(BaseModel):
    expected_date: Optional[date] = None
    notes: Optional[str] = None

    items: Optional[List[POItemIn]] = None


class POStatusIn(BaseModel):
    status: POStatus


class ReceiveLineIn(BaseModel):
    item_id: int
    received_quantity: Decimal
    batch_number: str
    expiry_date: date


class ReceiveIn(BaseModel):
    items: List[ReceiveLineIn] = Field(default_factory=list)


class POItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    received_quantity: Decimal
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class POOut(BaseModel):
    id: int
    order_number: str
    supplier_id: int
    supplier_name: Optional[str] = None
    order_date: date
    expected_date: Optional[date] = None
    notes: str
    status: POStatus
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime

    items: List[POItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
