# FILE: pharmaledger/schemas/sales_orders.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pharmaledger.models import SOStatus


class SOItemIn(BaseModel):
    product_id: int
    quantity: Decimal
    unit_price: Optional[Decimal] = None  # defaults to the product sale price


class SOCreate(BaseModel):
    customer_id: int
    salesman_id: Optional[int] = None
    order_date: Optional[date] = None
    notes: str = ""

    items: List[SOItemIn] = Field(default_factory=list)


class SOStatusIn(BaseModel):
    status: SOStatus
    comment: str = ""
    changed_by: str = ""


class FulfillLineIn(BaseModel):
    item_id: int
    fulfilled_quantity: Decimal


class FulfillIn(BaseModel):
    items: List[FulfillLineIn] = Field(default_factory=list)


class SOItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: Decimal
    base_unit_price: Decimal
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    applied_discount_types: List[str] = Field(default_factory=list)
    line_total: Decimal
    fulfilled_quantity: Decimal

    model_config = ConfigDict(from_attributes=True)


class SOOut(BaseModel):
    id: int
    order_number: str
    customer_id: int
    customer_name: Optional[str] = None
    salesman_id: Optional[int] = None
    salesman_name: Optional[str] = None
    order_date: date
    notes: str
    status: SOStatus
    total_amount: Decimal
    total_discount_amount: Decimal
    created_at: datetime
    updated_at: datetime

    items: List[SOItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class StatusLogOut(BaseModel):
    id: int
    from_status: Optional[str] = None
    to_status: str
    comment: str
    changed_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
