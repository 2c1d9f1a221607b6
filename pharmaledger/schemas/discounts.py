# FILE: pharmaledger/schemas/discounts.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pharmaledger.models import DiscountType


class DiscountRuleBase(BaseModel):
    name: str
    discount_type: DiscountType
    discount_percent: Decimal = Decimal("0")
    salesman_id: int
    customer_id: Optional[int] = None
    product_id: Optional[int] = None
    created_by: str = ""
    is_active: bool = True


class DiscountRuleCreate(DiscountRuleBase):
    pass


class DiscountRuleUpdate(BaseModel):
    name: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_percent: Optional[Decimal] = None
    customer_id: Optional[int] = None
    product_id: Optional[int] = None
    is_active: Optional[bool] = None


class DiscountRuleOut(DiscountRuleBase):
    id: int
    salesman_name: Optional[str] = None
    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApplicableDiscountsIn(BaseModel):
    customer_id: int
    salesman_id: Optional[int] = None
    product_ids: List[int] = Field(default_factory=list)


class AppliedRuleOut(BaseModel):
    id: int
    name: str
    discount_type: DiscountType
    discount_percent: Decimal


class AppliedDiscountOut(BaseModel):
    total_percent: Decimal
    rules: List[AppliedRuleOut] = Field(default_factory=list)
