# FILE: pharmaledger/schemas/stock_transfers.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pharmaledger.models import TransferType, TransferStatus, PartnerType, ReferenceType


class TransferItemIn(BaseModel):
    product_id: int
    inventory_batch_id: Optional[int] = None
    batch_number: Optional[str] = None
    quantity: Decimal
    unit_price: Decimal = Decimal("0")
    expiry_date: Optional[date] = None
    reason: str = ""


class TransferCreate(BaseModel):
    transfer_type: TransferType
    partner_type: Optional[PartnerType] = None
    partner_id: Optional[int] = None
    reference_type: Optional[ReferenceType] = None
    reference_id: Optional[int] = None
    transfer_date: Optional[date] = None
    notes: str = ""

    items: List[TransferItemIn] = Field(default_factory=list)


class TransferUpdate(BaseModel):
    partner_type: Optional[PartnerType] = None
    partner_id: Optional[int] = None
    transfer_date: Optional[date] = None
    notes: Optional[str] = None

    items: Optional[List[TransferItemIn]] = None


class TransferItemOut(BaseModel):
    id: int
    product_id: int
    inventory_batch_id: Optional[int] = None
    batch_number: str
    quantity: Decimal
    unit_price: Decimal
    expiry_date: date
    reason: str

    model_config = ConfigDict(from_attributes=True)


class TransferOut(BaseModel):
    id: int
    transfer_number: str
    transfer_type: TransferType
    status: TransferStatus
    partner_type: Optional[PartnerType] = None
    partner_id: Optional[int] = None
    reference_type: Optional[ReferenceType] = None
    reference_id: Optional[int] = None
    transfer_date: date
    notes: str
    total_amount: Decimal
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    items: List[TransferItemOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
