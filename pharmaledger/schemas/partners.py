# FILE: pharmaledger/schemas/partners.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pharmaledger.models import EmployeePosition, TrackingStatus


# ---------- Supplier ----------
class SupplierBase(BaseModel):
    code: str
    name: str
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    tax_code: str = ""
    is_active: bool = True


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_code: Optional[str] = None
    is_active: Optional[bool] = None


class SupplierOut(SupplierBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Customer ----------
class CustomerBase(BaseModel):
    code: str
    name: str
    customer_type: str = ""
    contact_person: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    tax_code: str = ""
    is_active: bool = True


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    customer_type: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    tax_code: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerOut(CustomerBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Salesman ----------
class SalesmanBase(BaseModel):
    code: str
    name: str
    phone: str = ""
    email: str = ""
    region: str = ""
    is_active: bool = True


class SalesmanCreate(SalesmanBase):
    pass


class SalesmanUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    region: Optional[str] = None
    is_active: Optional[bool] = None


class SalesmanOut(SalesmanBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Employee ----------
class EmployeeBase(BaseModel):
    code: str
    name: str
    phone: str = ""
    email: str = ""
    position: EmployeePosition = EmployeePosition.PROBATION
    tracking_status: TrackingStatus = TrackingStatus.TRACKING
    hire_date: Optional[date] = None
    resignation_date: Optional[date] = None
    notes: str = ""
    is_active: bool = True


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    position: Optional[EmployeePosition] = None
    tracking_status: Optional[TrackingStatus] = None
    hire_date: Optional[date] = None
    resignation_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class EmployeeOut(EmployeeBase):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
