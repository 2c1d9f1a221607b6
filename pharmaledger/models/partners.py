# FILE: pharmaledger/models/partners.py
from __future__ import annotations

import enum
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, Enum
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local


class EmployeePosition(str, enum.Enum):
    PROBATION = "probation"
    APPRENTICE = "apprentice"
    OFFICIAL = "official"
    COLLABORATOR = "collaborator"
    TEAM_LEAD = "team_lead"
    DEPARTMENT_HEAD = "department_head"
    DEPUTY_DIRECTOR = "deputy_director"
    DIRECTOR = "director"


class TrackingStatus(str, enum.Enum):
    TRACKING = "tracking"
    STOPPED = "stopped"


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), default="")
    phone = Column(String(50), default="")
    email = Column(String(255), default="")
    address = Column(String(1000), default="")
    tax_code = Column(String(50), default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    purchase_orders = relationship("PurchaseOrder", back_populates="supplier")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    customer_type = Column(String(50), default="")  # pharmacy / hospital / clinic ...
    contact_person = Column(String(255), default="")
    phone = Column(String(50), default="")
    email = Column(String(255), default="")
    address = Column(String(1000), default="")
    tax_code = Column(String(50), default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    sales_orders = relationship("SalesOrder", back_populates="customer")


class Salesman(Base):
    __tablename__ = "salesmen"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), default="")
    email = Column(String(255), default="")
    region = Column(String(255), default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    sales_orders = relationship("SalesOrder", back_populates="salesman")
    discount_rules = relationship("DiscountRule", back_populates="salesman")


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), default="")
    email = Column(String(255), default="")

    position = Column(Enum(EmployeePosition, name="employee_position"), nullable=False,
                      default=EmployeePosition.PROBATION)
    tracking_status = Column(Enum(TrackingStatus, name="employee_tracking_status"), nullable=False,
                             default=TrackingStatus.TRACKING)

    hire_date = Column(Date, nullable=True)
    resignation_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)
