# FILE: pharmaledger/models/discounts.py
from __future__ import annotations

import enum
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from pharmaledger.db.base import Base
from pharmaledger.utils.timezone import now_local


class DiscountType(str, enum.Enum):
    DOCTOR = "Doctor"
    HOSPITAL = "hospital"
    PAYMENT = "payment"
    SALESMAN = "Salesman"
    MANAGER = "Manager"


class DiscountRule(Base):
    """
    Percent discount owned by a salesman.
    customer_id / product_id left NULL mean "every customer" / "every product".
    """
    __tablename__ = "discount_rules"
    __table_args__ = (
        Index("ix_discount_rules_salesman_active", "salesman_id", "is_active"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    discount_type = Column(Enum(DiscountType, name="discount_type"), nullable=False)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))

    salesman_id = Column(Integer, ForeignKey("salesmen.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)

    created_by = Column(String(255), nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=now_local, nullable=False)
    updated_at = Column(DateTime, default=now_local, onupdate=now_local, nullable=False)

    salesman = relationship("Salesman", back_populates="discount_rules")
    customer = relationship("Customer")
    product = relationship("Product")

    @property
    def salesman_name(self) -> str | None:
        return self.salesman.name if self.salesman else None

    @property
    def customer_name(self) -> str | None:
        return self.customer.name if self.customer else None

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product else None
