# FILE: pharmaledger/services/partners.py
from __future__ import annotations

import logging
from typing import List, Optional, Type

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmaledger.models import (
    Customer,
    DiscountRule,
    Employee,
    EmployeePosition,
    InventoryBatch,
    PartnerType,
    PurchaseOrder,
    SalesOrder,
    Salesman,
    StockTransfer,
    Supplier,
    TrackingStatus,
)
from pharmaledger.services.errors import ConflictError, LedgerValidationError, ReferenceInUseError
from pharmaledger.services.lookup import get_or_404

logger = logging.getLogger(__name__)

# model -> ((dependent model, fk column name, label), ...)
_DELETE_GUARDS = {
    Supplier: (
        (PurchaseOrder, "supplier_id", "purchase orders"),
        (InventoryBatch, "supplier_id", "inventory batches"),
    ),
    Customer: (
        (SalesOrder, "customer_id", "sales orders"),
        (DiscountRule, "customer_id", "discount rules"),
    ),
    Salesman: (
        (SalesOrder, "salesman_id", "sales orders"),
        (DiscountRule, "salesman_id", "discount rules"),
    ),
}

# stock transfers name their partner by (partner_type, partner_id), not by FK
_TRANSFER_PARTNER_TYPES = {
    Supplier: PartnerType.SUPPLIER,
    Customer: PartnerType.CUSTOMER,
}

_LABELS = {
    Supplier: "Supplier",
    Customer: "Customer",
    Salesman: "Salesman",
    Employee: "Employee",
}


def _ensure_code_free(db: Session, model: Type, code: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(model).filter(model.code == code)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    if q.first():
        raise ConflictError(f"{_LABELS[model]} code '{code}' already exists")


def list_partners(db: Session, model: Type, active_only: bool = False, search: Optional[str] = None) -> List:
    q = db.query(model)
    if active_only:
        q = q.filter(model.is_active.is_(True))
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(model.name.ilike(like), model.code.ilike(like)))
    return q.order_by(model.name.asc()).all()


def get_partner(db: Session, model: Type, obj_id: int):
    return get_or_404(db, model, obj_id, _LABELS[model])


def create_partner(db: Session, model: Type, payload):
    code = (payload.code or "").strip()
    if not code:
        raise LedgerValidationError(f"{_LABELS[model]} code is required")
    if not (payload.name or "").strip():
        raise LedgerValidationError(f"{_LABELS[model]} name is required")
    _ensure_code_free(db, model, code)

    data = payload.model_dump()
    data["code"] = code
    obj = model(**data)
    db.add(obj)
    db.flush()
    return obj


def update_partner(db: Session, model: Type, obj_id: int, payload):
    obj = get_partner(db, model, obj_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("code") is not None:
        data["code"] = data["code"].strip()
        if data["code"] != obj.code:
            _ensure_code_free(db, model, data["code"], exclude_id=obj.id)

    columns = model.__table__.c
    for k, v in data.items():
        # explicit null only clears nullable columns without a default (e.g. resignation_date)
        if v is None and not (k in columns and columns[k].nullable and columns[k].default is None):
            continue
        setattr(obj, k, v)
    db.flush()
    return obj


def remove_partner(db: Session, model: Type, obj_id: int) -> None:
    obj = get_partner(db, model, obj_id)
    for dep_model, fk, label in _DELETE_GUARDS.get(model, ()):
        if db.query(dep_model.id).filter(getattr(dep_model, fk) == obj.id).first():
            raise ReferenceInUseError(f"{_LABELS[model]} '{obj.name}' still has {label}")
    partner_type = _TRANSFER_PARTNER_TYPES.get(model)
    if partner_type is not None and (
        db.query(StockTransfer.id)
        .filter(StockTransfer.partner_type == partner_type, StockTransfer.partner_id == obj.id)
        .first()
    ):
        raise ReferenceInUseError(f"{_LABELS[model]} '{obj.name}' still has stock transfers")
    db.delete(obj)
    db.flush()
    logger.info("%s %s (%s) removed", _LABELS[model], obj.id, obj.code)


# -------------------------
# Employees
# -------------------------
def _check_tracking(status, resignation_date) -> None:
    if status == TrackingStatus.STOPPED and resignation_date is None:
        raise LedgerValidationError("Resignation date is required when tracking is stopped")


def list_employees(
    db: Session,
    position: Optional[EmployeePosition] = None,
    tracking_status: Optional[TrackingStatus] = None,
) -> List[Employee]:
    q = db.query(Employee)
    if position:
        q = q.filter(Employee.position == position)
    if tracking_status:
        q = q.filter(Employee.tracking_status == tracking_status)
    return q.order_by(Employee.name.asc()).all()


def get_employee(db: Session, employee_id: int) -> Employee:
    return get_partner(db, Employee, employee_id)


def create_employee(db: Session, payload) -> Employee:
    _check_tracking(payload.tracking_status, payload.resignation_date)
    return create_partner(db, Employee, payload)


def update_employee(db: Session, employee_id: int, payload) -> Employee:
    emp = get_partner(db, Employee, employee_id)
    data = payload.model_dump(exclude_unset=True)
    status = data.get("tracking_status") or emp.tracking_status
    resignation = data["resignation_date"] if "resignation_date" in data else emp.resignation_date
    _check_tracking(status, resignation)
    return update_partner(db, Employee, employee_id, payload)


def remove_employee(db: Session, employee_id: int) -> None:
    remove_partner(db, Employee, employee_id)
