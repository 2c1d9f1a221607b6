# FILE: pharmaledger/api/routes_partners.py
from typing import Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.models import Customer, EmployeePosition, Salesman, Supplier, TrackingStatus
from pharmaledger.schemas.partners import (
    SupplierCreate, SupplierUpdate, SupplierOut,
    CustomerCreate, CustomerUpdate, CustomerOut,
    SalesmanCreate, SalesmanUpdate, SalesmanOut,
    EmployeeCreate, EmployeeUpdate, EmployeeOut,
)
from pharmaledger.services import partners as svc

router = APIRouter(tags=["partners"])


def _mount_partner_routes(
    path: str,
    model: Type,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
) -> None:
    """Suppliers, customers and salesmen share the same code-keyed CRUD surface."""

    @router.get(f"/{path}", name=f"list_{path}")
    def list_rows(
        active_only: bool = Query(False),
        search: Optional[str] = Query(None),
        db: Session = Depends(get_db),
    ):
        rows = svc.list_partners(db, model, active_only=active_only, search=search)
        return ok([out_schema.model_validate(r) for r in rows])

    @router.get(f"/{path}/{{obj_id}}", name=f"get_{path}")
    def get_row(obj_id: int, db: Session = Depends(get_db)):
        return ok(out_schema.model_validate(svc.get_partner(db, model, obj_id)))

    @router.post(f"/{path}", name=f"create_{path}")
    def create_row(payload: create_schema, db: Session = Depends(get_db)):  # type: ignore[valid-type]
        with atomic(db):
            obj = svc.create_partner(db, model, payload)
        return created(out_schema.model_validate(obj))

    @router.put(f"/{path}/{{obj_id}}", name=f"update_{path}")
    def update_row(obj_id: int, payload: update_schema, db: Session = Depends(get_db)):  # type: ignore[valid-type]
        with atomic(db):
            obj = svc.update_partner(db, model, obj_id, payload)
        return ok(out_schema.model_validate(obj))

    @router.delete(f"/{path}/{{obj_id}}", name=f"delete_{path}")
    def delete_row(obj_id: int, db: Session = Depends(get_db)):
        with atomic(db):
            svc.remove_partner(db, model, obj_id)
        return ok({"id": obj_id, "deleted": True})


_mount_partner_routes("suppliers", Supplier, SupplierCreate, SupplierUpdate, SupplierOut)
_mount_partner_routes("customers", Customer, CustomerCreate, CustomerUpdate, CustomerOut)
_mount_partner_routes("salesmen", Salesman, SalesmanCreate, SalesmanUpdate, SalesmanOut)


# ---------- Employees ----------
@router.get("/employees")
def list_employees(
    position: Optional[EmployeePosition] = Query(None),
    tracking_status: Optional[TrackingStatus] = Query(None),
    db: Session = Depends(get_db),
):
    rows = svc.list_employees(db, position=position, tracking_status=tracking_status)
    return ok([EmployeeOut.model_validate(r) for r in rows])


@router.get("/employees/{employee_id}")
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    return ok(EmployeeOut.model_validate(svc.get_employee(db, employee_id)))


@router.post("/employees")
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    with atomic(db):
        emp = svc.create_employee(db, payload)
    return created(EmployeeOut.model_validate(emp))


@router.put("/employees/{employee_id}")
def update_employee(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        emp = svc.update_employee(db, employee_id, payload)
    return ok(EmployeeOut.model_validate(emp))


@router.delete("/employees/{employee_id}")
def delete_employee(employee_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_employee(db, employee_id)
    return ok({"id": employee_id, "deleted": True})
