# FILE: pharmaledger/api/routes_sales_orders.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.models import SOStatus
from pharmaledger.schemas.sales_orders import SOCreate, SOStatusIn, FulfillIn, SOOut, StatusLogOut
from pharmaledger.services import sales_orders as svc

router = APIRouter(prefix="/sales-orders", tags=["sales-orders"])


@router.get("")
def list_sales_orders(
    status: Optional[SOStatus] = Query(None),
    customer_id: Optional[int] = Query(None),
    salesman_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    rows = svc.list_sales_orders(db, status=status, customer_id=customer_id, salesman_id=salesman_id)
    return ok([SOOut.model_validate(so) for so in rows])


@router.get("/{so_id}")
def get_sales_order(so_id: int, db: Session = Depends(get_db)):
    return ok(SOOut.model_validate(svc.get_sales_order(db, so_id)))


@router.get("/{so_id}/history")
def status_history(so_id: int, db: Session = Depends(get_db)):
    return ok([StatusLogOut.model_validate(x) for x in svc.status_history(db, so_id)])


@router.post("")
def create_sales_order(payload: SOCreate, db: Session = Depends(get_db)):
    with atomic(db):
        so = svc.create_sales_order(db, payload)
    return created(SOOut.model_validate(so))


@router.post("/{so_id}/status")
def change_status(so_id: int, payload: SOStatusIn, db: Session = Depends(get_db)):
    with atomic(db):
        so = svc.update_status(db, so_id, payload.status, comment=payload.comment, changed_by=payload.changed_by)
    return ok(SOOut.model_validate(so))


@router.post("/{so_id}/fulfill")
def fulfill_items(so_id: int, payload: FulfillIn, db: Session = Depends(get_db)):
    with atomic(db):
        so = svc.fulfill_items(db, so_id, payload.items)
    return ok(SOOut.model_validate(so))


@router.delete("/{so_id}")
def delete_sales_order(so_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_sales_order(db, so_id)
    return ok({"id": so_id, "deleted": True})
