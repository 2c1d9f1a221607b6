# FILE: pharmaledger/api/routes_purchase_orders.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.models import POStatus
from pharmaledger.schemas.purchase_orders import POCreate, POUpdate, POStatusIn, ReceiveIn, POOut
from pharmaledger.services import purchase_orders as svc

router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])


@router.get("")
def list_purchase_orders(
    status: Optional[POStatus] = Query(None),
    supplier_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    rows = svc.list_purchase_orders(db, status=status, supplier_id=supplier_id)
    return ok([POOut.model_validate(po) for po in rows])


@router.get("/{po_id}")
def get_purchase_order(po_id: int, db: Session = Depends(get_db)):
    return ok(POOut.model_validate(svc.get_purchase_order(db, po_id)))


@router.post("")
def create_purchase_order(payload: POCreate, db: Session = Depends(get_db)):
    with atomic(db):
        po = svc.create_purchase_order(db, payload)
    return created(POOut.model_validate(po))


@router.put("/{po_id}")
def update_purchase_order(po_id: int, payload: POUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        po = svc.update_purchase_order(db, po_id, payload)
    return ok(POOut.model_validate(po))


@router.post("/{po_id}/status")
def change_status(po_id: int, payload: POStatusIn, db: Session = Depends(get_db)):
    with atomic(db):
        po = svc.update_status(db, po_id, payload.status)
    return ok(POOut.model_validate(po))


@router.post("/{po_id}/receive")
def receive_items(po_id: int, payload: ReceiveIn, db: Session = Depends(get_db)):
    with atomic(db):
        po = svc.receive_items(db, po_id, payload.items)
    return ok(POOut.model_validate(po))


@router.delete("/{po_id}")
def delete_purchase_order(po_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_purchase_order(db, po_id)
    return ok({"id": po_id, "deleted": True})
