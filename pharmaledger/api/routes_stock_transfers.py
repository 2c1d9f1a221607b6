# FILE: pharmaledger/api/routes_stock_transfers.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.models import TransferStatus, TransferType
from pharmaledger.schemas.inventory import BatchOut
from pharmaledger.schemas.stock_transfers import TransferCreate, TransferUpdate, TransferOut
from pharmaledger.services import stock_transfers as svc

router = APIRouter(prefix="/stock-transfers", tags=["stock-transfers"])


@router.get("")
def list_stock_transfers(
    transfer_type: Optional[TransferType] = Query(None),
    status: Optional[TransferStatus] = Query(None),
    db: Session = Depends(get_db),
):
    rows = svc.list_stock_transfers(db, transfer_type=transfer_type, status=status)
    return ok([TransferOut.model_validate(t) for t in rows])


@router.get("/available/{product_id}")
def available_inventory(product_id: int, db: Session = Depends(get_db)):
    return ok([BatchOut.model_validate(b) for b in svc.available_inventory(db, product_id)])


@router.get("/{transfer_id}")
def get_stock_transfer(transfer_id: int, db: Session = Depends(get_db)):
    return ok(TransferOut.model_validate(svc.get_stock_transfer(db, transfer_id)))


@router.post("")
def create_stock_transfer(payload: TransferCreate, db: Session = Depends(get_db)):
    with atomic(db):
        transfer = svc.create_stock_transfer(db, payload)
    return created(TransferOut.model_validate(transfer))


@router.put("/{transfer_id}")
def update_stock_transfer(transfer_id: int, payload: TransferUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        transfer = svc.update_stock_transfer(db, transfer_id, payload)
    return ok(TransferOut.model_validate(transfer))


@router.post("/{transfer_id}/confirm")
def confirm_stock_transfer(transfer_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        transfer = svc.confirm_stock_transfer(db, transfer_id)
    return ok(TransferOut.model_validate(transfer))


@router.post("/{transfer_id}/cancel")
def cancel_stock_transfer(transfer_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        transfer = svc.cancel_stock_transfer(db, transfer_id)
    return ok(TransferOut.model_validate(transfer))


@router.delete("/{transfer_id}")
def delete_stock_transfer(transfer_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_stock_transfer(db, transfer_id)
    return ok({"id": transfer_id, "deleted": True})
