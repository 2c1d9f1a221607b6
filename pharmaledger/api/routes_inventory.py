# FILE: pharmaledger/api/routes_inventory.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.schemas.catalog import ProductOut
from pharmaledger.schemas.inventory import (
    BatchCreate, BatchUpdate, BatchAdjust, BatchOut, StockTransactionOut,
)
from pharmaledger.services import inventory as svc

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("/batches")
def list_batches(
    product_id: Optional[int] = Query(None),
    include_empty: bool = Query(True),
    db: Session = Depends(get_db),
):
    rows = svc.list_batches(db, product_id=product_id, include_empty=include_empty)
    return ok([BatchOut.model_validate(b) for b in rows])


@router.get("/batches/{batch_id}")
def get_batch(batch_id: int, db: Session = Depends(get_db)):
    return ok(BatchOut.model_validate(svc.get_batch(db, batch_id)))


@router.post("/batches")
def create_batch(payload: BatchCreate, db: Session = Depends(get_db)):
    with atomic(db):
        batch = svc.create_batch(db, payload)
    return created(BatchOut.model_validate(batch))


@router.put("/batches/{batch_id}")
def update_batch(batch_id: int, payload: BatchUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        batch = svc.update_batch(db, batch_id, payload)
    return ok(BatchOut.model_validate(batch))


@router.post("/batches/{batch_id}/adjust")
def adjust_batch(batch_id: int, payload: BatchAdjust, db: Session = Depends(get_db)):
    with atomic(db):
        batch = svc.adjust_quantity(db, batch_id, payload.delta, payload.note)
    return ok(BatchOut.model_validate(batch))


@router.delete("/batches/{batch_id}")
def delete_batch(batch_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_batch(db, batch_id)
    return ok({"id": batch_id, "deleted": True})


@router.get("/available/{product_id}")
def available_batches(product_id: int, db: Session = Depends(get_db)):
    return ok([BatchOut.model_validate(b) for b in svc.available_batches(db, product_id)])


@router.get("/expiring")
def expiring_batches(within_days: Optional[int] = Query(None, ge=0), db: Session = Depends(get_db)):
    return ok([BatchOut.model_validate(b) for b in svc.expiring_batches(db, within_days)])


@router.get("/low-stock")
def low_stock(db: Session = Depends(get_db)):
    rows = svc.low_stock_products(db)
    return ok([
        {"product": ProductOut.model_validate(p), "total_stock": total}
        for p, total in rows
    ])


@router.get("/transactions")
def list_transactions(
    product_id: Optional[int] = Query(None),
    batch_id: Optional[int] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    rows = svc.list_transactions(db, product_id=product_id, batch_id=batch_id, limit=limit)
    return ok([StockTransactionOut.model_validate(t) for t in rows])
