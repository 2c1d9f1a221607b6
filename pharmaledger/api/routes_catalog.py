# FILE: pharmaledger/api/routes_catalog.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.schemas.catalog import (
    CategoryCreate, CategoryUpdate, CategoryOut,
    UnitCreate, UnitOut,
    ProductCreate, ProductUpdate, ProductOut, ProductStockOut,
)
from pharmaledger.services import catalog as svc

router = APIRouter(tags=["catalog"])


def _stock_out(row: dict) -> ProductStockOut:
    base = ProductOut.model_validate(row["product"]).model_dump()
    return ProductStockOut(**base, total_stock=row["total_stock"], is_low_stock=row["is_low_stock"])


# ---------- Categories ----------
@router.get("/categories")
def list_categories(active_only: bool = Query(False), db: Session = Depends(get_db)):
    rows = svc.list_categories(db, active_only=active_only)
    return ok([CategoryOut.model_validate(r) for r in rows])


@router.post("/categories")
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    with atomic(db):
        cat = svc.create_category(db, payload)
    return created(CategoryOut.model_validate(cat))


@router.put("/categories/{category_id}")
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        cat = svc.update_category(db, category_id, payload)
    return ok(CategoryOut.model_validate(cat))


@router.delete("/categories/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_category(db, category_id)
    return ok({"id": category_id, "deleted": True})


# ---------- Units ----------
@router.get("/units")
def list_units(db: Session = Depends(get_db)):
    return ok([UnitOut.model_validate(u) for u in svc.list_units(db)])


@router.post("/units")
def create_unit(payload: UnitCreate, db: Session = Depends(get_db)):
    with atomic(db):
        unit = svc.create_unit(db, payload)
    return ok(UnitOut.model_validate(unit))


@router.delete("/units/{unit_id}")
def delete_unit(unit_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_unit(db, unit_id)
    return ok({"id": unit_id, "deleted": True})


# ---------- Products ----------
@router.get("/products")
def list_products(
    search: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    active_only: bool = Query(False),
    with_stock: bool = Query(False),
    db: Session = Depends(get_db),
):
    filters = dict(search=search, category_id=category_id, active_only=active_only)
    if with_stock:
        return ok([_stock_out(r) for r in svc.list_products_with_stock(db, **filters)])
    return ok([ProductOut.model_validate(p) for p in svc.list_products(db, **filters)])


@router.get("/products/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = svc.get_product(db, product_id)
    return ok(_stock_out(svc.product_with_stock(db, product)))


@router.post("/products")
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    with atomic(db):
        product = svc.create_product(db, payload)
    return created(ProductOut.model_validate(product))


@router.put("/products/{product_id}")
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        product = svc.update_product(db, product_id, payload)
    return ok(ProductOut.model_validate(product))


@router.delete("/products/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_product(db, product_id)
    return ok({"id": product_id, "deleted": True})
