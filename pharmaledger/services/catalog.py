# FILE: pharmaledger/services/catalog.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmaledger.models import (
    Category,
    DiscountRule,
    InventoryBatch,
    Product,
    PurchaseOrderItem,
    SalesOrderItem,
    StockTransferItem,
    Unit,
)
from pharmaledger.services.errors import ConflictError, LedgerValidationError, ReferenceInUseError
from pharmaledger.services.inventory import stock_totals
from pharmaledger.services.lookup import get_or_404
from pharmaledger.utils.num import D

logger = logging.getLogger(__name__)


def normalize_unit_value(value: str) -> str:
    return (value or "").strip().lower()


# -------------------------
# Categories
# -------------------------
def list_categories(db: Session, active_only: bool = False) -> List[Category]:
    q = db.query(Category)
    if active_only:
        q = q.filter(Category.is_active.is_(True))
    return q.order_by(Category.name.asc()).all()


def create_category(db: Session, payload) -> Category:
    name = (payload.name or "").strip()
    if not name:
        raise LedgerValidationError("Category name is required")
    if db.query(Category).filter(Category.name == name).first():
        raise ConflictError(f"Category '{name}' already exists")
    cat = Category(name=name, description=payload.description or "", is_active=payload.is_active)
    db.add(cat)
    db.flush()
    return cat


def update_category(db: Session, category_id: int, payload) -> Category:
    cat = get_or_404(db, Category, category_id, "Category")
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        name = data["name"].strip()
        clash = db.query(Category).filter(Category.name == name, Category.id != cat.id).first()
        if clash:
            raise ConflictError(f"Category '{name}' already exists")
        data["name"] = name
    for k, v in data.items():
        if v is not None:
            setattr(cat, k, v)
    db.flush()
    return cat


def remove_category(db: Session, category_id: int) -> None:
    cat = get_or_404(db, Category, category_id, "Category")
    if db.query(Product.id).filter(Product.category_id == cat.id).first():
        raise ReferenceInUseError(f"Category '{cat.name}' still has products")
    db.delete(cat)
    db.flush()


# -------------------------
# Units
# -------------------------
def list_units(db: Session) -> List[Unit]:
    return db.query(Unit).order_by(Unit.name.asc()).all()


def create_unit(db: Session, payload) -> Unit:
    """Idempotent: an existing unit with the same normalised value is returned as is."""
    name = (payload.name or "").strip()
    value = normalize_unit_value(payload.value or name)
    if not value:
        raise LedgerValidationError("Unit value is required")

    existing = db.query(Unit).filter(Unit.value == value).first()
    if existing:
        return existing

    unit = Unit(name=name or value, value=value)
    db.add(unit)
    db.flush()
    return unit


def remove_unit(db: Session, unit_id: int) -> None:
    unit = get_or_404(db, Unit, unit_id, "Unit")
    if db.query(Product.id).filter(Product.unit == unit.value).first():
        raise ReferenceInUseError(f"Unit '{unit.value}' is used by products")
    db.delete(unit)
    db.flush()


# -------------------------
# Products
# -------------------------
def _ensure_sku_free(db: Session, sku: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(Product).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first():
        raise ConflictError(f"SKU '{sku}' already exists")


def list_products(
    db: Session,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    active_only: bool = False,
) -> List[Product]:
    q = db.query(Product)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category_id:
        q = q.filter(Product.category_id == category_id)
    if active_only:
        q = q.filter(Product.is_active.is_(True))
    return q.order_by(Product.name.asc()).all()


def get_product(db: Session, product_id: int) -> Product:
    return get_or_404(db, Product, product_id, "Product")


def create_product(db: Session, payload) -> Product:
    sku = (payload.sku or "").strip()
    if not sku:
        raise LedgerValidationError("SKU is required")
    if not (payload.name or "").strip():
        raise LedgerValidationError("Product name is required")
    _ensure_sku_free(db, sku)
    if payload.category_id is not None:
        get_or_404(db, Category, payload.category_id, "Category")

    data = payload.model_dump()
    data["sku"] = sku
    data["unit"] = normalize_unit_value(data.get("unit") or "unit")
    product = Product(**data)
    db.add(product)
    db.flush()
    return product


def update_product(db: Session, product_id: int, payload) -> Product:
    product = get_or_404(db, Product, product_id, "Product")
    data = payload.model_dump(exclude_unset=True)

    if data.get("sku") is not None:
        data["sku"] = data["sku"].strip()
        if data["sku"] != product.sku:
            _ensure_sku_free(db, data["sku"], exclude_id=product.id)
    if data.get("category_id") is not None:
        get_or_404(db, Category, data["category_id"], "Category")
    if data.get("unit") is not None:
        data["unit"] = normalize_unit_value(data["unit"])

    for k, v in data.items():
        if v is None and k != "category_id":
            continue
        setattr(product, k, v)
    db.flush()
    return product


def remove_product(db: Session, product_id: int) -> None:
    product = get_or_404(db, Product, product_id, "Product")

    if db.query(InventoryBatch.id).filter(InventoryBatch.product_id == product.id).first():
        raise ReferenceInUseError(f"Product '{product.name}' still has inventory batches")
    for model, label in (
        (PurchaseOrderItem, "purchase orders"),
        (SalesOrderItem, "sales orders"),
        (StockTransferItem, "stock transfers"),
        (DiscountRule, "discount rules"),
    ):
        if db.query(model.id).filter(model.product_id == product.id).first():
            raise ReferenceInUseError(f"Product '{product.name}' is used on {label}")

    db.delete(product)
    db.flush()
    logger.info("Product %s (%s) removed", product.id, product.sku)


def product_with_stock(db: Session, product: Product, total: Optional[Decimal] = None) -> dict:
    if total is None:
        total = stock_totals(db, [product.id]).get(product.id, Decimal("0"))
    return {
        "product": product,
        "total_stock": total,
        "is_low_stock": total < D(product.min_stock),
    }


def list_products_with_stock(db: Session, **filters) -> List[dict]:
    products = list_products(db, **filters)
    totals = stock_totals(db, [p.id for p in products])
    return [product_with_stock(db, p, totals.get(p.id, Decimal("0"))) for p in products]
