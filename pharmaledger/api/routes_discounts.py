# FILE: pharmaledger/api/routes_discounts.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaledger.api.response import created, ok
from pharmaledger.db.session import atomic, get_db
from pharmaledger.schemas.discounts import (
    ApplicableDiscountsIn,
    AppliedDiscountOut,
    DiscountRuleCreate,
    DiscountRuleOut,
    DiscountRuleUpdate,
)
from pharmaledger.services import discounts as svc

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.get("")
def list_rules(
    active_only: bool = Query(False),
    salesman_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    product_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    rows = svc.list_rules(
        db,
        active_only=active_only,
        salesman_id=salesman_id,
        customer_id=customer_id,
        product_id=product_id,
    )
    return ok([DiscountRuleOut.model_validate(r) for r in rows])


@router.post("/applicable")
def applicable_for_order(payload: ApplicableDiscountsIn, db: Session = Depends(get_db)):
    """Preview of what sales-order creation would freeze, keyed by product id."""
    result = svc.get_applicable_for_order(db, payload.customer_id, payload.salesman_id, payload.product_ids)
    return ok({str(pid): AppliedDiscountOut(**applied.as_dict()) for pid, applied in result.items()})


@router.get("/{rule_id}")
def get_rule(rule_id: int, db: Session = Depends(get_db)):
    return ok(DiscountRuleOut.model_validate(svc.get_rule(db, rule_id)))


@router.post("")
def create_rule(payload: DiscountRuleCreate, db: Session = Depends(get_db)):
    with atomic(db):
        rule = svc.create_rule(db, payload)
    return created(DiscountRuleOut.model_validate(rule))


@router.put("/{rule_id}")
def update_rule(rule_id: int, payload: DiscountRuleUpdate, db: Session = Depends(get_db)):
    with atomic(db):
        rule = svc.update_rule(db, rule_id, payload)
    return ok(DiscountRuleOut.model_validate(rule))


@router.delete("/{rule_id}")
def delete_rule(rule_id: int, db: Session = Depends(get_db)):
    with atomic(db):
        svc.remove_rule(db, rule_id)
    return ok({"id": rule_id, "deleted": True})
