# FILE: pharmaledger/services/discounts.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from pharmaledger.models import Customer, DiscountRule, Product, Salesman
from pharmaledger.services.lookup import get_or_404
from pharmaledger.utils.num import D, HUNDRED, money2, qty4

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def clamp_percent(value) -> Decimal:
    v = D(value)
    if v < ZERO:
        return ZERO
    if v > HUNDRED:
        return HUNDRED
    return v


@dataclass
class AppliedDiscount:
    total_percent: Decimal = ZERO
    rules: List[DiscountRule] = field(default_factory=list)

    @property
    def discount_types(self) -> List[str]:
        return [r.discount_type.value for r in self.rules]

    def as_dict(self) -> dict:
        return {
            "total_percent": self.total_percent,
            "rules": [
                {
                    "id": r.id,
                    "name": r.name,
                    "discount_type": r.discount_type,
                    "discount_percent": r.discount_percent,
                }
                for r in self.rules
            ],
        }


def rule_matches(rule, customer_id: Optional[int], product_id: int) -> bool:
    return (rule.customer_id is None or rule.customer_id == customer_id) and (
        rule.product_id is None or rule.product_id == product_id
    )


def resolve_discounts(
    rules: Iterable[DiscountRule],
    customer_id: Optional[int],
    product_ids: Iterable[int],
) -> Dict[int, AppliedDiscount]:
    """
    Pure matching step shared by the preview endpoint and sales-order creation.

    `rules` must already be the salesman's active rules. Matching rules stack
    additively and the sum is clamped to [0, 100].
    """
    rules = list(rules)
    out: Dict[int, AppliedDiscount] = {}
    for pid in product_ids:
        if pid in out:
            continue
        matched = [r for r in rules if rule_matches(r, customer_id, pid)]
        total = clamp_percent(sum((D(r.discount_percent) for r in matched), ZERO))
        out[pid] = AppliedDiscount(total_percent=total, rules=matched)
    return out


def price_line(base_unit_price, quantity, applied: Optional[AppliedDiscount]) -> dict:
    """Frozen pricing for one sales line."""
    base = D(base_unit_price)
    qty = D(quantity)
    pct = applied.total_percent if applied else ZERO
    net = qty4(base * (HUNDRED - pct) / HUNDRED)
    return {
        "base_unit_price": base,
        "unit_price": net,
        "discount_percent": pct,
        "discount_amount": money2(qty * (base - net)),
        "line_total": money2(qty * net),
        "applied_discount_types": applied.discount_types if applied else [],
    }


def active_rules_for_salesman(db: Session, salesman_id: int) -> List[DiscountRule]:
    return (
        db.query(DiscountRule)
        .filter(DiscountRule.salesman_id == salesman_id, DiscountRule.is_active.is_(True))
        .order_by(DiscountRule.id.asc())
        .all()
    )


def get_applicable_for_order(
    db: Session,
    customer_id: Optional[int],
    salesman_id: Optional[int],
    product_ids: Iterable[int],
) -> Dict[int, AppliedDiscount]:
    product_ids = list(product_ids or [])
    if not salesman_id or not product_ids:
        return {}
    return resolve_discounts(active_rules_for_salesman(db, salesman_id), customer_id, product_ids)


# -------------------------
# Rule CRUD
# -------------------------
def _check_refs(db: Session, *, salesman_id=None, customer_id=None, product_id=None) -> None:
    if salesman_id is not None:
        get_or_404(db, Salesman, salesman_id, "Salesman")
    if customer_id is not None:
        get_or_404(db, Customer, customer_id, "Customer")
    if product_id is not None:
        get_or_404(db, Product, product_id, "Product")


def list_rules(
    db: Session,
    active_only: bool = False,
    salesman_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    product_id: Optional[int] = None,
) -> List[DiscountRule]:
    q = db.query(DiscountRule).options(
        selectinload(DiscountRule.salesman),
        selectinload(DiscountRule.customer),
        selectinload(DiscountRule.product),
    )
    if active_only:
        q = q.filter(DiscountRule.is_active.is_(True))
    if salesman_id:
        q = q.filter(DiscountRule.salesman_id == salesman_id)
    if customer_id:
        q = q.filter(DiscountRule.customer_id == customer_id)
    if product_id:
        q = q.filter(DiscountRule.product_id == product_id)
    return q.order_by(DiscountRule.id.desc()).all()


def get_rule(db: Session, rule_id: int) -> DiscountRule:
    return get_or_404(db, DiscountRule, rule_id, "Discount rule")


def create_rule(db: Session, payload) -> DiscountRule:
    _check_refs(
        db,
        salesman_id=payload.salesman_id,
        customer_id=payload.customer_id,
        product_id=payload.product_id,
    )
    data = payload.model_dump()
    data["discount_percent"] = clamp_percent(data.get("discount_percent"))
    rule = DiscountRule(**data)
    db.add(rule)
    db.flush()
    return rule


def update_rule(db: Session, rule_id: int, payload) -> DiscountRule:
    rule = get_rule(db, rule_id)
    data = payload.model_dump(exclude_unset=True)
    _check_refs(db, customer_id=data.get("customer_id"), product_id=data.get("product_id"))

    if "discount_percent" in data:
        data["discount_percent"] = clamp_percent(data["discount_percent"])
    for k, v in data.items():
        # customer/product may be cleared to widen the rule
        if v is None and k not in ("customer_id", "product_id"):
            continue
        setattr(rule, k, v)
    db.flush()
    return rule


def remove_rule(db: Session, rule_id: int) -> None:
    rule = get_rule(db, rule_id)
    db.delete(rule)
    db.flush()
