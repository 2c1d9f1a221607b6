"""
Discount rule resolution and rule maintenance
"""

from decimal import Decimal

import pytest

from pharmaledger.models import DiscountRule, DiscountType, Salesman
from pharmaledger.schemas.discounts import DiscountRuleCreate, DiscountRuleOut, DiscountRuleUpdate
from pharmaledger.services.discounts import (
    clamp_percent,
    create_rule,
    get_applicable_for_order,
    list_rules,
    price_line,
    resolve_discounts,
    update_rule,
)
from pharmaledger.services.errors import NotFoundError


def _rule(rule_id, percent, customer_id=None, product_id=None, kind=DiscountType.SALESMAN):
    return DiscountRule(
        id=rule_id,
        name=f"rule {rule_id}",
        discount_type=kind,
        discount_percent=Decimal(str(percent)),
        salesman_id=1,
        customer_id=customer_id,
        product_id=product_id,
    )


class TestResolver:
    """Pure matching function"""

    @pytest.mark.parametrize("raw,expected", [
        ("-5", "0"),
        ("0", "0"),
        ("37.5", "37.5"),
        ("100", "100"),
        ("250", "100"),
    ])
    def test_clamp_percent(self, raw, expected):
        assert clamp_percent(Decimal(raw)) == Decimal(expected)

    def test_rules_stack_by_scope(self):
        rules = [
            _rule(1, 5),                                   # everyone, everything
            _rule(2, 3, customer_id=10),                   # this customer
            _rule(3, 2, product_id=100),                   # this product
            _rule(4, 4, customer_id=10, product_id=100),   # this customer + product
            _rule(5, 50, customer_id=99),                  # someone else
        ]

        result = resolve_discounts(rules, customer_id=10, product_ids=[100, 200])

        assert result[100].total_percent == Decimal("14")
        assert [r.id for r in result[100].rules] == [1, 2, 3, 4]
        assert result[200].total_percent == Decimal("8")
        assert [r.id for r in result[200].rules] == [1, 2]

    def test_sum_is_capped_at_100(self):
        rules = [_rule(1, 60), _rule(2, 70, kind=DiscountType.MANAGER)]

        result = resolve_discounts(rules, customer_id=1, product_ids=[7])

        assert result[7].total_percent == Decimal("100")
        assert result[7].discount_types == ["Salesman", "Manager"]

    def test_product_without_matching_rule_gets_zero(self):
        result = resolve_discounts([_rule(1, 10, product_id=5)], customer_id=1, product_ids=[6])
        assert result[6].total_percent == Decimal("0")
        assert result[6].rules == []

    def test_price_line_freezes_net_price_and_amount(self):
        applied = resolve_discounts([_rule(1, 15)], customer_id=1, product_ids=[1])[1]

        priced = price_line(Decimal("10"), Decimal("3"), applied)

        assert priced["unit_price"] == Decimal("8.5")
        assert priced["discount_percent"] == Decimal("15")
        assert priced["discount_amount"] == Decimal("4.50")
        assert priced["line_total"] == Decimal("25.50")
        assert priced["applied_discount_types"] == ["Salesman"]


class TestApplicableForOrder:
    """Preview query backed by the database"""

    def test_no_salesman_means_no_discounts(self, db_session, customer, product):
        assert get_applicable_for_order(db_session, customer.id, None, [product.id]) == {}

    def test_no_products_means_no_discounts(self, db_session, customer, salesman):
        assert get_applicable_for_order(db_session, customer.id, salesman.id, []) == {}

    def test_only_active_rules_of_the_salesman_apply(self, db_session, customer, salesman, product):
        other = Salesman(code="SM-02", name="Le Thi Binh")
        db_session.add(other)
        db_session.flush()
        db_session.add_all([
            DiscountRule(name="base", discount_type=DiscountType.SALESMAN,
                         discount_percent=Decimal("5"), salesman_id=salesman.id),
            DiscountRule(name="paused", discount_type=DiscountType.PAYMENT,
                         discount_percent=Decimal("20"), salesman_id=salesman.id, is_active=False),
            DiscountRule(name="not mine", discount_type=DiscountType.DOCTOR,
                         discount_percent=Decimal("30"), salesman_id=other.id),
        ])
        db_session.commit()

        result = get_applicable_for_order(db_session, customer.id, salesman.id, [product.id])

        assert result[product.id].total_percent == Decimal("5")
        assert [r.name for r in result[product.id].rules] == ["base"]


class TestRuleMaintenance:

    def test_percent_is_clamped_on_create(self, db_session, salesman):
        high = create_rule(db_session, DiscountRuleCreate(
            name="too much", discount_type=DiscountType.MANAGER,
            discount_percent=Decimal("150"), salesman_id=salesman.id,
        ))
        low = create_rule(db_session, DiscountRuleCreate(
            name="negative", discount_type=DiscountType.HOSPITAL,
            discount_percent=Decimal("-10"), salesman_id=salesman.id,
        ))

        assert high.discount_percent == Decimal("100")
        assert low.discount_percent == Decimal("0")

    def test_percent_is_clamped_on_update(self, db_session, salesman):
        rule = create_rule(db_session, DiscountRuleCreate(
            name="r", discount_type=DiscountType.DOCTOR,
            discount_percent=Decimal("10"), salesman_id=salesman.id,
        ))

        update_rule(db_session, rule.id, DiscountRuleUpdate(discount_percent=Decimal("101")))

        assert rule.discount_percent == Decimal("100")

    def test_clearing_customer_widens_rule(self, db_session, salesman, customer, other_customer, product):
        rule = create_rule(db_session, DiscountRuleCreate(
            name="r", discount_type=DiscountType.DOCTOR, discount_percent=Decimal("10"),
            salesman_id=salesman.id, customer_id=customer.id,
        ))
        db_session.commit()
        assert get_applicable_for_order(
            db_session, other_customer.id, salesman.id, [product.id]
        )[product.id].total_percent == Decimal("0")

        update_rule(db_session, rule.id, DiscountRuleUpdate(customer_id=None))
        db_session.commit()

        assert get_applicable_for_order(
            db_session, other_customer.id, salesman.id, [product.id]
        )[product.id].total_percent == Decimal("10")

    def test_unknown_salesman_is_rejected(self, db_session):
        with pytest.raises(NotFoundError, match="Salesman not found"):
            create_rule(db_session, DiscountRuleCreate(
                name="r", discount_type=DiscountType.DOCTOR,
                discount_percent=Decimal("10"), salesman_id=999,
            ))

    def test_listed_rules_carry_partner_and_product_names(self, db_session, salesman, customer, product):
        create_rule(db_session, DiscountRuleCreate(
            name="clinic promo", discount_type=DiscountType.DOCTOR, discount_percent=Decimal("4"),
            salesman_id=salesman.id, customer_id=customer.id, product_id=product.id,
        ))
        create_rule(db_session, DiscountRuleCreate(
            name="blanket", discount_type=DiscountType.SALESMAN, discount_percent=Decimal("1"),
            salesman_id=salesman.id,
        ))
        db_session.commit()

        scoped, blanket = [DiscountRuleOut.model_validate(r) for r in list_rules(db_session)][::-1]

        assert (scoped.salesman_name, scoped.customer_name, scoped.product_name) == (
            "Tran Van An", "Central Pharmacy", "Amoxicillin 500mg",
        )
        assert blanket.salesman_name == "Tran Van An"
        assert blanket.customer_name is None and blanket.product_name is None
