"""
Catalog and partner master data: uniqueness and deletion guards
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from pharmaledger.models import (
    Customer,
    DiscountRule,
    DiscountType,
    InventoryBatch,
    PartnerType,
    Product,
    Salesman,
    Supplier,
    TrackingStatus,
    TransferType,
)
from pharmaledger.schemas.catalog import CategoryCreate, ProductCreate, ProductUpdate, UnitCreate
from pharmaledger.schemas.partners import (
    CustomerCreate,
    EmployeeCreate,
    EmployeeUpdate,
    SupplierCreate,
    SupplierUpdate,
)
from pharmaledger.schemas.purchase_orders import POCreate, POItemIn
from pharmaledger.schemas.sales_orders import SOCreate, SOItemIn
from pharmaledger.schemas.stock_transfers import TransferCreate, TransferItemIn
from pharmaledger.services import catalog, partners
from pharmaledger.services import stock_transfers as st_svc
from pharmaledger.services.errors import ConflictError, LedgerValidationError, ReferenceInUseError
from pharmaledger.services.purchase_orders import create_purchase_order
from pharmaledger.services.sales_orders import create_sales_order


class TestProducts:

    def test_sku_is_unique_on_create(self, db_session, product):
        with pytest.raises(ConflictError, match="AMOX-500"):
            catalog.create_product(db_session, ProductCreate(sku="AMOX-500", name="Copy"))

    def test_sku_is_unique_on_rename(self, db_session, product, other_product):
        with pytest.raises(ConflictError):
            catalog.update_product(db_session, other_product.id, ProductUpdate(sku="AMOX-500"))

    def test_keeping_own_sku_is_fine(self, db_session, product):
        catalog.update_product(db_session, product.id, ProductUpdate(sku="AMOX-500", name="Amoxicillin"))
        assert product.name == "Amoxicillin"

    def test_delete_blocked_while_batches_exist(self, db_session, product, make_batch):
        make_batch(product, "LOT1", 3)

        with pytest.raises(ReferenceInUseError, match="inventory batches"):
            catalog.remove_product(db_session, product.id)
        db_session.rollback()

        assert db_session.get(Product, product.id) is not None
        assert db_session.query(InventoryBatch).filter_by(product_id=product.id).count() == 1

    def test_delete_blocked_by_product_discount_rule(self, db_session, product, salesman):
        db_session.add(DiscountRule(name="amox promo", discount_type=DiscountType.MANAGER,
                                    discount_percent=Decimal("5"), salesman_id=salesman.id,
                                    product_id=product.id))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="discount rules"):
            catalog.remove_product(db_session, product.id)

    def test_delete_without_dependents(self, db_session, other_product):
        catalog.remove_product(db_session, other_product.id)
        db_session.commit()
        assert db_session.query(Product).filter_by(sku="PARA-500").count() == 0

    def test_stock_summary_flags_low_stock(self, db_session, product, make_batch):
        make_batch(product, "LOT1", 8)
        make_batch(product, "LOT2", 4)

        summary = catalog.product_with_stock(db_session, product)

        assert summary["total_stock"] == Decimal("12")
        assert summary["is_low_stock"] is True


class TestCategoriesAndUnits:

    def test_category_with_products_cannot_be_deleted(self, db_session, category, product):
        with pytest.raises(ReferenceInUseError):
            catalog.remove_category(db_session, category.id)

    def test_duplicate_category_name(self, db_session, category):
        with pytest.raises(ConflictError):
            catalog.create_category(db_session, CategoryCreate(name="Antibiotics"))

    def test_unit_create_is_idempotent(self, db_session):
        first = catalog.create_unit(db_session, UnitCreate(name="Box", value="  BOX "))
        again = catalog.create_unit(db_session, UnitCreate(name="box"))

        assert first.value == "box"
        assert again.id == first.id

    def test_unit_in_use_cannot_be_deleted(self, db_session, product):
        unit = catalog.create_unit(db_session, UnitCreate(name="Box"))
        with pytest.raises(ReferenceInUseError):
            catalog.remove_unit(db_session, unit.id)


class TestPartners:

    def test_code_unique_on_create(self, db_session, supplier):
        with pytest.raises(ConflictError, match="SUP-01"):
            partners.create_partner(db_session, Supplier, SupplierCreate(code="SUP-01", name="Other"))

    def test_code_unique_on_rename(self, db_session, supplier):
        second = partners.create_partner(db_session, Supplier, SupplierCreate(code="SUP-02", name="Other"))
        with pytest.raises(ConflictError):
            partners.update_partner(db_session, Supplier, second.id, SupplierUpdate(code="SUP-01"))

    def test_supplier_with_purchase_orders_is_kept(self, db_session, supplier, product):
        create_purchase_order(db_session, POCreate(
            supplier_id=supplier.id,
            items=[POItemIn(product_id=product.id, quantity=Decimal("1"))],
        ))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="purchase orders"):
            partners.remove_partner(db_session, Supplier, supplier.id)

    def test_customer_with_sales_orders_is_kept(self, db_session, customer, product):
        create_sales_order(db_session, SOCreate(
            customer_id=customer.id,
            items=[SOItemIn(product_id=product.id, quantity=Decimal("1"))],
        ))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="sales orders"):
            partners.remove_partner(db_session, Customer, customer.id)

    def test_salesman_with_discount_rules_is_kept(self, db_session, salesman):
        db_session.add(DiscountRule(name="r", discount_type=DiscountType.SALESMAN,
                                    discount_percent=Decimal("1"), salesman_id=salesman.id))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="discount rules"):
            partners.remove_partner(db_session, Salesman, salesman.id)

    def test_customer_with_discount_rules_is_kept(self, db_session, customer, salesman):
        db_session.add(DiscountRule(name="clinic", discount_type=DiscountType.HOSPITAL,
                                    discount_percent=Decimal("3"), salesman_id=salesman.id,
                                    customer_id=customer.id))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="discount rules"):
            partners.remove_partner(db_session, Customer, customer.id)

    def test_supplier_of_imported_batch_is_kept(self, db_session, supplier, product):
        transfer = st_svc.create_stock_transfer(db_session, TransferCreate(
            transfer_type=TransferType.IMPORT,
            partner_type=PartnerType.SUPPLIER,
            partner_id=supplier.id,
            items=[TransferItemIn(product_id=product.id, batch_number="IMP1", quantity=Decimal("4"),
                                  expiry_date=date.today() + timedelta(days=200))],
        ))
        st_svc.confirm_stock_transfer(db_session, transfer.id)
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="inventory batches"):
            partners.remove_partner(db_session, Supplier, supplier.id)

    def test_customer_named_on_transfer_is_kept(self, db_session, customer, product, make_batch):
        batch = make_batch(product, "LOT1", 5)
        st_svc.create_stock_transfer(db_session, TransferCreate(
            transfer_type=TransferType.EXPORT,
            partner_type=PartnerType.CUSTOMER,
            partner_id=customer.id,
            items=[TransferItemIn(product_id=product.id, inventory_batch_id=batch.id, quantity=Decimal("1"))],
        ))
        db_session.commit()

        with pytest.raises(ReferenceInUseError, match="stock transfers"):
            partners.remove_partner(db_session, Customer, customer.id)

    def test_unused_customer_can_be_deleted(self, db_session):
        c = partners.create_partner(db_session, Customer, CustomerCreate(code="C-9", name="Walk-in"))
        db_session.commit()

        partners.remove_partner(db_session, Customer, c.id)
        db_session.commit()

        assert db_session.query(Customer).count() == 0


class TestEmployees:

    def test_stopped_requires_resignation_date(self, db_session):
        with pytest.raises(LedgerValidationError, match="Resignation date"):
            partners.create_employee(db_session, EmployeeCreate(
                code="E1", name="Nguyen Van C", tracking_status=TrackingStatus.STOPPED,
            ))

    def test_update_to_stopped_checks_existing_date(self, db_session):
        emp = partners.create_employee(db_session, EmployeeCreate(code="E1", name="Nguyen Van C"))

        with pytest.raises(LedgerValidationError):
            partners.update_employee(db_session, emp.id, EmployeeUpdate(tracking_status=TrackingStatus.STOPPED))

        partners.update_employee(db_session, emp.id, EmployeeUpdate(
            tracking_status=TrackingStatus.STOPPED, resignation_date=date(2024, 5, 31),
        ))
        assert emp.tracking_status == TrackingStatus.STOPPED

    def test_back_to_tracking_clears_resignation_date(self, db_session):
        emp = partners.create_employee(db_session, EmployeeCreate(
            code="E2", name="Le Thi D", tracking_status=TrackingStatus.STOPPED,
            resignation_date=date(2024, 1, 31),
        ))

        partners.update_employee(db_session, emp.id, EmployeeUpdate(
            tracking_status=TrackingStatus.TRACKING, resignation_date=None,
        ))
        db_session.commit()

        assert emp.tracking_status == TrackingStatus.TRACKING
        assert emp.resignation_date is None

    def test_null_does_not_blank_required_fields(self, db_session):
        emp = partners.create_employee(db_session, EmployeeCreate(code="E3", name="Pham Van E"))

        partners.update_employee(db_session, emp.id, EmployeeUpdate(name=None, notes="moved to HCMC"))

        assert emp.name == "Pham Van E"
