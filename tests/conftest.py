"""
Test configuration and fixtures.
Each test gets a fresh in-memory SQLite database.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, timedelta
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pharmaledger.db.base import Base
from pharmaledger.db.session import get_db
from pharmaledger.main import app
from pharmaledger.models import (
    Category,
    Customer,
    InventoryBatch,
    Product,
    Salesman,
    Supplier,
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def category(db_session: Session) -> Category:
    cat = Category(name="Antibiotics")
    db_session.add(cat)
    db_session.commit()
    return cat


@pytest.fixture
def product(db_session: Session, category: Category) -> Product:
    p = Product(
        sku="AMOX-500",
        name="Amoxicillin 500mg",
        category_id=category.id,
        unit="box",
        purchase_price=Decimal("6"),
        sale_price=Decimal("10"),
        min_stock=Decimal("20"),
    )
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture
def other_product(db_session: Session) -> Product:
    p = Product(
        sku="PARA-500",
        name="Paracetamol 500mg",
        unit="box",
        purchase_price=Decimal("2"),
        sale_price=Decimal("4"),
        min_stock=Decimal("0"),
    )
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture
def supplier(db_session: Session) -> Supplier:
    s = Supplier(code="SUP-01", name="Mekophar")
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture
def customer(db_session: Session) -> Customer:
    c = Customer(code="CUS-01", name="Central Pharmacy", customer_type="pharmacy")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def other_customer(db_session: Session) -> Customer:
    c = Customer(code="CUS-02", name="District Hospital", customer_type="hospital")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def salesman(db_session: Session) -> Salesman:
    s = Salesman(code="SM-01", name="Tran Van An", region="North")
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture
def make_batch(db_session: Session):
    """Factory for raw inventory batches; expiry is given as days from today."""
    def _make(product: Product, batch_number: str, quantity, expires_in_days: int = 365) -> InventoryBatch:
        b = InventoryBatch(
            product_id=product.id,
            batch_number=batch_number,
            quantity=Decimal(str(quantity)),
            expiry_date=date.today() + timedelta(days=expires_in_days),
            purchase_price=Decimal("5"),
        )
        db_session.add(b)
        db_session.commit()
        return b

    return _make
