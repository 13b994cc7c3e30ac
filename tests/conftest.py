import os

# Required settings must exist before bakery.core.config is imported
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NEGATIVE_STOCK_POLICY"] = "allow"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import bakery.models  # noqa: F401
from bakery.database import Base, get_db
from bakery.main import app
from bakery.models.customers import Customer
from bakery.models.parties import Party
from bakery.models.products import Product, ProductIngredient
from bakery.services import ledger

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    credentials = {"email": "owner@bakery.com", "password": "Sourdough!2024"}
    response = client.post("/api/auth/register", json=credentials)
    assert response.status_code == 201, response.text

    response = client.post(
        "/api/auth/login",
        data={"username": credentials["email"], "password": credentials["password"]},
    )
    assert response.status_code == 200, response.text

    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# ---------------- FACTORIES ----------------

@pytest.fixture
def make_item(db):
    def _make(name="Flour", stock="0", cost="0", min_level="0", unit="kg", supplier=None):
        item = ledger.create_item(
            db,
            {
                "name": name,
                "unit": unit,
                "current_stock": Decimal(stock),
                "min_level": Decimal(min_level),
                "cost_per_unit": Decimal(cost),
                "supplier": supplier,
            },
        )
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Bread", price="5.00", ingredients=()):
        product = Product(
            name=name,
            price=Decimal(price),
            cost=Decimal("0"),
            margin=Decimal("0"),
            ingredients=[
                ProductIngredient(inventory_item_id=item.id, quantity=Decimal(qty), unit=item.unit)
                for item, qty in ingredients
            ],
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_party(db):
    def _make(name="Mill & Co", balance="0"):
        party = Party(name=name, balance=Decimal(balance), is_active=True)
        db.add(party)
        db.commit()
        db.refresh(party)
        return party

    return _make


@pytest.fixture
def make_customer(db):
    def _make(name="Corner Cafe", balance="0"):
        customer = Customer(name=name, balance=Decimal(balance), total_spent=Decimal("0"), is_active=True)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    return _make


@pytest.fixture
def assert_reconciled(db):
    """Assert current_stock equals the sum of the ledger for every given item."""

    def _check(*items):
        for item in items:
            result = ledger.reconcile_stock(db, item.id)
            assert result["consistent"], result

    return _check
