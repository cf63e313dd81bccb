"""
Pytest fixtures for storefront backend tests.

Provides an in-memory database, role fixtures (admin/manager/cashier),
bearer-token headers and a product factory.
"""

import itertools

import pytest

from storefront import create_app
from storefront.config import TestConfig
from storefront.extensions import db
from storefront.models import User
from storefront.services import products_service, session_service
from storefront.services.auth_service import hash_password

TEST_PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh data for each test; the schema is kept."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


def _create_user(name: str, email: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        role=role,
        password_hash=hash_password(TEST_PASSWORD, rounds=4),
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(db_session):
    return _create_user("Alice Admin", "admin@test.local", "admin")


@pytest.fixture
def manager_user(db_session):
    return _create_user("Mona Manager", "manager@test.local", "manager")


@pytest.fixture
def cashier_user(db_session):
    return _create_user("Carl Cashier", "cashier@test.local", "cashier")


def _headers_for(user: User) -> dict:
    _session, token = session_service.create_session(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _headers_for(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return _headers_for(manager_user)


@pytest.fixture
def cashier_headers(cashier_user):
    return _headers_for(cashier_user)


@pytest.fixture
def make_product(admin_user):
    """
    Factory creating a product (and its `initial` ledger entry) through
    products_service, the same path the API uses.
    """
    counter = itertools.count(1)

    def _make(
        *,
        stock=10,
        selling_price="100.00",
        purchase_price="60.00",
        category="tiles",
        min_stock_level=2,
        max_stock_level=1000,
        name=None,
        is_active=True,
    ):
        n = next(counter)
        product = products_service.create_product(
            {
                "name": name or f"Test Product {n}",
                "sku": f"SKU-{n:04d}",
                "category": category,
                "purchasePrice": purchase_price,
                "sellingPrice": selling_price,
                "stock": stock,
                "minStockLevel": min_stock_level,
                "maxStockLevel": max_stock_level,
            },
            admin_user.id,
        )
        if not is_active:
            product = products_service.deactivate_product(product.id)
        return product

    return _make


@pytest.fixture
def login(client):
    """Log in through the API and return bearer headers."""
    def _login(email: str, password: str = TEST_PASSWORD) -> dict:
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}

    return _login
