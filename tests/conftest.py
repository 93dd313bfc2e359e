import os

# point the app at an in-memory database before storefront.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["BREVO_API_KEY"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront import models  # noqa: F401
from storefront.database import get_session
from storefront.main import app
from storefront.models.product import Product
from storefront.models.user import User
from storefront.utils.token import create_access_token

from factories import order_payload


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    app.dependency_overrides[get_session] = lambda: session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def lenient_client(client):
    """Client that returns 500 responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as lenient:
        yield lenient


@pytest.fixture(autouse=True)
def no_email_sleep(monkeypatch):
    monkeypatch.setattr("storefront.services.email_retry.time.sleep", lambda seconds: None)


def _make_user(session, username, role="user"):
    user = User(
        first_name=username.title(),
        last_name="Tester",
        username=username,
        email=f"{username}@example.com",
        password="not-a-real-hash",
        role=role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(session):
    return _make_user(session, "jane")


@pytest.fixture
def admin(session):
    return _make_user(session, "boss", role="admin")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_product(session):
    def _make(product_id="P1", price="10.00", stock=5, name=None, is_active=True):
        product = Product(
            id=product_id,
            name=name or product_id,
            sku=f"SKU-{product_id}",
            price=Decimal(price),
            stock=stock,
            is_active=is_active,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def place_order(client, customer_headers):
    """Place an order through the API and return the response."""

    def _place(headers=None, **kwargs):
        return client.post("/orders", json=order_payload(**kwargs), headers=headers or customer_headers)

    return _place
