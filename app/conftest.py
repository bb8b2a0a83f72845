"""
Shared pytest fixtures.

Tests run against an in-memory SQLite database; the environment is set
before the application is imported so the engine picks it up.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.database import Base, engine, SessionLocal, get_db
from app.modules.auth.schemas import UserCreate
from app.modules.auth.service import AuthService
from app.modules.clients.models import Client
from app.modules.orders.schemas import OrderCreate
from app.modules.orders.service import OrderService
from app.modules.products.models import Product
from app.modules.registers.service import RegisterSessionService
from app.modules.services.models import Service


# ===== DATABASE =====

@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(db_session):
    token = AuthService(db_session).create_user(UserCreate(
        email="caissier@garage-dupont.fr",
        username="cashier",
        password="secret123"
    ))
    return {"Authorization": f"Bearer {token.token}"}


# ===== CATALOGUE =====

@pytest.fixture
def sample_client(db_session):
    customer = Client(name="Jean Dupont", address="12 rue de la Paix, Paris", phone="0601020304")
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_product(db_session):
    product = Product(name="Pneu 205/55 R16", price=Decimal("50.00"), stock=10)
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def sample_service(db_session):
    service = Service(name="Montage", price=Decimal("25.00"))
    db_session.add(service)
    db_session.commit()
    db_session.refresh(service)
    return service


# ===== REGISTER / ORDERS =====

@pytest.fixture
def open_register(db_session):
    return RegisterSessionService(db_session).open_session()


@pytest.fixture
def make_order(db_session, sample_client, sample_product):
    """Order factory: ``make_order(quantity=4, global_discount=10)``"""
    def _make(quantity: int = 4, global_discount: Decimal = Decimal("0"), discount: Decimal = Decimal("0")):
        return OrderService(db_session).create_order(OrderCreate(
            client_id=sample_client.id,
            items=[{
                "product_id": sample_product.id,
                "quantity": quantity,
                "discount": discount,
            }],
            global_discount=global_discount
        ))
    return _make
