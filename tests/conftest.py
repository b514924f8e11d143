import os

# app.data.database builds its engine at import time; keep it off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.data import models  # noqa: F401
from app.data.database import Base
from app.domain.errors import GatewayConnectivityError
from app.domain.schemas import ProductSnapshot, UserProfile
from app.services.cart_service import CartService
from app.services.order_service import OrderService

from tests.fakes import (
    FakeLockService,
    FakeNotificationClient,
    FakePaymentClient,
    FakeProductClient,
    FakeUserClient,
    completed_payment,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def product_client():
    return FakeProductClient(
        {
            7: ProductSnapshot(id=7, name="Widget", price=Decimal("19.99")),
            8: ProductSnapshot(id=8, name="Gadget", price=Decimal("5.50")),
        }
    )


@pytest.fixture
def user_client():
    return FakeUserClient(
        {1: UserProfile(id=1, username="jdoe", email="jdoe@example.com", full_name="John Doe")}
    )


@pytest.fixture
def payment_client():
    return FakePaymentClient(outcome=completed_payment())


@pytest.fixture
def notification_client():
    return FakeNotificationClient()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def cart_service(db, product_client):
    return CartService(db=db, product_client=product_client)


@pytest.fixture
def order_service(db, cart_service, product_client, user_client, payment_client, notification_client, lock_service):
    return OrderService(
        db=db,
        carts=cart_service,
        products=product_client,
        users=user_client,
        payments=payment_client,
        notifications=notification_client,
        lock_service=lock_service,
    )


@pytest.fixture
def unreachable():
    return GatewayConnectivityError("payment-service", "connection refused")
