"""Pytest fixtures for veggie_shop tests."""

import os

# Must be set before veggie_shop.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_ENABLED"] = "false"
os.environ["SEED_DATA"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from veggie_shop import models  # noqa: F401
from veggie_shop.api import catalog, health, orders, users
from veggie_shop.database import Base, SessionLocal, engine, get_db
from veggie_shop.models import Order, OrderItem, User, Vegetable
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.schemas.order import OrderCreate
from veggie_shop.seed import DEMO_USER, seed_catalog
from veggie_shop.services.order_service import OrderService


class RecordingPublisher:
    """Collects published events instead of sending them to RabbitMQ."""

    def __init__(self):
        self.events = []

    def publish(self, event_type, data):
        self.events.append((event_type, data))
        return True

    @property
    def event_types(self):
        return [event_type for event_type, _ in self.events]


@pytest.fixture
def db():
    """Fresh in-memory schema for every test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_db(db):
    """Database with the starter catalog and the demo customer."""
    seed_catalog(db)
    return db


@pytest.fixture
def customer(seeded_db):
    return UserRepository(seeded_db).get_by_email(DEMO_USER["email"])


@pytest.fixture
def other_customer(seeded_db):
    user = User(email="someone.else@example.com", first_name="Someone", last_name="Else")
    seeded_db.add(user)
    seeded_db.commit()
    return user


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def service(seeded_db, publisher):
    return OrderService(seeded_db, event_publisher=publisher)


@pytest.fixture
def client(seeded_db):
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(catalog.categories_router, prefix="/api")
    app.include_router(catalog.vegetables_router, prefix="/api")
    app.include_router(orders.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.dependency_overrides[get_db] = lambda: seeded_db
    return TestClient(app)


def make_order_request(items, **overrides):
    """Build an OrderCreate from (vegetable_id, quantity) pairs."""
    data = {
        "shipping_address": "12 Market Street, Pune",
        "payment_method": "Cash on Delivery",
        "notes": None,
        "items": [{"vegetable_id": vegetable_id, "quantity": quantity} for vegetable_id, quantity in items],
    }
    data.update(overrides)
    return OrderCreate(**data)


def stock_of(db, vegetable_id):
    vegetable = db.get(Vegetable, vegetable_id)
    db.refresh(vegetable)
    return vegetable.stock_quantity, vegetable.in_stock


def count_rows(db):
    return db.query(Order).count(), db.query(OrderItem).count()
