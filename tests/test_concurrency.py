"""Concurrent orders against PostgreSQL.

SQLite ignores SELECT ... FOR UPDATE, so these tests only run when
VEGGIE_SHOP_TEST_POSTGRES_URL points at a disposable PostgreSQL database.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from conftest import RecordingPublisher, make_order_request
from veggie_shop.database import Base
from veggie_shop.exceptions import InsufficientStockError
from veggie_shop.models import Vegetable
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.seed import DEMO_USER, seed_catalog
from veggie_shop.services.order_service import OrderService

POSTGRES_URL = os.environ.get("VEGGIE_SHOP_TEST_POSTGRES_URL")

pytestmark = pytest.mark.skipif(
    not POSTGRES_URL, reason="VEGGIE_SHOP_TEST_POSTGRES_URL is not set"
)

WORKERS = 5


@pytest.fixture
def pg_sessions():
    engine = create_engine(POSTGRES_URL, pool_size=WORKERS + 1)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autoflush=False, bind=engine)

    setup = factory()
    try:
        seed_catalog(setup)
        user_id = UserRepository(setup).get_by_email(DEMO_USER["email"]).id
    finally:
        setup.close()

    yield factory, user_id

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def place_concurrently(factory, user_id, requests):
    barrier = threading.Barrier(len(requests))

    def place(request):
        session = factory()
        try:
            barrier.wait()
            OrderService(session, event_publisher=RecordingPublisher()).create_order(user_id, request)
            return "placed"
        except InsufficientStockError:
            return "short"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(requests)) as pool:
        return list(pool.map(place, requests))


def test_concurrent_orders_never_oversell(pg_sessions):
    factory, user_id = pg_sessions

    # Fresh Tomatoes start with 30 in stock
    outcomes = place_concurrently(factory, user_id, [make_order_request([(3, 10)])] * WORKERS)

    assert sorted(outcomes) == ["placed"] * 3 + ["short"] * 2
    check = factory()
    try:
        tomatoes = check.get(Vegetable, 3)
        assert (tomatoes.stock_quantity, tomatoes.in_stock) == (0, False)
    finally:
        check.close()


def test_overlapping_orders_lock_in_the_same_order(pg_sessions):
    factory, user_id = pg_sessions
    requests = [
        make_order_request([(1, 5), (2, 5)]),
        make_order_request([(2, 5), (1, 5)]),
    ] * 2

    outcomes = place_concurrently(factory, user_id, requests)

    assert outcomes == ["placed"] * 4
    check = factory()
    try:
        assert check.get(Vegetable, 1).stock_quantity == 30
        assert check.get(Vegetable, 2).stock_quantity == 55
    finally:
        check.close()
