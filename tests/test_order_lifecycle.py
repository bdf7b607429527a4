"""Tests for cancelling, deleting, re-statusing and reading orders."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from conftest import count_rows, make_order_request, stock_of
from veggie_shop.exceptions import InvalidOrderStateError, NotFoundError, TransactionError, ValidationError
from veggie_shop.models import Order, OrderStatus, Vegetable
from veggie_shop.publishers.event_publisher import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_DELETED,
    ORDER_STATUS_CHANGED,
)
from veggie_shop.repositories.vegetable_repository import VegetableRepository


@pytest.fixture
def pending_order(service, customer):
    return service.create_order(customer.id, make_order_request([(1, 2), (2, 5)]))


def force_status(db, order_id, status):
    order = db.get(Order, order_id)
    order.status = status
    db.commit()


def assert_stock_invariant(db):
    for vegetable in db.query(Vegetable).all():
        assert vegetable.in_stock == (vegetable.stock_quantity > 0), vegetable


class TestCancelOrder:
    def test_cancel_restores_stock_once(self, service, seeded_db, pending_order):
        assert stock_of(seeded_db, 1) == (48, True)
        assert stock_of(seeded_db, 2) == (70, True)

        cancelled = service.cancel_order(pending_order.id)

        assert cancelled.status == OrderStatus.CANCELLED
        assert stock_of(seeded_db, 1) == (50, True)
        assert stock_of(seeded_db, 2) == (75, True)

    def test_cancel_twice_is_a_conflict(self, service, seeded_db, pending_order):
        service.cancel_order(pending_order.id)

        with pytest.raises(InvalidOrderStateError) as exc_info:
            service.cancel_order(pending_order.id)

        assert exc_info.value.status == "Cancelled"
        assert stock_of(seeded_db, 1) == (50, True)

    def test_cancel_confirmed_order(self, service, seeded_db, pending_order):
        force_status(seeded_db, pending_order.id, OrderStatus.CONFIRMED)

        assert service.cancel_order(pending_order.id).status == OrderStatus.CANCELLED

    def test_cancel_shipped_order_is_a_conflict(self, service, seeded_db, pending_order):
        force_status(seeded_db, pending_order.id, OrderStatus.SHIPPED)

        with pytest.raises(InvalidOrderStateError, match="Current status: Shipped"):
            service.cancel_order(pending_order.id)

        assert service.get_order_by_id(pending_order.id).status == OrderStatus.SHIPPED
        assert stock_of(seeded_db, 1) == (48, True)
        assert stock_of(seeded_db, 2) == (70, True)

    def test_cancel_puts_sold_out_vegetable_back_in_stock(self, service, seeded_db, customer):
        order = service.create_order(customer.id, make_order_request([(4, 25)]))
        assert stock_of(seeded_db, 4) == (0, False)

        service.cancel_order(order.id)

        assert stock_of(seeded_db, 4) == (25, True)

    def test_cancel_missing_order(self, service):
        with pytest.raises(NotFoundError, match="Order with id=404 not found"):
            service.cancel_order(404)

    def test_cancel_publishes_event(self, service, publisher, pending_order):
        service.cancel_order(pending_order.id)

        assert publisher.event_types == [ORDER_CREATED, ORDER_CANCELLED]
        assert publisher.events[-1][1]["status"] == "Cancelled"

    def test_failure_while_restoring_stock_rolls_back(self, service, seeded_db, publisher, pending_order, monkeypatch):
        original = VegetableRepository.restore_stock
        calls = []

        def failing_restore(self, vegetable, quantity):
            calls.append(vegetable.id)
            if len(calls) == 2:
                raise RuntimeError("stock ledger unavailable")
            return original(self, vegetable, quantity)

        monkeypatch.setattr(VegetableRepository, "restore_stock", failing_restore)

        with pytest.raises(RuntimeError, match="stock ledger unavailable"):
            service.cancel_order(pending_order.id)

        assert service.get_order_by_id(pending_order.id).status == OrderStatus.PENDING
        assert stock_of(seeded_db, 1) == (48, True)
        assert stock_of(seeded_db, 2) == (70, True)
        assert publisher.event_types == [ORDER_CREATED]


class TestDeleteOrder:
    def test_delete_pending_order(self, service, seeded_db, pending_order):
        assert service.delete_order(pending_order.id) is True

        assert stock_of(seeded_db, 1) == (50, True)
        assert stock_of(seeded_db, 2) == (75, True)
        assert count_rows(seeded_db) == (0, 0)
        assert service.get_order_by_id(pending_order.id) is None

    def test_delete_restores_stock_like_cancel(self, service, seeded_db, customer):
        request = make_order_request([(3, 4), (5, 6)])
        first = service.create_order(customer.id, request)
        second = service.create_order(customer.id, request)

        service.cancel_order(first.id)
        after_cancel = [stock_of(seeded_db, 3), stock_of(seeded_db, 5)]
        service.delete_order(second.id)

        assert after_cancel == [(26, True), (34, True)]
        assert [stock_of(seeded_db, 3), stock_of(seeded_db, 5)] == [(30, True), (40, True)]

    def test_delete_keeps_other_orders(self, service, seeded_db, customer, pending_order):
        other = service.create_order(customer.id, make_order_request([(6, 1)]))

        service.delete_order(pending_order.id)

        assert count_rows(seeded_db) == (1, 1)
        assert service.get_order_by_id(other.id) is not None

    @pytest.mark.parametrize("status", [OrderStatus.PROCESSING, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_delete_is_refused_after_confirmation(self, service, seeded_db, pending_order, status):
        force_status(seeded_db, pending_order.id, status)

        with pytest.raises(InvalidOrderStateError, match="cannot be deleted"):
            service.delete_order(pending_order.id)

        assert count_rows(seeded_db) == (1, 2)
        assert stock_of(seeded_db, 1) == (48, True)

    def test_delete_missing_order(self, service):
        with pytest.raises(NotFoundError):
            service.delete_order(404)

    def test_delete_publishes_event(self, service, publisher, pending_order):
        service.delete_order(pending_order.id)

        event_type, data = publisher.events[-1]
        assert event_type == ORDER_DELETED
        assert data["order_id"] == pending_order.id
        assert len(data["items"]) == 2

    def test_failure_while_removing_rows_rolls_back(self, service, seeded_db, publisher, pending_order, monkeypatch):
        def failing_delete(order):
            raise OperationalError("DELETE FROM orders", {}, Exception("database is locked"))

        monkeypatch.setattr(service.repository, "delete", failing_delete)

        with pytest.raises(TransactionError):
            service.delete_order(pending_order.id)

        assert count_rows(seeded_db) == (1, 2)
        assert service.get_order_by_id(pending_order.id).status == OrderStatus.PENDING
        assert stock_of(seeded_db, 1) == (48, True)
        assert stock_of(seeded_db, 2) == (70, True)
        assert publisher.event_types == [ORDER_CREATED]


class TestUpdateOrderStatus:
    def test_follows_lifecycle(self, service, pending_order):
        for status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            assert service.update_order_status(pending_order.id, status).status == status

    def test_accepts_status_name(self, service, pending_order):
        assert service.update_order_status(pending_order.id, "Confirmed").status == OrderStatus.CONFIRMED

    def test_any_status_is_accepted(self, service, pending_order):
        service.update_order_status(pending_order.id, OrderStatus.DELIVERED)

        reverted = service.update_order_status(pending_order.id, OrderStatus.PENDING)

        assert reverted.status == OrderStatus.PENDING

    def test_cancelled_status_does_not_restore_stock(self, service, seeded_db, pending_order):
        service.update_order_status(pending_order.id, OrderStatus.CANCELLED)

        assert stock_of(seeded_db, 1) == (48, True)

    def test_reopened_order_restores_stock_again(self, service, seeded_db, pending_order):
        service.cancel_order(pending_order.id)
        service.update_order_status(pending_order.id, OrderStatus.PENDING)

        service.cancel_order(pending_order.id)

        assert stock_of(seeded_db, 1) == (52, True)

    def test_total_is_not_recomputed(self, service, seeded_db, pending_order):
        vegetable = seeded_db.get(Vegetable, 1)
        vegetable.price = vegetable.price * 2
        seeded_db.commit()

        updated = service.update_order_status(pending_order.id, OrderStatus.CONFIRMED)

        assert updated.total_amount == pending_order.total_amount

    def test_unknown_status(self, service, pending_order):
        with pytest.raises(ValidationError, match="Unknown order status: Lost"):
            service.update_order_status(pending_order.id, "Lost")

    def test_missing_order(self, service):
        with pytest.raises(NotFoundError):
            service.update_order_status(404, OrderStatus.SHIPPED)

    def test_publishes_old_and_new_status(self, service, publisher, pending_order):
        service.update_order_status(pending_order.id, OrderStatus.CONFIRMED)

        event_type, data = publisher.events[-1]
        assert event_type == ORDER_STATUS_CHANGED
        assert (data["old_status"], data["status"]) == ("Pending", "Confirmed")


class TestOrderQueries:
    def test_orders_by_user_newest_first(self, service, seeded_db, customer, other_customer):
        older = service.create_order(customer.id, make_order_request([(1, 1)]))
        newer = service.create_order(customer.id, make_order_request([(2, 1)]))
        service.create_order(other_customer.id, make_order_request([(3, 1)]))

        backdated = seeded_db.get(Order, older.id)
        backdated.order_date = datetime.now(timezone.utc) - timedelta(days=1)
        seeded_db.commit()

        orders = service.get_orders_by_user(customer.id)

        assert [o.id for o in orders] == [newer.id, older.id]
        assert orders[0].items[0].vegetable_name == "Organic Carrots"

    def test_orders_by_user_without_orders(self, service, other_customer):
        assert service.get_orders_by_user(other_customer.id) == []

    def test_get_order_by_id_does_not_check_owner(self, service, other_customer, pending_order):
        order = service.get_order_by_id(pending_order.id)

        assert order.user_id != other_customer.id
        assert [i.vegetable_name for i in order.items] == ["Fresh Spinach", "Organic Carrots"]

    def test_missing_order_is_none(self, service):
        assert service.get_order_by_id(12345) is None


def test_stock_invariant_holds_across_operations(service, seeded_db, customer):
    first = service.create_order(customer.id, make_order_request([(4, 25), (1, 10)]))
    second = service.create_order(customer.id, make_order_request([(1, 40)]))
    assert_stock_invariant(seeded_db)

    service.update_order_status(second.id, OrderStatus.SHIPPED)
    with pytest.raises(InvalidOrderStateError):
        service.cancel_order(second.id)
    assert_stock_invariant(seeded_db)

    service.cancel_order(first.id)
    assert_stock_invariant(seeded_db)
    assert stock_of(seeded_db, 1) == (10, True)
