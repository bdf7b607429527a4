"""
Order Service - Business Logic Layer

Placement, cancellation, deletion and status updates each run as one unit
of work over the order tables and the vegetable stock columns, so a
failure at any step leaves both exactly as they were.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

import structlog
from sqlalchemy.orm import Session

from veggie_shop.database import unit_of_work
from veggie_shop.exceptions import (
    InsufficientStockError,
    InvalidOrderStateError,
    NotFoundError,
    OutOfStockError,
    ValidationError
)
from veggie_shop.models.catalog import Vegetable
from veggie_shop.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    MAX_NOTES_LENGTH,
    MAX_PAYMENT_METHOD_LENGTH,
    MAX_SHIPPING_ADDRESS_LENGTH
)
from veggie_shop.publishers import event_publisher as events
from veggie_shop.publishers.event_publisher import EventPublisher
from veggie_shop.repositories.order_repository import OrderRepository
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.repositories.vegetable_repository import VegetableRepository
from veggie_shop.schemas.order import OrderCreate, OrderItemCreate, OrderResponse

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def _clean_text(value: Optional[str], field: str, max_length: int, required: bool = True) -> Optional[str]:
    """Trim a free-text field and enforce presence and length"""
    text = (value or "").strip()
    if required and not text:
        raise ValidationError(f"{field} is required")
    if len(text) > max_length:
        raise ValidationError(f"{field} is too long (maximum {max_length} characters)")
    return text or None


class OrderService:
    """Service layer for the order workflow and order queries"""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        self.db = db
        self.repository = OrderRepository(db)
        self.vegetables = VegetableRepository(db)
        self.users = UserRepository(db)
        self.event_publisher = event_publisher or EventPublisher()

    def get_orders_by_user(self, user_id: int) -> List[OrderResponse]:
        """Get a user's orders, newest first, with items expanded"""
        orders = self.repository.get_by_user(user_id)
        return [OrderResponse.model_validate(o) for o in orders]

    def get_order_by_id(self, order_id: int) -> Optional[OrderResponse]:
        """
        Get order by ID

        Ownership is not checked here; callers compare order.user_id with
        the requesting user.
        """
        order = self.repository.get_by_id(order_id)
        if not order:
            return None
        return OrderResponse.model_validate(order)

    def create_order(self, user_id: int, order_data: OrderCreate) -> OrderResponse:
        """
        Place an order for a user

        Steps, all inside one transaction:
        1. Check the user exists
        2. Validate the request fields
        3. Load and lock every requested vegetable in a single query
        4. Check availability
        5. Price every line from the catalog (client prices are ignored)
        6. Save the order, then its items
        7. Take the ordered quantities out of stock

        Args:
            user_id: Acting user, who becomes the order's owner
            order_data: Shipping/payment details and the cart snapshot

        Returns:
            Created order with items expanded

        Raises:
            NotFoundError: If the user or any vegetable does not exist
            ValidationError: If the request is empty or a field is invalid
            ConflictError: If a vegetable is out of stock or short
            TransactionError: If the store fails while saving
        """
        logger.info("Starting order creation", user_id=user_id, item_count=len(order_data.items))

        with unit_of_work(self.db, "create_order", user_id=user_id):
            if self.users.get_by_id(user_id) is None:
                raise NotFoundError("user", [user_id])

            if not order_data.items:
                raise ValidationError("Order must contain at least one item")

            shipping_address = _clean_text(
                order_data.shipping_address, "Shipping address", MAX_SHIPPING_ADDRESS_LENGTH
            )
            payment_method = _clean_text(
                order_data.payment_method, "Payment method", MAX_PAYMENT_METHOD_LENGTH
            )
            notes = _clean_text(order_data.notes, "Notes", MAX_NOTES_LENGTH, required=False)

            for item in order_data.items:
                if item.quantity <= 0:
                    raise ValidationError(
                        f"Quantity must be greater than 0 for vegetable {item.vegetable_id}"
                    )

            vegetables = self._lock_vegetables(item.vegetable_id for item in order_data.items)
            self._check_availability(order_data.items, vegetables)

            total_amount = sum(
                (self._line_subtotal(vegetables[item.vegetable_id], item.quantity) for item in order_data.items),
                Decimal("0.00")
            )
            logger.info("Calculated total amount", user_id=user_id, total_amount=str(total_amount))

            order = self.repository.add(Order(
                user_id=user_id,
                status=OrderStatus.PENDING,
                total_amount=total_amount,
                shipping_address=shipping_address,
                payment_method=payment_method,
                notes=notes
            ))
            order_id = order.id

            for item in order_data.items:
                vegetable = vegetables[item.vegetable_id]
                self.repository.add_item(OrderItem(
                    order_id=order_id,
                    vegetable_id=vegetable.id,
                    quantity=item.quantity,
                    price=vegetable.price,
                    subtotal=self._line_subtotal(vegetable, item.quantity)
                ))

            for item in order_data.items:
                vegetable = self.vegetables.decrement_stock(vegetables[item.vegetable_id], item.quantity)
                logger.info(
                    "Reserved stock",
                    vegetable_id=vegetable.id,
                    vegetable_name=vegetable.name,
                    quantity=item.quantity,
                    new_stock=vegetable.stock_quantity
                )

        logger.info("Order created", order_id=order_id, user_id=user_id)

        created = self.repository.get_by_id(order_id)
        self._publish(events.ORDER_CREATED, created)
        return OrderResponse.model_validate(created)

    def cancel_order(self, order_id: int) -> OrderResponse:
        """
        Cancel a pending or confirmed order and put its items back in stock

        Raises:
            NotFoundError: If order not found
            InvalidOrderStateError: If the order is past confirmation or already cancelled
        """
        logger.info("Starting order cancellation", order_id=order_id)

        with unit_of_work(self.db, "cancel_order", order_id=order_id):
            order = self._get_modifiable_order(order_id, action="cancelled")
            order.status = OrderStatus.CANCELLED
            self._restore_stock(order)

        logger.info("Order cancelled", order_id=order_id)

        cancelled = self.repository.get_by_id(order_id)
        self._publish(events.ORDER_CANCELLED, cancelled)
        return OrderResponse.model_validate(cancelled)

    def delete_order(self, order_id: int) -> bool:
        """
        Permanently delete a pending or confirmed order

        Stock is restored as for a cancellation, then the items and the
        order row are removed.

        Raises:
            NotFoundError: If order not found
            InvalidOrderStateError: If the order is past confirmation or cancelled
        """
        logger.info("Starting order deletion", order_id=order_id)

        with unit_of_work(self.db, "delete_order", order_id=order_id):
            order = self._get_modifiable_order(order_id, action="deleted")
            event_data = self._event_data(order)
            self._restore_stock(order)
            self.repository.delete(order)

        logger.info("Order deleted", order_id=order_id)

        self.event_publisher.publish(events.ORDER_DELETED, event_data)
        return True

    def update_order_status(self, order_id: int, new_status: Union[OrderStatus, str]) -> OrderResponse:
        """
        Set an order's status

        Any status is accepted, including moves the normal lifecycle does
        not allow (e.g. Delivered back to Pending); those are only logged.
        Stock is not touched, even when the new status is Cancelled.
        Moving a cancelled order back to Pending or Confirmed makes it
        cancellable again, and a second cancel_order puts its items back in
        stock a second time.

        Raises:
            ValidationError: If new_status is not a known status
            NotFoundError: If order not found
        """
        try:
            status = OrderStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {new_status}") from None

        logger.info("Updating order status", order_id=order_id, status=status.value)

        with unit_of_work(self.db, "update_order_status", order_id=order_id):
            order = self.repository.get_for_update(order_id)
            if order is None:
                raise NotFoundError("order", [order_id])

            previous = order.status
            if previous != status and not previous.can_transition_to(status):
                logger.warning(
                    "Status change outside the order lifecycle",
                    order_id=order_id,
                    old_status=previous.value,
                    new_status=status.value
                )
            order.status = status

        logger.info("Order status updated", order_id=order_id, old_status=previous.value, new_status=status.value)

        updated = self.repository.get_by_id(order_id)
        data = self._event_data(updated)
        data["old_status"] = previous.value
        self.event_publisher.publish(events.ORDER_STATUS_CHANGED, data)
        return OrderResponse.model_validate(updated)

    @staticmethod
    def _line_subtotal(vegetable: Vegetable, quantity: int) -> Decimal:
        return (vegetable.price * quantity).quantize(CENT)

    def _lock_vegetables(self, vegetable_ids: Iterable[int]) -> Dict[int, Vegetable]:
        """Load every requested vegetable at once; report all missing IDs together"""
        requested = list(dict.fromkeys(vegetable_ids))
        vegetables = {v.id: v for v in self.vegetables.get_many_for_update(requested)}
        logger.debug("Loaded vegetables", requested=requested, found=len(vegetables))

        missing = [vegetable_id for vegetable_id in requested if vegetable_id not in vegetables]
        if missing:
            raise NotFoundError("vegetable", missing)
        return vegetables

    @staticmethod
    def _check_availability(items: List[OrderItemCreate], vegetables: Dict[int, Vegetable]) -> None:
        # Lines for the same vegetable draw on the same stock
        requested = defaultdict(int)
        for item in items:
            vegetable = vegetables[item.vegetable_id]
            if not vegetable.in_stock:
                raise OutOfStockError(vegetable.id, vegetable.name)

            requested[vegetable.id] += item.quantity
            if vegetable.stock_quantity < requested[vegetable.id]:
                raise InsufficientStockError(
                    vegetable.id,
                    vegetable.name,
                    available=vegetable.stock_quantity,
                    requested=requested[vegetable.id]
                )

    def _get_modifiable_order(self, order_id: int, action: str) -> Order:
        order = self.repository.get_for_update(order_id)
        if order is None:
            raise NotFoundError("order", [order_id])
        if not order.status.is_modifiable:
            raise InvalidOrderStateError(order_id, order.status.value, action)
        return order

    def _restore_stock(self, order: Order) -> None:
        vegetables = {
            v.id: v for v in self.vegetables.get_many_for_update(item.vegetable_id for item in order.items)
        }
        for item in order.items:
            vegetable = self.vegetables.restore_stock(vegetables[item.vegetable_id], item.quantity)
            logger.info(
                "Restored stock",
                order_id=order.id,
                vegetable_id=vegetable.id,
                vegetable_name=vegetable.name,
                quantity=item.quantity,
                new_stock=vegetable.stock_quantity
            )

    @staticmethod
    def _event_data(order: Order) -> dict:
        return {
            "order_id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "total_amount": str(order.total_amount),
            "items": [
                {
                    "vegetable_id": item.vegetable_id,
                    "quantity": item.quantity,
                    "price": str(item.price)
                }
                for item in order.items
            ]
        }

    def _publish(self, event_type: str, order: Order) -> None:
        self.event_publisher.publish(event_type, self._event_data(order))
