"""
Order Repository - Data Access Layer

Writes only flush; the caller's unit of work commits or rolls back.
"""
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc

from veggie_shop.models.order import Order, OrderItem


class OrderRepository:
    """Repository for Order and OrderItem persistence"""

    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return self.db.query(Order).options(
            selectinload(Order.items).selectinload(OrderItem.vegetable)
        )

    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID with items and their vegetables loaded"""
        return self._with_items().filter(Order.id == order_id).first()

    def get_for_update(self, order_id: int) -> Optional[Order]:
        """
        Get order by ID and lock its row until the transaction ends

        Items are fetched by a separate SELECT so the lock never sits on an
        outer join.
        """
        return self.db.query(Order).options(
            selectinload(Order.items)
        ).filter(
            Order.id == order_id
        ).with_for_update().populate_existing().first()

    def get_by_user(self, user_id: int) -> List[Order]:
        """Get orders owned by a user, newest first"""
        return self._with_items().filter(
            Order.user_id == user_id
        ).order_by(desc(Order.order_date), desc(Order.id)).all()

    def add(self, order: Order) -> Order:
        """Stage a new order and flush it so it receives its ID"""
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItem) -> OrderItem:
        """Stage a new order item"""
        self.db.add(item)
        self.db.flush()
        return item

    def delete(self, order: Order) -> None:
        """
        Remove an order together with its items

        Items are marked first; the flush emits their DELETEs before the
        order's so the foreign key on order_items is never violated.
        """
        for item in list(order.items):
            self.db.delete(item)
        self.db.delete(order)
        self.db.flush()
