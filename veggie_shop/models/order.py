"""
SQLAlchemy Order and OrderItem models
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from veggie_shop.database import Base

MAX_SHIPPING_ADDRESS_LENGTH = 1000
MAX_PAYMENT_METHOD_LENGTH = 100
MAX_NOTES_LENGTH = 1000


class OrderStatus(str, enum.Enum):
    """Order lifecycle states, persisted by name"""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def is_modifiable(self) -> bool:
        """Whether the order may still be cancelled or deleted"""
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in LIFECYCLE_TRANSITIONS[self]

    def __str__(self):
        return self.value


LIFECYCLE_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Order database model"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    status = Column(
        Enum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True
    )
    total_amount = Column(Numeric(10, 2), nullable=False)  # Fixed at creation time
    shipping_address = Column(String(MAX_SHIPPING_ADDRESS_LENGTH), nullable=False)
    payment_method = Column(String(MAX_PAYMENT_METHOD_LENGTH), nullable=False)
    notes = Column(String(MAX_NOTES_LENGTH), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )

    # Constraints
    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_non_negative'),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, user_id={self.user_id}, status='{self.status}', total_amount={self.total_amount})>"


class OrderItem(Base):
    """
    Order line

    price is a snapshot of the vegetable price when the order was placed,
    not a live reference to the catalog.
    """

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    vegetable_id = Column(Integer, ForeignKey("vegetables.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    vegetable = relationship("Vegetable")

    # Constraints
    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_order_item_quantity_positive'),
        CheckConstraint('price > 0', name='check_order_item_price_positive'),
    )

    @property
    def vegetable_name(self) -> str:
        return self.vegetable.name if self.vegetable else ""

    @property
    def vegetable_image_url(self) -> str:
        return self.vegetable.image_url if self.vegetable else ""

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, vegetable_id={self.vegetable_id}, quantity={self.quantity})>"
