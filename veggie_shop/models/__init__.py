"""
Models package
"""
from veggie_shop.models.catalog import Category, Vegetable
from veggie_shop.models.order import Order, OrderItem, OrderStatus
from veggie_shop.models.user import User

__all__ = ["Category", "Vegetable", "Order", "OrderItem", "OrderStatus", "User"]
