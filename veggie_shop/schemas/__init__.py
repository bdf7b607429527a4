"""
Schemas package
"""
from veggie_shop.schemas.catalog import CategoryResponse, VegetableResponse
from veggie_shop.schemas.order import (
    OrderItemCreate,
    OrderCreate,
    OrderStatusUpdate,
    OrderItemResponse,
    OrderResponse,
    OrderEvent
)
from veggie_shop.schemas.user import UserCreate, UserResponse

__all__ = [
    "CategoryResponse",
    "VegetableResponse",
    "OrderItemCreate",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderItemResponse",
    "OrderResponse",
    "OrderEvent",
    "UserCreate",
    "UserResponse"
]
