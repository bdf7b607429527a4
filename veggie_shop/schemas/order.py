"""
Pydantic schemas for order request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from veggie_shop.models.order import OrderStatus


class OrderItemCreate(BaseModel):
    """One cart line submitted with an order"""
    vegetable_id: int = Field(..., gt=0, description="Vegetable ID")
    quantity: int = Field(..., gt=0, description="Quantity to order")
    price: Optional[Decimal] = Field(
        None,
        gt=0,
        description="Price seen by the client; informational only, the catalog price is charged"
    )


class OrderCreate(BaseModel):
    """
    Schema for placing an order

    Field lengths and emptiness are checked by the order service after
    trimming, so they are not constrained here.
    """
    shipping_address: str = Field(..., description="Delivery address (max 1000 characters)")
    payment_method: str = Field(..., description="Payment method (max 100 characters)")
    notes: Optional[str] = Field(None, description="Delivery notes (max 1000 characters)")
    items: List[OrderItemCreate] = Field(default_factory=list, description="Cart snapshot")


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="Order status")


class OrderItemResponse(BaseModel):
    """Order line with the vegetable's display fields joined in"""
    id: int
    vegetable_id: int
    vegetable_name: str
    vegetable_image_url: str
    quantity: int
    price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: int
    user_id: int
    order_date: datetime
    status: OrderStatus
    total_amount: Decimal
    shipping_address: str
    payment_method: str
    notes: Optional[str]
    items: List[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderEvent(BaseModel):
    """Envelope for order lifecycle events published to RabbitMQ"""
    event_type: str
    event_id: str
    event_version: str = "1.0"
    timestamp: str
    source: str
    data: dict
