"""
Order API endpoints
"""
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

import structlog

from veggie_shop.database import get_db
from veggie_shop.exceptions import (
    ConflictError,
    NotFoundError,
    ShopError,
    TransactionError,
    ValidationError
)
from veggie_shop.services.order_service import OrderService
from veggie_shop.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

ERROR_STATUS_CODES = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (TransactionError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db)


def get_current_user_id(x_user_id: Optional[int] = Header(None)) -> int:
    """
    Acting user, passed explicitly to every order operation

    Stands in for the authenticated identity supplied by the auth layer.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity"
        )
    return x_user_id


def to_http_error(error: ShopError) -> HTTPException:
    """Translate a service error into an HTTP error response"""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def get_owned_order(order_id: int, user_id: int, service: OrderService) -> OrderResponse:
    """Fetch an order and make sure it belongs to the acting user"""
    order = service.get_order_by_id(order_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order with id={order_id} not found"
        )
    if order.user_id != user_id:
        logger.warning("Order access denied", order_id=order_id, user_id=user_id, owner_id=order.user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Order belongs to another user"
        )
    return order


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: OrderCreate,
    user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Place an order for the acting user

    - **shipping_address**: Delivery address (required, max 1000 characters)
    - **payment_method**: Payment method (required, max 100 characters)
    - **notes**: Delivery notes (optional, max 1000 characters)
    - **items**: Vegetable IDs and quantities; prices are taken from the catalog
    """
    try:
        return service.create_order(user_id, order_data)
    except ShopError as e:
        raise to_http_error(e)


@router.get("/user/{user_id}", response_model=List[OrderResponse], summary="Get orders by user")
def get_user_orders(
    user_id: int,
    current_user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Get all orders of a user, newest first

    - **user_id**: Must be the acting user
    """
    if user_id != current_user_id:
        logger.warning("Order list access denied", user_id=current_user_id, requested_user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot view another user's orders"
        )
    return service.get_orders_by_user(user_id)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
def get_order(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve a specific order of the acting user

    - **order_id**: Order ID
    """
    return get_owned_order(order_id, user_id, service)


@router.put("/{order_id}/cancel", response_model=OrderResponse, summary="Cancel order")
def cancel_order(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Cancel a pending or confirmed order and restore its stock

    - **order_id**: Order ID
    """
    get_owned_order(order_id, user_id, service)
    try:
        return service.cancel_order(order_id)
    except ShopError as e:
        raise to_http_error(e)


@router.put("/{order_id}/status", response_model=OrderResponse, summary="Update order status")
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status

    - **order_id**: Order ID
    - **status**: New status (Pending, Confirmed, Processing, Shipped, Delivered, Cancelled)
    """
    get_owned_order(order_id, user_id, service)
    try:
        return service.update_order_status(order_id, status_data.status)
    except ShopError as e:
        raise to_http_error(e)


@router.delete("/{order_id}", summary="Delete order")
def delete_order(
    order_id: int,
    user_id: int = Depends(get_current_user_id),
    service: OrderService = Depends(get_order_service)
):
    """
    Permanently delete a pending or confirmed order, restoring its stock

    - **order_id**: Order ID
    """
    get_owned_order(order_id, user_id, service)
    try:
        service.delete_order(order_id)
    except ShopError as e:
        raise to_http_error(e)
    return {"message": "Order deleted successfully"}
