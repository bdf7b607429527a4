"""Custom exceptions for the Veggie Shop service.

Raised by the service layer when a request cannot be carried out. The API
layer catches these and translates them into HTTP responses.
"""

from typing import Iterable, Optional


class ShopError(Exception):
    """Base exception for all Veggie Shop errors."""

    pass


class ValidationError(ShopError):
    """Raised when a request field is missing or malformed."""

    pass


class NotFoundError(ShopError):
    """Raised when a referenced user, vegetable or order does not exist."""

    def __init__(self, resource: str, identifiers: Optional[Iterable] = None):
        self.resource = resource
        self.identifiers = list(identifiers or [])
        if len(self.identifiers) > 1:
            ids = ", ".join(str(i) for i in self.identifiers)
            msg = f"{resource.capitalize()}s not found: {ids}"
        elif self.identifiers:
            msg = f"{resource.capitalize()} with id={self.identifiers[0]} not found"
        else:
            msg = f"{resource.capitalize()} not found"
        super().__init__(msg)


class ConflictError(ShopError):
    """Raised when a valid request conflicts with the current state."""

    pass


class OutOfStockError(ConflictError):
    """Raised when an ordered vegetable is flagged as out of stock."""

    def __init__(self, vegetable_id: int, vegetable_name: str):
        self.vegetable_id = vegetable_id
        self.vegetable_name = vegetable_name
        super().__init__(f"Vegetable '{vegetable_name}' is out of stock")


class InsufficientStockError(ConflictError):
    """Raised when an ordered quantity exceeds the available stock."""

    def __init__(self, vegetable_id: int, vegetable_name: str, available: int, requested: int):
        self.vegetable_id = vegetable_id
        self.vegetable_name = vegetable_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for '{vegetable_name}'. "
            f"Available: {available}, Requested: {requested}"
        )


class InvalidOrderStateError(ConflictError):
    """Raised when an order's status does not allow the requested action."""

    def __init__(self, order_id: int, status: str, action: str):
        self.order_id = order_id
        self.status = status
        self.action = action
        super().__init__(
            f"Order {order_id} cannot be {action}. Current status: {status}. "
            f"Only pending or confirmed orders can be {action}."
        )


class TransactionError(ShopError):
    """Raised when the store fails while flushing or committing a transaction."""

    pass


class EmailAlreadyRegisteredError(ConflictError):
    """Raised when a customer registers with an email already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email '{email}' is already registered")
