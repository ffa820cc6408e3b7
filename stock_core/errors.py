"""Domain exceptions shared by the services and translated to HTTP errors by the API."""

from __future__ import annotations


class InventoryError(Exception):
    """Base exception for inventory operations."""


class InvalidInput(InventoryError):
    """Raised when a request is malformed; nothing has touched storage yet."""


class NotFound(InventoryError):
    """Raised when a referenced record does not exist."""


class ProductNotFound(NotFound):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class CategoryNotFound(NotFound):
    def __init__(self, category_id: str):
        super().__init__(f"Category {category_id} not found")
        self.category_id = category_id


class MovementNotFound(NotFound):
    def __init__(self, movement_id: str):
        super().__init__(f"Stock movement {movement_id} not found")
        self.movement_id = movement_id


class UserNotFound(NotFound):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class InsufficientStock(InventoryError):
    """An OUT movement would take the product quantity below zero."""

    def __init__(self, product_id: str, *, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"{available} available, {requested} requested"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class Conflict(InventoryError):
    """A uniqueness constraint rejected the write."""


class StorageFailure(InventoryError):
    """The database failed mid-transaction; the transaction was rolled back."""


__all__ = [
    "InventoryError",
    "InvalidInput",
    "NotFound",
    "ProductNotFound",
    "CategoryNotFound",
    "MovementNotFound",
    "UserNotFound",
    "InsufficientStock",
    "Conflict",
    "StorageFailure",
]
