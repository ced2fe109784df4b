# marketplace/domain/errors.py
"""
Error taxonomy shared by services and the HTTP layer.

Every error carries the HTTP status (`code`) and a machine readable `type`,
the exception handler in marketplace.api.errors renders them as
{name, message, code, type[, data]}.
"""
from typing import Any


class MarketplaceError(Exception):
    code = 500
    type = "INTERNAL_ERROR"

    def __init__(self, message: str, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.data = data

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        body = {
            "name": self.name,
            "message": self.message,
            "code": self.code,
            "type": self.type,
        }
        if self.data:
            body["data"] = self.data
        return body


class Unauthorized(MarketplaceError):
    code = 401
    type = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(MarketplaceError):
    code = 422
    type = "VALIDATION_ERROR"


class EmptyCart(MarketplaceError):
    code = 400
    type = "EMPTY_CART"

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class ProductUnavailable(MarketplaceError):
    code = 400
    type = "PRODUCT_NOT_AVAILABLE"

    def __init__(self, product_id: int, title: str):
        super().__init__(
            f'Product "{title}" is no longer available',
            data={"product_id": product_id, "title": title},
        )
        self.product_id = product_id


class InsufficientQuantity(MarketplaceError):
    code = 400
    type = "INSUFFICIENT_QUANTITY"

    def __init__(self, product_id: int, title: str, requested: int, available: int):
        super().__init__(
            f'Insufficient quantity for product "{title}"',
            data={
                "product_id": product_id,
                "title": title,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id


class NotFound(MarketplaceError):
    code = 404
    type = "NOT_FOUND"


class ProductNotFound(NotFound):
    type = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__("Product not found", data={"product_id": product_id})


class CartItemNotFound(NotFound):
    type = "CART_ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        super().__init__("Cart item not found", data={"item_id": item_id})


class OrderNotFound(NotFound):
    type = "ORDER_NOT_FOUND"

    def __init__(self, order_id: int):
        super().__init__("Order not found", data={"order_id": order_id})


class Conflict(MarketplaceError):
    code = 409
    type = "CONFLICT"


class StockConflict(Conflict):
    """Stock changed between validation and the conditional decrement."""

    type = "STOCK_CONFLICT"

    def __init__(self, product_id: int, title: str):
        super().__init__(
            f'Stock for product "{title}" changed during checkout, refresh the cart and retry',
            data={"product_id": product_id, "title": title},
        )
        self.product_id = product_id
