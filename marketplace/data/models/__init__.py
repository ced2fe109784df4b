#every model imported here so SQLAlchemy registers it in Base.metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.product import ProductModel, ProductStatus
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel, OrderStatus
from marketplace.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "ProductModel",
    "ProductStatus",
    "CartItemModel",
    "OrderModel",
    "OrderStatus",
    "OrderItemModel",
]
