# marketplace/repos/contracts.py
"""
Narrow read/write contracts the checkout orchestrator depends on.

The SQLAlchemy repos in this package satisfy them structurally, tests and
alternative stores only have to provide the same methods.
"""
from decimal import Decimal
from typing import Protocol, Sequence

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.product import ProductModel


class CatalogStore(Protocol):
    def get(self, product_id: int) -> ProductModel: ...

    def lock_many(self, product_ids: Sequence[int]) -> dict[int, ProductModel]: ...

    def decrement_stock(self, product_id: int, amount: int) -> ProductModel | None: ...


class CartStore(Protocol):
    def list_by_user(
        self, user_id: int, for_update: bool = False
    ) -> list[tuple[CartItemModel, ProductModel]]: ...

    def upsert(self, user_id: int, product_id: int, quantity: int) -> CartItemModel: ...

    def delete_lines(self, user_id: int, lines: dict[int, int]) -> int: ...

    def delete_by_id(self, item_id: int, user_id: int) -> bool: ...


class OrderStore(Protocol):
    def create(
        self,
        buyer_id: int,
        total_amount: Decimal,
        shipping_address: str,
        items: Sequence[dict],
    ) -> tuple[OrderModel, list[OrderItemModel]]: ...
