# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from marketplace.data.models.order import OrderStatus
from marketplace.data.models.product import ProductStatus
from marketplace.utils.settings import MIN_SHIPPING_ADDRESS_LENGTH


class CurrentUser(BaseModel):
    """Caller identity resolved from the bearer token."""

    id: int
    email: str
    name: str


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


# ---- cart ----

class CartItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(1, ge=1, description="Quantity to add (at least 1)")


class CartItemUpdate(BaseModel):
    """Schema for setting the quantity of a cart line."""

    quantity: int = Field(..., ge=1, description="New quantity (at least 1)")


class CartProductOut(BaseModel):
    id: int
    title: str
    price: Decimal
    quantity: int
    status: ProductStatus
    seller_id: int
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CartLineOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    product: CartProductOut


class CartOut(BaseModel):
    """Current cart of the caller."""

    items: List[CartLineOut]
    total: Decimal
    count: int


# ---- orders ----

class CheckoutIn(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_address: str = Field(
        ...,
        min_length=MIN_SHIPPING_ADDRESS_LENGTH,
        max_length=500,
        description="Delivery address",
    )

    model_config = ConfigDict(str_strip_whitespace=True)


class OrderItemProductOut(BaseModel):
    id: int
    title: str


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    seller_id: int
    quantity: int
    price: Decimal
    product: OrderItemProductOut | None = None
    seller: UserSummary | None = None


class OrderOut(BaseModel):
    """Order with its items."""

    id: int
    buyer_id: int
    total_amount: Decimal
    status: OrderStatus
    shipping_address: str
    created_at: datetime | None = None
    items: List[OrderItemOut]


class OrderPage(BaseModel):
    rows: List[OrderOut]
    total: int
    page: int
    page_size: int
    total_pages: int


class SellerOrderRef(BaseModel):
    id: int
    buyer_id: int
    total_amount: Decimal
    status: OrderStatus
    shipping_address: str
    created_at: datetime | None = None
    buyer: UserSummary | None = None


class SellerOrderItemOut(BaseModel):
    """One sold line, seen from the seller side."""

    id: int
    order_id: int
    product_id: int
    seller_id: int
    quantity: int
    price: Decimal
    product: OrderItemProductOut | None = None
    order: SellerOrderRef


class SellerOrderPage(BaseModel):
    rows: List[SellerOrderItemOut]
    total: int
    page: int
    page_size: int
    total_pages: int
