# marketplace/services/checkout_service.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Tuple

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel, ProductStatus
from marketplace.domain.errors import (
    Conflict,
    EmptyCart,
    InsufficientQuantity,
    MarketplaceError,
    ProductNotFound,
    ProductUnavailable,
    StockConflict,
    ValidationError,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.contracts import CartStore, CatalogStore, OrderStore
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.lock_service import LockService, new_lock_token
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import order_to_dict
from marketplace.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, MIN_SHIPPING_ADDRESS_LENGTH
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

TWO_PLACES = Decimal("0.01")


def compute_total(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    """
    Exact sum of price * quantity, rounded once at the end (half up, 2 places).
    Lines are never rounded on their own.
    """
    total = sum((Decimal(price) * quantity for price, quantity in lines), Decimal("0"))
    return total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def check_available(product: ProductModel, quantity: int):
    """
    Raises when `quantity` units of `product` cannot be bought right now.
    A sold out product is reported as out of stock, any other non-active
    status as unavailable.
    """
    if product.status == ProductStatus.SOLD_OUT.value and product.quantity < quantity:
        raise InsufficientQuantity(product.id, product.title, quantity, product.quantity)

    if product.status != ProductStatus.ACTIVE.value:
        raise ProductUnavailable(product.id, product.title)

    if product.quantity < quantity:
        raise InsufficientQuantity(product.id, product.title, quantity, product.quantity)


class CheckoutService:
    """
    Turns the buyer's cart into an order in one transaction:
    order + order items inserted, stock decremented, cart emptied.
    Either all of it commits or the session is rolled back and nothing changed.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notifier: NotificationService,
        products: CatalogStore | None = None,
        carts: CartStore | None = None,
        orders: OrderStore | None = None,
        lock_ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
    ):
        self.db = db
        self.lock_service = lock_service
        self.notifier = notifier
        self.products = products or ProductRepo(db)
        self.carts = carts or CartRepo(db)
        self.orders = orders or OrderRepo(db)
        self.users = UserRepo(db)
        self.lock_ttl = lock_ttl

    @staticmethod
    def _validate_address(shipping_address: str) -> str:
        address = (shipping_address or "").strip()
        if len(address) < MIN_SHIPPING_ADDRESS_LENGTH:
            raise ValidationError(
                f"shipping_address must be at least {MIN_SHIPPING_ADDRESS_LENGTH} characters",
                data={"shipping_address": "too short"},
            )
        return address

    def checkout(self, buyer_id: int, shipping_address: str) -> Dict[str, Any]:
        address = self._validate_address(shipping_address)

        # one checkout per buyer at a time, a double submit gets 409 instead of racing itself
        token = new_lock_token()
        if not self.lock_service.acquire_checkout_lock(buyer_id, token, self.lock_ttl):
            logger.warning(f"Checkout already running for buyer {buyer_id}")
            raise Conflict("Checkout already in progress, retry shortly")

        try:
            order, seller_ids = self._place_order(buyer_id, address)
        finally:
            try:
                self.lock_service.release_checkout_lock(buyer_id, token)
            except RedisError as e:
                # the TTL frees it anyway
                logger.warning(f"Failed to release checkout lock for buyer {buyer_id}: {e}")

        try:
            self.notifier.order_placed(buyer_id, order["id"], seller_ids)
        except Exception as e:
            # the order is committed, a lost notification must not turn it into an error
            logger.warning(f"Order {order['id']} committed but notification dispatch failed: {e}")

        return order

    def _place_order(self, buyer_id: int, address: str) -> Tuple[Dict[str, Any], set]:
        logger.info(f"Checkout started for buyer {buyer_id}")

        try:
            lines = self.carts.list_by_user(buyer_id, for_update=True)
            if not lines:
                raise EmptyCart()

            # exactly what is being ordered, only these rows leave the cart
            read_lines = {item.id: item.quantity for item, _ in lines}

            # re-read the products under a row lock, the joined snapshot may already be stale
            live = self.products.lock_many([item.product_id for item, _ in lines])

            order_lines = []
            for item, _ in lines:
                product = live.get(item.product_id)

                if product is None:
                    raise ProductNotFound(item.product_id)

                check_available(product, read_lines[item.id])

                order_lines.append(
                    {
                        "product_id": product.id,
                        "seller_id": product.seller_id,
                        "quantity": read_lines[item.id],
                        "price": product.price,
                        "title": product.title,
                    }
                )

            total = compute_total((line["price"], line["quantity"]) for line in order_lines)

            order, order_items = self.orders.create(buyer_id, total, address, order_lines)

            for line in order_lines:
                if self.products.decrement_stock(line["product_id"], line["quantity"]) is None:
                    raise StockConflict(line["product_id"], line["title"])

            if self.carts.delete_lines(buyer_id, read_lines) != len(read_lines):
                raise Conflict("Cart changed during checkout, reload it and retry")

            seller_ids = {line["seller_id"] for line in order_lines}
            titles = {line["product_id"]: line["title"] for line in order_lines}
            result = order_to_dict(order, order_items, titles, self.users.get_many(list(seller_ids)))

            self.db.commit()

        except MarketplaceError as e:
            self.db.rollback()
            logger.warning(f"Checkout rejected for buyer {buyer_id}: {e.type} {e.message}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Checkout for buyer {buyer_id} rolled back: {e}")
            raise

        logger.info(
            f"Order {result['id']} placed by buyer {buyer_id}, "
            f"{len(order_lines)} lines, total {total}"
        )
        return result, seller_ids
