from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.domain.errors import (
    CartItemNotFound,
    Conflict,
    InsufficientQuantity,
    ValidationError,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.checkout_service import check_available, compute_total
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases for the calling user:
    query (get_cart) only reads,
    commands (add, update, remove, clear) change the cart and commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        lines = self.repo.list_by_user(user_id)

        items = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "quantity": item.quantity,
                "product": {
                    "id": product.id,
                    "title": product.title,
                    "price": product.price,
                    "quantity": product.quantity,
                    "status": product.status,
                    "seller_id": product.seller_id,
                    "image_url": product.image_url,
                },
            }
            for item, product in lines
        ]
        total = compute_total((product.price, item.quantity) for item, product in lines)

        return {
            "items": items,
            "total": total,
            "count": len(items),
        }

    #commands
    def add_item(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0", data={"quantity": quantity})

        product = self.products.get(product_id)
        check_available(product, quantity)

        existing = self.repo.get_by_product(user_id, product_id)
        if existing:
            # stock has to cover the whole line, not just the increment
            check_available(product, existing.quantity + quantity)
            logger.info(
                f"Product {product_id} already in cart of user {user_id}, "
                f"quantity {existing.quantity} -> {existing.quantity + quantity}"
            )
        else:
            logger.info(f"Adding product {product_id} to cart of user {user_id}")

        try:
            self.repo.upsert(user_id, product_id, quantity)
            self.db.commit()
        except IntegrityError:
            # two parallel adds of the same product both tried to insert the line
            self.db.rollback()
            logger.warning(f"Concurrent cart update for user {user_id}")
            raise Conflict("Cart was modified by another request, retry")

        return self.get_cart(user_id)

    def update_item(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0", data={"quantity": quantity})

        item = self.repo.get_owned(item_id, user_id)
        if not item:
            raise CartItemNotFound(item_id)

        product = self.products.get(item.product_id)
        if product.quantity < quantity:
            raise InsufficientQuantity(product.id, product.title, quantity, product.quantity)

        self.repo.set_quantity(item_id, user_id, quantity)
        self._commit(user_id)

        logger.info(f"Cart item {item_id} of user {user_id} set to quantity {quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, Any]:
        if not self.repo.delete_by_id(item_id, user_id):
            self.db.rollback()
            raise CartItemNotFound(item_id)

        self._commit(user_id)

        logger.info(f"Cart item {item_id} removed for user {user_id}")
        return self.get_cart(user_id)

    def clear(self, user_id: int) -> Dict[str, Any]:
        removed = self.repo.delete_by_user(user_id)
        self._commit(user_id)

        logger.info(f"Cart of user {user_id} cleared, {removed} lines removed")
        return self.get_cart(user_id)

    def _commit(self, user_id: int):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Cart update for user {user_id} rolled back")
            raise
