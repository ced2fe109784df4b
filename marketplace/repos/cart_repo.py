# marketplace/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.product import ProductModel


class CartRepo:
    """
    Thin keyed table of cart lines, at most one row per (user_id, product_id).
    Nothing here commits, the service decides where the transaction ends.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_by_user(
        self, user_id: int, for_update: bool = False
    ) -> list[tuple[CartItemModel, ProductModel]]:
        #cart line = CartItem joined with its current product row
        stmt = (
            select(CartItemModel, ProductModel)
            .join(ProductModel, ProductModel.id == CartItemModel.product_id)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
        )
        if for_update:
            # only the cart rows, products are locked separately in id order
            stmt = stmt.with_for_update(of=CartItemModel)
        return [(item, product) for item, product in self.db.execute(stmt).all()]

    def get_by_product(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_owned(self, item_id: int, user_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def upsert(self, user_id: int, product_id: int, quantity: int) -> CartItemModel:
        existing = self.get_by_product(user_id, product_id)

        if existing:
            existing.quantity += quantity
            self.db.flush()
            return existing

        item = CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity)
        self.db.add(item)
        self.db.flush()
        return item

    def set_quantity(self, item_id: int, user_id: int, quantity: int) -> CartItemModel | None:
        item = self.get_owned(item_id, user_id)
        if item:
            item.quantity = quantity
            self.db.flush()
        return item

    def delete_by_id(self, item_id: int, user_id: int) -> bool:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.user_id == user_id,
            )
        )
        return result.rowcount > 0

    def delete_by_user(self, user_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.user_id == user_id)
        )
        return result.rowcount

    def delete_lines(self, user_id: int, lines: dict[int, int]) -> int:
        """
        Deletes exactly the given lines ({item_id: quantity}).
        A line whose quantity changed since it was read is left in place,
        so the returned count is lower than len(lines).
        """
        removed = 0
        for item_id, quantity in lines.items():
            result = self.db.execute(
                delete(CartItemModel).where(
                    CartItemModel.id == item_id,
                    CartItemModel.user_id == user_id,
                    CartItemModel.quantity == quantity,
                )
            )
            removed += result.rowcount
        return removed
