# marketplace/repos/product_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select, update, func, or_, case, literal
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel, ProductStatus
from marketplace.domain.errors import ProductNotFound


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def find(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get(self, product_id: int) -> ProductModel:
        product = self.find(product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product

    def lock_many(self, product_ids: Sequence[int]) -> dict[int, ProductModel]:
        """
        SELECT ... FOR UPDATE on every product, in id order so two checkouts
        touching the same products always lock them in the same sequence.
        populate_existing makes sure we see the live row, not a stale identity map copy.
        """
        if not product_ids:
            return {}

        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(sorted(set(product_ids))))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {p.id: p for p in self.db.execute(stmt).scalars().all()}

    def decrement_stock(self, product_id: int, amount: int) -> ProductModel | None:
        """
        Conditional update: quantity = quantity - amount WHERE quantity >= amount.
        Status flips to sold_out in the same statement when the result is 0.
        Returns None when the condition did not match (stock changed under us).
        """
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.quantity >= amount)
            .values(
                quantity=ProductModel.quantity - amount,
                # SET expressions see the pre-update row
                status=case(
                    (ProductModel.quantity == amount, literal(ProductStatus.SOLD_OUT.value)),
                    else_=ProductModel.status,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)

        if result.rowcount == 0:
            return None

        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one()

    def list(
        self,
        status: str | None = ProductStatus.ACTIVE.value,
        seller_id: int | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[ProductModel], int]:
        conditions = []
        if status:
            conditions.append(ProductModel.status == status)
        if seller_id:
            conditions.append(ProductModel.seller_id == seller_id)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(ProductModel.title.ilike(pattern), ProductModel.description.ilike(pattern))
            )

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*conditions)
        ).scalar_one()

        rows = self.db.execute(
            select(ProductModel)
            .where(*conditions)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()

        return list(rows), total

    def create(
        self,
        seller_id: int,
        title: str,
        price: Decimal,
        quantity: int,
        description: str = "",
        status: str = ProductStatus.ACTIVE.value,
        image_url: str | None = None,
    ) -> ProductModel:
        product = ProductModel(
            seller_id=seller_id,
            title=title,
            description=description,
            price=price,
            quantity=quantity,
            status=status,
            image_url=image_url,
        )
        self.db.add(product)
        self.db.flush()
        return product

    def get_many(self, product_ids: Sequence[int]) -> dict[int, ProductModel]:
        if not product_ids:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(list(set(product_ids))))
        ).scalars().all()
        return {p.id: p for p in rows}
