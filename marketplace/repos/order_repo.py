# marketplace/repos/order_repo.py
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel, OrderStatus
from marketplace.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        buyer_id: int,
        total_amount: Decimal,
        shipping_address: str,
        items: Sequence[dict],
    ) -> tuple[OrderModel, list[OrderItemModel]]:
        """
        Inserts the order and its items and flushes to get ids.
        Commit/rollback belongs to the caller, so the whole checkout stays one transaction.
        """
        order = OrderModel(
            buyer_id=buyer_id,
            total_amount=total_amount,
            status=OrderStatus.PENDING.value,
            shipping_address=shipping_address,
        )
        self.db.add(order)
        self.db.flush()

        created = []
        for item in items:
            order_item = OrderItemModel(
                order_id=order.id,
                product_id=item["product_id"],
                seller_id=item["seller_id"],
                quantity=item["quantity"],
                price=item["price"],
            )
            self.db.add(order_item)
            created.append(order_item)

        self.db.flush()
        return order, created

    def get_by_id(self, order_id: int, buyer_id: int | None = None) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if buyer_id is not None:
            stmt = stmt.where(OrderModel.buyer_id == buyer_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_many(self, order_ids: Sequence[int]) -> dict[int, OrderModel]:
        if not order_ids:
            return {}
        rows = self.db.execute(
            select(OrderModel).where(OrderModel.id.in_(list(set(order_ids))))
        ).scalars().all()
        return {o.id: o for o in rows}

    def list_by_buyer(self, buyer_id: int, page: int = 1, page_size: int = 20) -> tuple[list[OrderModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(OrderModel.buyer_id == buyer_id)
        ).scalar_one()

        rows = self.db.execute(
            select(OrderModel)
            .where(OrderModel.buyer_id == buyer_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()
        return list(rows), total

    def list_items(self, order_ids: Sequence[int]) -> list[OrderItemModel]:
        if not order_ids:
            return []
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id.in_(list(set(order_ids))))
                .order_by(OrderItemModel.order_id, OrderItemModel.id)
            ).scalars().all()
        )

    def list_items_by_seller(
        self, seller_id: int, page: int = 1, page_size: int = 20
    ) -> tuple[list[OrderItemModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(OrderItemModel).where(OrderItemModel.seller_id == seller_id)
        ).scalar_one()

        rows = self.db.execute(
            select(OrderItemModel)
            .where(OrderItemModel.seller_id == seller_id)
            .order_by(OrderItemModel.created_at.desc(), OrderItemModel.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        ).scalars().all()
        return list(rows), total

    def count(self, buyer_id: int | None = None) -> int:
        stmt = select(func.count()).select_from(OrderModel)
        if buyer_id is not None:
            stmt = stmt.where(OrderModel.buyer_id == buyer_id)
        return self.db.execute(stmt).scalar_one()
