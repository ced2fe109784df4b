# marketplace/services/order_service.py
import math
from typing import Any, Dict, Iterable

from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import OrderNotFound
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def user_summary(user: UserModel | None) -> Dict[str, Any] | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def order_item_to_dict(
    item: OrderItemModel,
    titles: Dict[int, str],
    sellers: Dict[int, UserModel] | None = None,
) -> Dict[str, Any]:
    data = {
        "id": item.id,
        "order_id": item.order_id,
        "product_id": item.product_id,
        "seller_id": item.seller_id,
        "quantity": item.quantity,
        "price": item.price,
        "product": (
            {"id": item.product_id, "title": titles[item.product_id]}
            if item.product_id in titles
            else None
        ),
    }
    if sellers is not None:
        data["seller"] = user_summary(sellers.get(item.seller_id))
    return data


def order_to_dict(
    order: OrderModel,
    items: Iterable[OrderItemModel],
    titles: Dict[int, str],
    sellers: Dict[int, UserModel],
) -> Dict[str, Any]:
    return {
        "id": order.id,
        "buyer_id": order.buyer_id,
        "total_amount": order.total_amount,
        "status": order.status,
        "shipping_address": order.shipping_address,
        "created_at": order.created_at,
        "items": [order_item_to_dict(i, titles, sellers) for i in items],
    }


def page_to_dict(rows: list, total: int, page: int, page_size: int) -> Dict[str, Any]:
    return {
        "rows": rows,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }


class OrderService:
    """
    Read side of the order domain. Orders are only ever written by CheckoutService.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def _with_items(self, orders: list[OrderModel]) -> list[Dict[str, Any]]:
        items = self.repo.list_items([o.id for o in orders])

        titles = {
            pid: p.title
            for pid, p in self.products.get_many([i.product_id for i in items]).items()
        }
        sellers = self.users.get_many([i.seller_id for i in items])

        by_order: Dict[int, list[OrderItemModel]] = {o.id: [] for o in orders}
        for item in items:
            by_order[item.order_id].append(item)

        return [order_to_dict(o, by_order[o.id], titles, sellers) for o in orders]

    def get_order(self, order_id: int, buyer_id: int) -> Dict[str, Any]:
        # someone else's order looks exactly like a missing one
        order = self.repo.get_by_id(order_id, buyer_id=buyer_id)

        if not order:
            raise OrderNotFound(order_id)

        return self._with_items([order])[0]

    def list_orders(self, buyer_id: int, page: int, page_size: int) -> Dict[str, Any]:
        orders, total = self.repo.list_by_buyer(buyer_id, page=page, page_size=page_size)
        return page_to_dict(self._with_items(orders), total, page, page_size)

    def list_seller_orders(self, seller_id: int, page: int, page_size: int) -> Dict[str, Any]:
        items, total = self.repo.list_items_by_seller(seller_id, page=page, page_size=page_size)

        orders = self.repo.get_many([i.order_id for i in items])
        titles = {
            pid: p.title
            for pid, p in self.products.get_many([i.product_id for i in items]).items()
        }
        buyers = self.users.get_many([o.buyer_id for o in orders.values()])

        rows = []
        for item in items:
            order = orders[item.order_id]
            row = order_item_to_dict(item, titles)
            row["order"] = {
                "id": order.id,
                "buyer_id": order.buyer_id,
                "total_amount": order.total_amount,
                "status": order.status,
                "shipping_address": order.shipping_address,
                "created_at": order.created_at,
                "buyer": user_summary(buyers.get(order.buyer_id)),
            }
            rows.append(row)

        logger.info(f"Seller {seller_id}: {len(rows)} of {total} sold items")
        return page_to_dict(rows, total, page, page_size)
