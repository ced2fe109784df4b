# marketplace/api/routers/orders.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import Pagination, get_current_user, get_lock_service, get_notifier
from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    CheckoutIn,
    CurrentUser,
    OrderOut,
    OrderPage,
    SellerOrderPage,
)
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_checkout_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notifier: NotificationService = Depends(get_notifier),
) -> CheckoutService:
    return CheckoutService(db=db, lock_service=lock_service, notifier=notifier)


def get_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: CheckoutIn,
    user: CurrentUser = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Places an order from the caller's cart.
    Stock is decremented and the cart emptied in the same transaction.
    """
    return svc.checkout(user.id, payload.shipping_address)


@router.get("", response_model=OrderPage)
def list_orders(
    paging: Pagination = Depends(),
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(user.id, paging.page, paging.page_size)


# declared before /{order_id} so "seller" is not parsed as an id
@router.get("/seller", response_model=SellerOrderPage)
def seller_orders(
    paging: Pagination = Depends(),
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_service),
):
    """
    Items sold by the caller, each with its order and buyer.
    """
    return svc.list_seller_orders(user.id, paging.page, paging.page_size)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: OrderService = Depends(get_service),
):
    return svc.get_order(order_id, user.id)
