#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_user
from marketplace.data.database import get_db
from marketplace.domain.schemas import (
    CartItemIn,
    CartItemUpdate,
    CartOut,
    CurrentUser,
)
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return svc.get_cart(user.id)


@router.post("", response_model=CartOut)
def add_item(
    payload: CartItemIn,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return svc.add_item(
        user_id=user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )


@router.put("/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    payload: CartItemUpdate,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return svc.update_item(user.id, item_id, payload.quantity)


@router.delete("/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return svc.remove_item(user.id, item_id)


@router.delete("", response_model=CartOut)
def clear_cart(
    user: CurrentUser = Depends(get_current_user),
    svc: CartService = Depends(get_service),
):
    return svc.clear(user.id)
