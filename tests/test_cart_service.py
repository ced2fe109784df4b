from decimal import Decimal

import pytest

from marketplace.domain.errors import (
    CartItemNotFound,
    InsufficientQuantity,
    ProductNotFound,
    ProductUnavailable,
    ValidationError,
)
from marketplace.services.cart_service import CartService


@pytest.fixture()
def service(db):
    return CartService(db)


def test_empty_cart(service, buyer):
    assert service.get_cart(buyer.id) == {"items": [], "total": Decimal("0.00"), "count": 0}


def test_add_item_returns_cart(service, buyer, seller, make_product):
    product = make_product(title="Lamp", price="12.50", quantity=4)

    cart = service.add_item(buyer.id, product.id, 2)

    assert cart["count"] == 1
    assert cart["total"] == Decimal("25.00")
    line = cart["items"][0]
    assert line["product_id"] == product.id
    assert line["quantity"] == 2
    assert line["product"]["title"] == "Lamp"
    assert line["product"]["seller_id"] == seller.id


def test_adding_same_product_increments_line(service, buyer, make_product):
    product = make_product(quantity=10)

    service.add_item(buyer.id, product.id, 2)
    cart = service.add_item(buyer.id, product.id, 3)

    assert cart["count"] == 1
    assert cart["items"][0]["quantity"] == 5


def test_increment_checks_total_line_quantity(service, buyer, make_product):
    product = make_product(quantity=4)
    service.add_item(buyer.id, product.id, 3)

    with pytest.raises(InsufficientQuantity):
        service.add_item(buyer.id, product.id, 2)

    assert service.get_cart(buyer.id)["items"][0]["quantity"] == 3


def test_add_rejects_inactive_product(service, buyer, make_product):
    product = make_product(status="inactive")

    with pytest.raises(ProductUnavailable):
        service.add_item(buyer.id, product.id, 1)


def test_add_rejects_missing_product(service, buyer):
    with pytest.raises(ProductNotFound):
        service.add_item(buyer.id, 12345, 1)


def test_add_rejects_non_positive_quantity(service, buyer, make_product):
    with pytest.raises(ValidationError):
        service.add_item(buyer.id, make_product().id, 0)


def test_update_item(service, buyer, make_product):
    product = make_product(quantity=5)
    item_id = service.add_item(buyer.id, product.id, 1)["items"][0]["id"]

    cart = service.update_item(buyer.id, item_id, 4)
    assert cart["items"][0]["quantity"] == 4

    with pytest.raises(InsufficientQuantity):
        service.update_item(buyer.id, item_id, 6)


def test_cannot_touch_someone_elses_item(service, buyer, make_user, make_product):
    intruder = make_user("Intruder")
    item_id = service.add_item(buyer.id, make_product().id, 1)["items"][0]["id"]

    with pytest.raises(CartItemNotFound):
        service.update_item(intruder.id, item_id, 2)

    with pytest.raises(CartItemNotFound):
        service.remove_item(intruder.id, item_id)

    assert service.get_cart(buyer.id)["count"] == 1


def test_remove_item(service, buyer, make_product):
    a = make_product(title="A")
    b = make_product(title="B")
    service.add_item(buyer.id, a.id, 1)
    cart = service.add_item(buyer.id, b.id, 1)
    item_a = next(i["id"] for i in cart["items"] if i["product_id"] == a.id)

    cart = service.remove_item(buyer.id, item_a)

    assert [i["product_id"] for i in cart["items"]] == [b.id]


def test_clear(service, buyer, make_user, make_product):
    other = make_user("Other")
    product = make_product()
    service.add_item(buyer.id, product.id, 1)
    service.add_item(other.id, product.id, 1)

    assert service.clear(buyer.id)["count"] == 0
    assert service.get_cart(other.id)["count"] == 1


def test_add_sold_out_product_is_out_of_stock(service, buyer, make_product):
    product = make_product(status="sold_out", quantity=0)

    with pytest.raises(InsufficientQuantity):
        service.add_item(buyer.id, product.id, 1)
