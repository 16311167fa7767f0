"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import Cart
from ordering.checkout.pricing import PricingPolicy, price_subtotal
from ordering.order.order import Order
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for the domain error raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Run an operation, keeping the domain error it raises in ``error``."""

    def _attempt(operation, *args, **kwargs):
        try:
            operation(*args, **kwargs)
        except (ValidationError, ObjectNotFoundError) as exc:
            error["exc"] = exc

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an empty cart for "{owner_id}"'), target_fixture="cart")
def empty_cart(owner_id):
    return Cart.create(owner_id=owner_id)


@given("a pending order", target_fixture="order")
def pending_order(shipping_address):
    lines = [
        {
            "product_id": "prod-mug",
            "product_name": "Coffee Mug",
            "product_price": 12.5,
            "product_thumbnail": "",
            "quantity": 2,
            "total_price": 25.0,
        }
    ]
    return Order.place(
        order_number="ORD-1700000000000-001",
        owner_id="user-001",
        lines=lines,
        shipping_address=shipping_address,
        pricing=price_subtotal(25.0, PricingPolicy()),
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart operation fails with "{message}"'))
def cart_operation_failed(error, message):
    assert error["exc"] is not None
    assert message in error["exc"].message


@then(parsers.cfparse('the order operation fails with "{message}"'))
def order_operation_failed(error, message):
    assert error["exc"] is not None
    assert message in error["exc"].message
