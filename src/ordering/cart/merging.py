"""Folding a guest cart into a user's cart."""

from ordering.cart.cart import Cart, CartKind
from shared.errors import BadRequest


def merge_guest_cart(guest_cart: Cart | None, user_cart: Cart | None, user_id) -> Cart:
    """Return the user's cart with the guest lines merged in.

    When the user has no cart yet, a new one is created carrying the
    guest lines. The caller persists the result and deletes the guest cart.
    """
    if guest_cart is None or guest_cart.is_empty:
        raise BadRequest("Guest cart is empty or not found", field="guest_id")

    if user_cart is None:
        user_cart = Cart.create(owner_id=user_id, kind=CartKind.USER.value)

    user_cart.absorb(guest_cart.owner_id, guest_cart.snapshot())
    return user_cart
