"""Read side for carts."""

from protean.utils.globals import current_domain

from ordering.cart.cart import Cart


def cart_for(owner_id, kind=None) -> Cart | None:
    return current_domain.repository_for(Cart).find_by_owner(owner_id, kind=kind)


def item_count(owner_id, kind=None) -> int:
    """Total quantity across the owner's cart, 0 when there is no cart."""
    cart = cart_for(owner_id, kind=kind)
    return cart.total_items if cart else 0
