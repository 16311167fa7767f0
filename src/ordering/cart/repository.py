"""Repository for the Cart aggregate."""

from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, CartItem
from ordering.domain import ordering


@ordering.repository(part_of=Cart)
class CartRepository:
    def find_by_owner(self, owner_id, kind=None) -> Cart | None:
        """Return the owner's cart, or None if they have never had one.

        With ``kind`` set, a cart of the other kind is treated as absent.
        """
        filters = {"owner_id": str(owner_id)}
        if kind:
            filters["kind"] = kind
        carts = self._dao.query.filter(**filters).all().items
        return carts[0] if carts else None

    def remove(self, cart: Cart) -> None:
        """Delete the cart along with its lines."""
        lines = current_domain.repository_for(CartItem)._dao
        for item in list(cart.items):
            lines.delete(item)
        self._dao.delete(cart)
