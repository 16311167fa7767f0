"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartItemAdded:
    """A product was added to a cart, or its quantity was increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    quantity = Integer(required=True)
    product_price = Float(required=True)


@ordering.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A product line was removed from a cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.event(part_of="Cart")
class CartCleared:
    """All lines were removed from a cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    items_removed = Integer(required=True)


@ordering.event(part_of="Cart")
class GuestCartMerged:
    """A guest cart's lines were folded into a user's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    guest_id = String(required=True, max_length=100)
    items_merged = Integer(required=True)
