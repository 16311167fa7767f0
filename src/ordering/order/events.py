"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    owner_id = Identifier(required=True)
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    tax = Float(required=True)
    total_amount = Float(required=True)
    total_items = Integer(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    payment_status = String(max_length=50)
    forced = Boolean(default=False)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The owner cancelled a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)
