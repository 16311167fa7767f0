"""Order aggregate (CQRS).

An order is an immutable snapshot of a cart at checkout: its lines,
shipping address and pricing never change after placement. Only the
fulfillment status, payment status and notes move afterwards.

State machine:
    pending -> confirmed -> processing -> shipped -> delivered
    pending -> cancelled
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from ordering.domain import logger, ordering
from ordering.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from shared.errors import BadRequest, EmptyCart, InvalidTransition
from shared.money import money_equal, to_decimal, to_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

DEFAULT_PAYMENT_METHOD = "pending"
DEFAULT_PAYMENT_STATUS = "pending"


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(str(value).lower())
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise BadRequest(f"Invalid order status '{value}'. Expected one of: {allowed}", field="status") from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never edited."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)

    def to_dict(self):
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_price = Float(required=True, min_value=0.0)
    product_thumbnail = String(max_length=1000, default="")
    quantity = Integer(required=True, min_value=1)
    total_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    owner_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    total_items = Integer(required=True, min_value=0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(max_length=50, default=DEFAULT_PAYMENT_METHOD)
    payment_status = String(max_length=50, default=DEFAULT_PAYMENT_STATUS)
    notes = String(max_length=1000)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_components(self):
        expected = to_decimal(self.subtotal) + to_decimal(self.shipping_cost or 0) + to_decimal(self.tax or 0)
        if not money_equal(self.total_amount, expected):
            raise ValidationError({"total_amount": ["Order total must equal subtotal + shipping + tax"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        owner_id,
        lines,
        shipping_address,
        pricing,
        payment_method=None,
        notes=None,
    ):
        """Create an order from a cart snapshot.

        Args:
            order_number: Human readable, unique order number.
            owner_id: User id or guest id that owns the order.
            lines: Cart lines as dicts (see ``CartItem.to_dict``).
            shipping_address: Dict of ``ShippingAddress`` fields.
            pricing: ``OrderPricing`` computed from the cart subtotal.
        """
        if not lines:
            raise EmptyCart()

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            owner_id=owner_id,
            shipping_address=ShippingAddress(**shipping_address),
            subtotal=pricing.subtotal,
            shipping_cost=pricing.shipping_cost,
            tax=pricing.tax,
            total_amount=pricing.total_amount,
            total_items=sum(line["quantity"] for line in lines),
            status=OrderStatus.PENDING.value,
            payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
            payment_status=DEFAULT_PAYMENT_STATUS,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(OrderItem(**line))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                owner_id=str(owner_id),
                subtotal=order.subtotal,
                shipping_cost=order.shipping_cost,
                tax=order.tax,
                total_amount=order.total_amount,
                total_items=order.total_items,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(f"Cannot transition from {current.value} to {target_status.value}")

    def update_status(self, status, payment_status=None, notes=None, force=False):
        """Move the order along the state machine.

        Re-applying the current status only updates payment status and
        notes. ``force`` skips the transition check for administrative
        corrections.
        """
        target = parse_status(status)
        current = OrderStatus(self.status)

        if target != current:
            if force:
                if target not in _VALID_TRANSITIONS[current]:
                    logger.warning(
                        "Forcing order status outside the state machine",
                        order_id=str(self.id),
                        from_status=current.value,
                        to_status=target.value,
                    )
            else:
                self._assert_can_transition(target)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            if payment_status is not None:
                self.payment_status = payment_status
            if notes is not None:
                self.notes = notes
            self.total_amount = to_money(
                to_decimal(self.subtotal) + to_decimal(self.shipping_cost or 0) + to_decimal(self.tax or 0)
            )
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                payment_status=self.payment_status,
                forced=bool(force and target != current and target not in _VALID_TRANSITIONS[current]),
                changed_at=now,
            )
        )

    def cancel(self):
        """Cancel a pending order."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise InvalidTransition("Only pending orders can be cancelled")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                owner_id=str(self.owner_id),
                cancelled_at=now,
            )
        )
