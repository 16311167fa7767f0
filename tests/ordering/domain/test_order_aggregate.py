"""Tests for the Order aggregate: placement snapshot and state machine."""

import pytest
from protean.exceptions import ValidationError

from ordering.checkout.pricing import price_subtotal
from ordering.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from ordering.order.order import Order, OrderStatus
from shared.errors import BadRequest, EmptyCart, InvalidTransition

LINES = [
    {
        "product_id": "prod-mug",
        "product_name": "Coffee Mug",
        "product_price": 12.5,
        "product_thumbnail": "",
        "quantity": 2,
        "total_price": 25.0,
    },
    {
        "product_id": "prod-tee",
        "product_name": "T-Shirt",
        "product_price": 25.0,
        "product_thumbnail": "",
        "quantity": 1,
        "total_price": 25.0,
    },
]


def _order(shipping_address, status=None):
    order = Order.place(
        order_number="ORD-1700000000000-042",
        owner_id="user-001",
        lines=LINES,
        shipping_address=shipping_address,
        pricing=price_subtotal(50.0),
        payment_method="stripe",
    )
    if status:
        order.update_status(status, force=True)
    order._events.clear()
    return order


class TestOrderPlacement:
    def test_place_snapshots_lines(self, shipping_address):
        order = _order(shipping_address)
        assert len(order.items) == 2
        assert order.total_items == 3
        assert {str(i.product_id) for i in order.items} == {"prod-mug", "prod-tee"}

    def test_place_prices_order(self, shipping_address):
        order = _order(shipping_address)
        assert order.subtotal == 50.0
        assert order.shipping_cost == 10.0
        assert order.tax == 5.0
        assert order.total_amount == 65.0

    def test_place_defaults(self, shipping_address):
        order = _order(shipping_address)
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == "pending"
        assert order.payment_method == "stripe"

    def test_payment_method_defaults_to_pending(self, shipping_address):
        order = Order.place(
            order_number="ORD-1-001",
            owner_id="user-001",
            lines=LINES,
            shipping_address=shipping_address,
            pricing=price_subtotal(50.0),
        )
        assert order.payment_method == "pending"

    def test_place_captures_address(self, shipping_address):
        order = _order(shipping_address)
        assert order.shipping_address.city == "London"
        assert order.shipping_address.zip_code == "N1 9GU"

    @pytest.mark.parametrize("missing", ["phone", "state", "city"])
    def test_every_address_field_required(self, shipping_address, missing):
        shipping_address.pop(missing)
        with pytest.raises(ValidationError):
            _order(shipping_address)

    def test_place_without_lines_rejected(self, shipping_address):
        with pytest.raises(EmptyCart):
            Order.place(
                order_number="ORD-1-001",
                owner_id="user-001",
                lines=[],
                shipping_address=shipping_address,
                pricing=price_subtotal(0.0),
            )

    def test_place_raises_order_placed(self, shipping_address):
        order = Order.place(
            order_number="ORD-1-001",
            owner_id="user-001",
            lines=LINES,
            shipping_address=shipping_address,
            pricing=price_subtotal(50.0),
        )
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == "ORD-1-001"
        assert event.total_amount == 65.0

    def test_total_must_match_components(self, shipping_address):
        order = _order(shipping_address)
        with pytest.raises(ValidationError):
            order.total_amount = 1.0


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "path",
        [
            ["confirmed"],
            ["confirmed", "processing"],
            ["confirmed", "processing", "shipped"],
            ["confirmed", "processing", "shipped", "delivered"],
            ["cancelled"],
        ],
    )
    def test_allowed_paths(self, shipping_address, path):
        order = _order(shipping_address)
        for status in path:
            order.update_status(status)
        assert order.status == path[-1]

    @pytest.mark.parametrize(
        "start,target",
        [
            ("pending", "shipped"),
            ("pending", "delivered"),
            ("confirmed", "cancelled"),
            ("shipped", "processing"),
            ("delivered", "pending"),
            ("cancelled", "confirmed"),
        ],
    )
    def test_disallowed_transitions(self, shipping_address, start, target):
        order = _order(shipping_address, status=None if start == "pending" else start)
        with pytest.raises(InvalidTransition):
            order.update_status(target)

    def test_force_skips_state_machine(self, shipping_address):
        order = _order(shipping_address)
        order.update_status("delivered", force=True)

        assert order.status == "delivered"
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.forced is True

    def test_same_status_updates_payment_status_and_notes(self, shipping_address):
        order = _order(shipping_address)
        order.update_status("pending", payment_status="completed", notes="Paid by phone")

        assert order.status == "pending"
        assert order.payment_status == "completed"
        assert order.notes == "Paid by phone"

    def test_unknown_status_rejected(self, shipping_address):
        order = _order(shipping_address)
        with pytest.raises(BadRequest):
            order.update_status("teleported")

    def test_status_is_case_insensitive(self, shipping_address):
        order = _order(shipping_address)
        order.update_status("CONFIRMED")
        assert order.status == "confirmed"

    def test_status_change_event(self, shipping_address):
        order = _order(shipping_address)
        order.update_status("confirmed")

        event = order._events[-1]
        assert event.previous_status == "pending"
        assert event.new_status == "confirmed"
        assert event.forced is False


class TestCancellation:
    def test_cancel_pending(self, shipping_address):
        order = _order(shipping_address)
        order.cancel()

        assert order.status == OrderStatus.CANCELLED.value
        assert isinstance(order._events[-1], OrderCancelled)

    @pytest.mark.parametrize("status", ["confirmed", "processing", "shipped", "delivered", "cancelled"])
    def test_cancel_only_from_pending(self, shipping_address, status):
        order = _order(shipping_address, status=status)
        with pytest.raises(InvalidTransition) as exc:
            order.cancel()
        assert exc.value.message == "Only pending orders can be cancelled"
