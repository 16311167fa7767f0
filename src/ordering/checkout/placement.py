"""Checkout: converting a cart into an order.

Both flows run inside a single unit of work, so the new order and the
cleared (or deleted) cart are committed together. An account registered
during guest checkout is removed again when the order cannot be placed.
"""

import json

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.accounts import get_account_directory
from ordering.cart.cart import Cart, CartKind
from ordering.cart.guest import require_guest_id
from ordering.cart.merging import merge_guest_cart
from ordering.checkout.pricing import PricingPolicy, price_subtotal
from ordering.domain import logger, ordering
from ordering.order.numbering import insert_with_order_number
from ordering.order.order import Order
from shared.errors import BadRequest, EmptyCart
from shared.settings import get_settings


@ordering.command(part_of="Order")
class PlaceOrder:
    owner_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    payment_method = String(max_length=50)
    notes = String(max_length=1000)


@ordering.command(part_of="Order")
class GuestCheckout:
    guest_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: ShippingAddress fields
    payment_method = String(max_length=50)
    notes = String(max_length=1000)
    create_account = Boolean(default=False)
    username = String(max_length=100)
    password = String(max_length=72)


def _order_from_cart(cart: Cart, owner_id, shipping_address, payment_method, notes) -> Order:
    if cart is None or cart.is_empty:
        raise EmptyCart()

    settings = get_settings()
    orders = current_domain.repository_for(Order)
    pricing = price_subtotal(cart.total_amount, PricingPolicy.from_settings(settings))

    def insert(order_number):
        order = Order.place(
            order_number=order_number,
            owner_id=owner_id,
            lines=cart.snapshot(),
            shipping_address=shipping_address,
            pricing=pricing,
            payment_method=payment_method,
            notes=notes,
        )
        orders.add(order)
        return order

    return insert_with_order_number(insert, attempts=settings.order_number_attempts)


def _load_address(raw):
    address = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(address, dict):
        raise BadRequest("Shipping address must be an object", field="shipping_address")
    return address


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        carts = current_domain.repository_for(Cart)
        cart = carts.find_by_owner(command.owner_id, kind=CartKind.USER.value)

        order = _order_from_cart(
            cart,
            owner_id=command.owner_id,
            shipping_address=_load_address(command.shipping_address),
            payment_method=command.payment_method,
            notes=command.notes,
        )

        # Cleared only once the order is in place
        cart.clear()
        carts.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            owner_id=str(command.owner_id),
            total_amount=order.total_amount,
        )
        return str(order.id)


@ordering.command_handler(part_of=Order)
class GuestCheckoutHandler:
    @handle(GuestCheckout)
    def guest_checkout(self, command):
        """Check out a guest cart, optionally registering the guest first.

        With ``create_account`` the guest lines are merged into a cart for
        the new account and the order belongs to that account. The account
        is removed again if the order cannot be placed.

        Returns a dict with the new ``order_id`` and, when an account was
        created, its ``user_id``.
        """
        guest_id = require_guest_id(command.guest_id)
        carts = current_domain.repository_for(Cart)
        guest_cart = carts.find_by_owner(guest_id, kind=CartKind.GUEST.value)
        if guest_cart is None:
            raise BadRequest("Guest cart not found. Please add items to cart first.", field="guest_id")
        if guest_cart.is_empty:
            raise EmptyCart()

        address = _load_address(command.shipping_address)

        if not command.create_account:
            order = self._place(guest_cart, guest_id, address, command)
            carts.remove(guest_cart)
            self._log(order, guest_id)
            return {"order_id": str(order.id), "user_id": None}

        if not command.username or not command.password:
            raise BadRequest("Username and password are required to create an account", field="account")

        directory = get_account_directory()
        user_id = directory.register(
            username=command.username,
            email=address.get("email"),
            password=command.password,
        )
        try:
            # A freshly registered account has no cart of its own, and the
            # merged lines all go into the order, so the merged cart is not kept.
            merged = merge_guest_cart(guest_cart, None, user_id)
            order = self._place(merged, user_id, address, command)
            carts.remove(guest_cart)
        except Exception:
            directory.unregister(user_id)
            logger.warning("Guest checkout failed, account removed", guest_id=guest_id, user_id=user_id)
            raise

        self._log(order, guest_id, user_id)
        return {"order_id": str(order.id), "user_id": user_id}

    @staticmethod
    def _place(cart, owner_id, address, command):
        return _order_from_cart(
            cart,
            owner_id=owner_id,
            shipping_address=address,
            payment_method=command.payment_method,
            notes=command.notes,
        )

    @staticmethod
    def _log(order, guest_id, user_id=None):
        logger.info(
            "Guest order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            guest_id=guest_id,
            user_id=user_id,
        )
