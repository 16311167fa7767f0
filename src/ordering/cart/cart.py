"""Cart aggregate (CQRS), one per owner.

An owner is either an authenticated user id or a ``guest_<uuid>`` guest
id. Each line snapshots the product's name, price and thumbnail at the
moment it is first added, so later catalog price changes do not move
the cart's totals.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    GuestCartMerged,
)
from ordering.domain import ordering
from shared.errors import BadRequest, NotFound
from shared.money import money_equal, to_money


class CartKind(Enum):
    USER = "user"
    GUEST = "guest"


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_price = Float(required=True, min_value=0.0)
    product_thumbnail = String(max_length=1000, default="")
    quantity = Integer(required=True, min_value=1)
    total_price = Float(required=True, min_value=0.0)

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "product_price": self.product_price,
            "product_thumbnail": self.product_thumbnail or "",
            "quantity": self.quantity,
            "total_price": self.total_price,
        }


def _line_total(price, quantity):
    return to_money(price * quantity)


@ordering.aggregate
class Cart:
    owner_id = Identifier(required=True, unique=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)
    items = HasMany(CartItem)
    total_amount = Float(default=0.0, min_value=0.0)
    total_items = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_match_items(self):
        items = self.items or []
        if self.total_items != sum(item.quantity for item in items):
            raise ValidationError({"total_items": ["Cart item count does not match its lines"]})
        if not money_equal(self.total_amount, sum(item.total_price for item in items)):
            raise ValidationError({"total_amount": ["Cart total does not match its lines"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id, kind=CartKind.USER.value):
        now = datetime.now(UTC)
        return cls(
            owner_id=owner_id,
            kind=kind,
            total_amount=0.0,
            total_items=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_empty(self):
        return not self.items

    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def snapshot(self):
        """Deep copy of the lines as plain dicts."""
        return [item.to_dict() for item in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, product_name, product_price, quantity, product_thumbnail=""):
        """Add a product, or increase the quantity of an existing line.

        An existing line keeps the price captured when it was first added.
        """
        self._require_positive(quantity)
        existing = self.find_item(product_id)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                existing.total_price = _line_total(existing.product_price, existing.quantity)
                line = existing
            else:
                line = CartItem(
                    product_id=product_id,
                    product_name=product_name,
                    product_price=to_money(product_price),
                    product_thumbnail=product_thumbnail or "",
                    quantity=quantity,
                    total_price=_line_total(product_price, quantity),
                )
                self.add_items(line)
            self._recalculate()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(product_id),
                quantity_added=quantity,
                quantity=line.quantity,
                product_price=line.product_price,
            )
        )

    def update_item(self, product_id, quantity):
        """Set a line's quantity."""
        self._require_positive(quantity)
        item = self._require_item(product_id)

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            item.total_price = _line_total(item.product_price, quantity)
            self._recalculate()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self._require_item(product_id)

        with atomic_change(self):
            self.remove_items(item)
            self._recalculate()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        """Empty the cart. Clearing an already empty cart is allowed."""
        lines = list(self.items)

        with atomic_change(self):
            for item in lines:
                self.remove_items(item)
            self._recalculate()

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                items_removed=len(lines),
            )
        )

    # -------------------------------------------------------------------
    # Guest merge
    # -------------------------------------------------------------------
    def absorb(self, guest_id, guest_lines):
        """Fold guest lines into this cart.

        Quantities of products already present are summed and priced at
        this cart's captured price. New products are copied as they are.
        """
        with atomic_change(self):
            for line in guest_lines:
                existing = self.find_item(line["product_id"])
                if existing:
                    existing.quantity += line["quantity"]
                    existing.total_price = _line_total(existing.product_price, existing.quantity)
                else:
                    self.add_items(
                        CartItem(
                            product_id=line["product_id"],
                            product_name=line["product_name"],
                            product_price=line["product_price"],
                            product_thumbnail=line.get("product_thumbnail") or "",
                            quantity=line["quantity"],
                            total_price=_line_total(line["product_price"], line["quantity"]),
                        )
                    )
            self._recalculate()

        self.raise_(
            GuestCartMerged(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                guest_id=str(guest_id),
                items_merged=len(guest_lines),
            )
        )

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _recalculate(self):
        items = self.items or []
        self.total_items = sum(item.quantity for item in items)
        self.total_amount = to_money(sum(item.total_price for item in items))
        self.updated_at = datetime.now(UTC)

    def _require_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            raise NotFound("Product not found in cart")
        return item

    @staticmethod
    def _require_positive(quantity):
        if quantity is None or quantity < 1:
            raise BadRequest("Quantity must be at least 1", field="quantity")
