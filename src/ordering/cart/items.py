"""Cart line management: commands and handler.

Carts are addressed by owner id and kind, and created lazily on first add.
Guest commands must carry a guest id.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, CartKind
from ordering.cart.guest import require_guest_id
from ordering.domain import ordering
from ordering.products import get_catalog
from shared.errors import NotFound, ProductUnavailable


@ordering.command(part_of="Cart")
class AddCartItem:
    owner_id = Identifier(required=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class UpdateCartItem:
    owner_id = Identifier(required=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="Cart")
class RemoveCartItem:
    owner_id = Identifier(required=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_cart_item(self, command):
        check_owner(command.owner_id, command.kind)
        product = get_catalog().resolve(command.product_id)
        if product is None:
            raise NotFound("Product not found")
        if not product.is_active:
            raise ProductUnavailable()

        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_owner(command.owner_id, kind=command.kind)
        if cart is None:
            cart = Cart.create(owner_id=command.owner_id, kind=command.kind)

        cart.add_item(
            product_id=product.product_id,
            product_name=product.name,
            product_price=product.price,
            product_thumbnail=product.thumbnail,
            quantity=command.quantity,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = require_cart(repo, command.owner_id, command.kind)
        cart.update_item(command.product_id, command.quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = require_cart(repo, command.owner_id, command.kind)
        cart.remove_item(command.product_id)
        repo.add(cart)
        return str(cart.id)


def check_owner(owner_id, kind) -> None:
    if kind == CartKind.GUEST.value:
        require_guest_id(owner_id)


def require_cart(repo, owner_id, kind=None) -> Cart:
    check_owner(owner_id, kind)
    cart = repo.find_by_owner(owner_id, kind=kind)
    if cart is None:
        raise NotFound("Cart not found")
    return cart
