"""Cart management: lazy creation, clearing and guest merge."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart, CartKind
from ordering.cart.guest import require_guest_id
from ordering.cart.items import check_owner, require_cart
from ordering.cart.merging import merge_guest_cart
from ordering.domain import logger, ordering


@ordering.command(part_of="Cart")
class GetOrCreateCart:
    """Return the owner's cart id, creating an empty cart if needed."""

    owner_id = Identifier(required=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)


@ordering.command(part_of="Cart")
class ClearCart:
    owner_id = Identifier(required=True)
    kind = String(choices=CartKind, default=CartKind.USER.value)


@ordering.command(part_of="Cart")
class MergeGuestCart:
    """Move a guest cart's lines into an authenticated user's cart."""

    guest_id = Identifier(required=True)
    user_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(GetOrCreateCart)
    def get_or_create_cart(self, command):
        check_owner(command.owner_id, command.kind)
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_owner(command.owner_id, kind=command.kind)
        if cart is None:
            cart = Cart.create(owner_id=command.owner_id, kind=command.kind)
            repo.add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = require_cart(repo, command.owner_id, command.kind)
        cart.clear()
        repo.add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        require_guest_id(command.guest_id)
        repo = current_domain.repository_for(Cart)
        guest_cart = repo.find_by_owner(command.guest_id, kind=CartKind.GUEST.value)
        user_cart = merge_guest_cart(
            guest_cart,
            repo.find_by_owner(command.user_id, kind=CartKind.USER.value),
            command.user_id,
        )

        repo.add(user_cart)
        repo.remove(guest_cart)

        logger.info(
            "Guest cart merged",
            guest_id=str(command.guest_id),
            user_id=str(command.user_id),
            total_items=user_cart.total_items,
        )
        return str(user_cart.id)
