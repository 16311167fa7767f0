"""Order cancellation by its owner: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.queries import load_order
from shared.errors import NotFound


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        # Someone else's order is reported as missing
        if str(order.owner_id) != str(command.owner_id):
            raise NotFound("Order not found")

        order.cancel()
        current_domain.repository_for(Order).add(order)
        return str(order.id)
