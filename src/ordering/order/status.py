"""Administrative status updates: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.queries import load_order


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    payment_status = String(max_length=50)
    notes = String(max_length=1000)
    force = Boolean(default=False)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        order.update_status(
            status=command.status,
            payment_status=command.payment_status,
            notes=command.notes,
            force=bool(command.force),
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
