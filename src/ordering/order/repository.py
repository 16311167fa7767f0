"""Repository for the Order aggregate."""

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_order_number(self, order_number) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None
