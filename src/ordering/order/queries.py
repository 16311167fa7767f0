"""Read side for orders: lookups, filtered pages and statistics."""

import math
import re
from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import Order, OrderStatus
from shared.errors import BadRequest, Forbidden, NotFound
from shared.money import to_decimal, to_money

# Top-level scalar fields an order list can be sorted by
SORTABLE_FIELDS = frozenset(
    {
        "id",
        "order_number",
        "owner_id",
        "subtotal",
        "shipping_cost",
        "tax",
        "total_amount",
        "total_items",
        "status",
        "payment_method",
        "payment_status",
        "created_at",
        "updated_at",
    }
)

MAX_PAGE_SIZE = 100
_STATS_BATCH = 500


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass(frozen=True)
class OrderQuery:
    status: str | None = None
    payment_status: str | None = None
    order_number: str | None = None
    page: int = 1
    limit: int = 10
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def ordering(self) -> str:
        sort_field = _snake_case(self.sort_by or "created_at")
        if sort_field not in SORTABLE_FIELDS:
            raise BadRequest(f"Cannot sort orders by '{self.sort_by}'", field="sort_by")

        direction = (self.sort_order or "desc").lower()
        if direction not in ("asc", "desc"):
            raise BadRequest("Sort order must be 'asc' or 'desc'", field="sort_order")
        return f"-{sort_field}" if direction == "desc" else sort_field


@dataclass(frozen=True)
class OrderPage:
    items: list
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass
class OrderStats:
    total_orders: int = 0
    total_revenue: float = 0.0
    average_order_value: float = 0.0
    status_counts: dict = field(default_factory=lambda: {s.value: 0 for s in OrderStatus})
    status_revenue: dict = field(default_factory=lambda: {s.value: 0.0 for s in OrderStatus})


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound(f"Order with ID {order_id} not found") from None


def find_by_id(order_id, owner_id=None) -> Order:
    """Fetch an order. When ``owner_id`` is given, the order must belong to it."""
    order = load_order(order_id)
    if owner_id is not None and str(order.owner_id) != str(owner_id):
        raise Forbidden("You do not have access to this order")
    return order


def find_by_order_number(order_number) -> Order:
    order = current_domain.repository_for(Order).find_by_order_number(order_number)
    if order is None:
        raise NotFound(f"Order with number {order_number} not found")
    return order


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------
def _filtered(owner_id=None, status=None, payment_status=None, order_number=None):
    queryset = current_domain.repository_for(Order)._dao.query

    filters = {}
    if owner_id is not None:
        filters["owner_id"] = str(owner_id)
    if status:
        filters["status"] = status.lower()
    if payment_status:
        filters["payment_status"] = payment_status
    if order_number:
        filters["order_number__icontains"] = order_number
    return queryset.filter(**filters) if filters else queryset


def list_orders(query: OrderQuery, owner_id=None) -> OrderPage:
    page = max(int(query.page or 1), 1)
    limit = min(max(int(query.limit or 10), 1), MAX_PAGE_SIZE)

    result = (
        _filtered(owner_id, query.status, query.payment_status, query.order_number)
        .order_by(query.ordering())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return OrderPage(
        items=list(result.items),
        total=result.total,
        page=page,
        limit=limit,
        total_pages=math.ceil(result.total / limit) if result.total else 0,
    )


def list_by_owner(owner_id, query: OrderQuery | None = None) -> OrderPage:
    return list_orders(query or OrderQuery(), owner_id=owner_id)


def list_all(query: OrderQuery | None = None) -> OrderPage:
    return list_orders(query or OrderQuery())


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------
def order_stats(owner_id=None) -> OrderStats:
    """Counts and revenue per status, over one owner's orders or all of them."""
    stats = OrderStats()
    revenue = to_decimal(0)
    revenue_by_status = {s.value: to_decimal(0) for s in OrderStatus}

    offset = 0
    while True:
        result = _filtered(owner_id).order_by("created_at").offset(offset).limit(_STATS_BATCH).all()
        for order in result.items:
            stats.total_orders += 1
            stats.status_counts[order.status] = stats.status_counts.get(order.status, 0) + 1
            revenue += to_decimal(order.total_amount)
            revenue_by_status[order.status] += to_decimal(order.total_amount)

        offset += len(result.items)
        if not result.items or offset >= result.total:
            break

    stats.total_revenue = to_money(revenue)
    stats.status_revenue = {status: to_money(amount) for status, amount in revenue_by_status.items()}
    if stats.total_orders:
        stats.average_order_value = to_money(revenue / stats.total_orders)
    return stats
