"""Order numbers: ``ORD-<epoch millis>-<three digits>``."""

import secrets
import time
from collections.abc import Callable
from typing import TypeVar

import structlog
from protean.exceptions import ValidationError

from shared.errors import Conflict

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def generate_order_number() -> str:
    millis = int(time.time() * 1000)
    return f"ORD-{millis}-{secrets.randbelow(1000):03d}"


def insert_with_order_number(insert: Callable[[str], T], attempts: int = 5) -> T:
    """Call ``insert`` with fresh order numbers until the store accepts one.

    ``insert`` builds and persists an order under the number it is given.
    The unique constraint on ``Order.order_number`` surfaces as a
    ``ValidationError`` keyed by ``order_number``; that error triggers a new
    number. Any other error propagates. Raises ``Conflict`` once
    ``attempts`` numbers have all collided.
    """
    for attempt in range(1, attempts + 1):
        candidate = generate_order_number()
        try:
            return insert(candidate)
        except ValidationError as exc:
            if "order_number" not in exc.messages:
                raise
            logger.warning("Order number collision", order_number=candidate, attempt=attempt)

    raise Conflict("Could not allocate a unique order number, retry the checkout")
