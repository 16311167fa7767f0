"""Ordering bounded context: carts, checkout and orders.

Carts (user and guest) are plain CQRS aggregates keyed by owner. Checkout
converts a cart into an immutable order snapshot and clears the cart in
the same unit of work.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

ordering = Domain(name="ordering")

logger = get_logger(__name__)
