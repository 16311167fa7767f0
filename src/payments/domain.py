"""Payments bounded context: provider payments and their reconciliation.

Payments are created against Stripe (PaymentIntents) or PayPal (Orders v2)
and reconciled from provider confirmations and signed webhooks.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

payments = Domain(name="payments")

logger = get_logger(__name__)
