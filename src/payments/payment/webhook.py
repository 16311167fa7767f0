"""Stripe webhook processing: command and handler.

Only PaymentIntent outcomes are acted upon. Anything else, and events for
intents this service never created, are logged and acknowledged so that
Stripe stops redelivering them.
"""

from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway import get_provider
from payments.gateway.port import GatewayError, ProviderOutcome
from payments.gateway.stripe_adapter import stripe_field
from payments.payment.confirmation import reconcile
from payments.payment.payment import Payment
from shared.errors import InvalidSignature

PROCESSED = "processed"
IGNORED = "ignored"


def _succeeded(intent) -> ProviderOutcome:
    return ProviderOutcome(status="completed", transaction_id=stripe_field(intent, "latest_charge"))


def _payment_failed(intent) -> ProviderOutcome:
    error = stripe_field(intent, "last_payment_error")
    return ProviderOutcome(status="failed", failure_reason=stripe_field(error, "message") or "Payment failed")


def _canceled(intent) -> ProviderOutcome:
    return ProviderOutcome(status="cancelled", failure_reason="Payment cancelled")


def _processing(intent) -> ProviderOutcome:
    return ProviderOutcome(status="processing")


STRIPE_EVENT_OUTCOMES = {
    "payment_intent.succeeded": _succeeded,
    "payment_intent.payment_failed": _payment_failed,
    "payment_intent.canceled": _canceled,
    "payment_intent.processing": _processing,
}


@payments.command(part_of="Payment")
class ProcessStripeWebhook:
    raw_body = Text(required=True)  # Request body, byte for byte
    signature = String(max_length=1000, default="")


@payments.command_handler(part_of=Payment)
class StripeWebhookHandler:
    @handle(ProcessStripeWebhook)
    def process_stripe_webhook(self, command):
        provider = get_provider("stripe")
        try:
            event = provider.parse_webhook(command.raw_body, command.signature or "")
        except GatewayError as exc:
            logger.warning("Rejected Stripe webhook", error=str(exc))
            raise InvalidSignature("Webhook signature verification failed", str(exc)) from exc

        to_outcome = STRIPE_EVENT_OUTCOMES.get(event.type)
        if to_outcome is None:
            logger.info("Unhandled Stripe event type", event_type=event.type)
            return IGNORED

        intent_id = stripe_field(event.data, "id")
        repo = current_domain.repository_for(Payment)
        payment = repo.find_by_intent(intent_id) if intent_id else None
        if payment is None:
            logger.warning("Stripe webhook for unknown payment intent", event_type=event.type, intent_id=intent_id)
            return IGNORED

        if not reconcile(payment, to_outcome(event.data)):
            return IGNORED
        return PROCESSED
