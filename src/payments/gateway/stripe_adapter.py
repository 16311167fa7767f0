"""Stripe adapter, built on the stripe-python SDK.

Payments are PaymentIntents with automatic payment methods. Amounts are
sent in minor units. Webhook payloads are authenticated against the
endpoint secret with ``stripe.WebhookSignature``.
"""

import json

import stripe
import structlog

from payments.gateway.port import (
    GatewayError,
    PaymentProvider,
    PaymentRequest,
    ProviderOutcome,
    ProviderPayment,
    RefundRequest,
    RefundResult,
    SignatureMismatch,
    WebhookEvent,
)
from shared.money import to_minor_units

logger = structlog.get_logger(__name__)

WEBHOOK_TOLERANCE_SECONDS = 300


def stripe_field(obj, name):
    """Read a field from a StripeObject or from decoded webhook JSON."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def outcome_for_intent(intent) -> ProviderOutcome:
    """Translate a PaymentIntent's status into a payment outcome."""
    status = stripe_field(intent, "status")
    if status == "succeeded":
        return ProviderOutcome(status="completed", transaction_id=stripe_field(intent, "latest_charge"))
    if status == "requires_payment_method":
        return ProviderOutcome(status="failed", failure_reason="Payment method required")
    if status == "canceled":
        return ProviderOutcome(status="cancelled", failure_reason="Payment cancelled")
    if status == "processing":
        return ProviderOutcome(status="processing")
    return ProviderOutcome(status="pending")


class StripeProvider(PaymentProvider):
    method = "stripe"
    label = "Stripe"

    def __init__(self, secret_key: str, webhook_secret: str = "", timeout: float = 10.0) -> None:
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    def create(self, request: PaymentRequest) -> ProviderPayment:
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.secret_key,
                amount=to_minor_units(request.amount),
                currency=request.currency.lower(),
                metadata={"orderId": request.order_id, "userId": request.user_id},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or str(exc)) from exc

        logger.info("Stripe payment intent created", intent_id=intent.id, order_id=request.order_id)
        return ProviderPayment(reference=intent.id, client_secret=intent.client_secret)

    def confirm(self, reference: str) -> ProviderOutcome:
        try:
            intent = stripe.PaymentIntent.retrieve(reference, api_key=self.secret_key)
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or str(exc)) from exc
        return outcome_for_intent(intent)

    def refund(self, request: RefundRequest) -> RefundResult:
        try:
            refund = stripe.Refund.create(
                api_key=self.secret_key,
                payment_intent=request.reference,
                amount=to_minor_units(request.amount),
            )
        except stripe.StripeError as exc:
            raise GatewayError(exc.user_message or str(exc)) from exc
        return RefundResult(refund_id=refund.id, status=stripe_field(refund, "status"))

    def parse_webhook(self, payload: str, signature: str) -> WebhookEvent:
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        if not self.webhook_secret:
            raise SignatureMismatch("Stripe webhook secret is not configured")
        if not signature:
            raise SignatureMismatch("Missing Stripe-Signature header")

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature,
                self.webhook_secret,
                tolerance=WEBHOOK_TOLERANCE_SECONDS,
            )
        except stripe.SignatureVerificationError as exc:
            raise SignatureMismatch(str(exc)) from exc

        try:
            event = json.loads(payload)
        except ValueError as exc:
            raise SignatureMismatch("Invalid payload") from exc

        return WebhookEvent(type=event.get("type", ""), data=(event.get("data") or {}).get("object") or {})
