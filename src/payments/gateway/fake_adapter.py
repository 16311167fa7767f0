"""Configurable fake payment provider for development and testing.

Simulates either provider without any external calls. Outcomes can be
configured at runtime, every call is recorded in ``calls``, and webhooks
are accepted when the signature is ``test-signature``.
"""

import json
from uuid import uuid4

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

TEST_SIGNATURE = "test-signature"


class FakeProvider(PaymentProvider):
    """Configurable fake payment provider."""

    def __init__(self, method: str = "stripe", label: str | None = None) -> None:
        self.method = method
        self.label = label or {"stripe": "Stripe", "paypal": "PayPal"}.get(method, method.title())
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.outcome = ProviderOutcome(status="completed", transaction_id="fake_txn_0001")
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Make every subsequent call succeed, or fail with ``failure_reason``."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def will_confirm(self, status: str, transaction_id=None, capture_id=None, failure_reason=None) -> None:
        """Set the outcome the next confirmations report."""
        self.outcome = ProviderOutcome(
            status=status,
            transaction_id=transaction_id,
            capture_id=capture_id,
            failure_reason=failure_reason,
        )

    def _check(self) -> None:
        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

    def create(self, request: PaymentRequest) -> ProviderPayment:
        self.calls.append({"method": "create", "request": request})
        self._check()

        reference = f"fake_{self.method}_{uuid4().hex[:12]}"
        if self.method == "paypal":
            return ProviderPayment(
                reference=reference,
                approval_url=f"https://paypal.test/checkoutnow?token={reference}",
            )
        return ProviderPayment(reference=reference, client_secret=f"{reference}_secret")

    def confirm(self, reference: str) -> ProviderOutcome:
        self.calls.append({"method": "confirm", "reference": reference})
        self._check()
        return self.outcome

    def refund(self, request: RefundRequest) -> RefundResult:
        self.calls.append({"method": "refund", "request": request})
        self._check()
        return RefundResult(refund_id=f"fake_ref_{uuid4().hex[:12]}", status="succeeded")

    def parse_webhook(self, payload: str, signature: str) -> WebhookEvent:
        self.calls.append({"method": "parse_webhook", "signature": signature})
        if signature != TEST_SIGNATURE:
            raise SignatureMismatch("No signatures found matching the expected signature for payload")

        event = json.loads(payload)
        return WebhookEvent(type=event.get("type", ""), data=(event.get("data") or {}).get("object") or {})
