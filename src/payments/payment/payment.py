"""Payment aggregate (CQRS): one payment attempt against a provider.

A payment records what the storefront asked the provider to collect and
what the provider reported back. Confirmations and webhooks can arrive
late, twice, or out of order, so outcomes are applied through
``apply_outcome``, which ignores repeats and moves that the state
machine does not allow.

State Machine:
    pending -> processing -> completed -> refunded
    pending/processing -> failed | cancelled
    failed -> processing | completed | cancelled   (buyer retried)
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from payments.domain import logger, payments
from payments.payment.events import (
    PaymentCancelled,
    PaymentCompleted,
    PaymentFailed,
    PaymentInitiated,
    PaymentProcessing,
    PaymentRefunded,
)
from shared.errors import BadRequest, InvalidState
from shared.money import to_decimal, to_money
from shared.settings import get_settings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {
        PaymentStatus.PROCESSING,
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.PROCESSING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
    PaymentStatus.FAILED: {PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.CANCELLED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.CANCELLED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@payments.aggregate
class Payment:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    amount = Float(required=True, min_value=0.01)
    currency = String(required=True, max_length=3, default="USD")
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_intent_id = String(max_length=255)
    client_secret = String(max_length=500)
    paypal_order_id = String(max_length=255)
    paypal_capture_id = String(max_length=255)
    approval_url = String(max_length=2000)
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    refund_id = String(max_length=255)
    refunded_amount = Float(min_value=0.0)
    processed_at = DateTime()
    refunded_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order_id, user_id, payment_method, amount, currency=None):
        """Create a pending payment. The provider reference is attached once
        the provider has accepted it, see ``attach``."""
        now = datetime.now(UTC)
        return cls(
            order_id=order_id,
            user_id=user_id,
            payment_method=payment_method,
            amount=to_money(amount),
            currency=(currency or get_settings().default_currency).upper(),
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

    def attach(self, reference, client_secret=None, approval_url=None):
        """Record the provider's handle for this payment."""
        if self.payment_method == PaymentMethod.STRIPE.value:
            self.payment_intent_id = reference
            self.client_secret = client_secret
        else:
            self.paypal_order_id = reference
            self.approval_url = approval_url
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentInitiated(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                user_id=str(self.user_id),
                payment_method=self.payment_method,
                amount=self.amount,
                currency=self.currency,
                provider_reference=reference,
                initiated_at=self.updated_at,
            )
        )

    @property
    def provider_reference(self):
        if self.payment_method == PaymentMethod.STRIPE.value:
            return self.payment_intent_id
        return self.paypal_order_id

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def can_transition_to(self, target: PaymentStatus) -> bool:
        return target in _VALID_TRANSITIONS.get(PaymentStatus(self.status), set())

    def apply_outcome(self, outcome) -> bool:
        """Apply a provider outcome. Returns False when it changes nothing.

        Repeats of the current status and moves the state machine does not
        allow (a failure arriving after completion, say) are ignored.
        """
        target = PaymentStatus(outcome.status)
        if target == PaymentStatus(self.status):
            return False

        if not self.can_transition_to(target):
            logger.warning(
                "Ignoring out-of-order payment outcome",
                payment_id=str(self.id),
                current_status=self.status,
                reported_status=target.value,
            )
            return False

        if target == PaymentStatus.COMPLETED:
            self.mark_completed(outcome.transaction_id, capture_id=outcome.capture_id)
        elif target == PaymentStatus.FAILED:
            self.mark_failed(outcome.failure_reason or "Payment failed")
        elif target == PaymentStatus.CANCELLED:
            self.mark_cancelled(outcome.failure_reason or "Payment cancelled")
        elif target == PaymentStatus.PROCESSING:
            self.mark_processing()
        else:
            return False
        return True

    def _assert_can_transition(self, target_status: PaymentStatus) -> None:
        if not self.can_transition_to(target_status):
            raise InvalidState(f"Cannot transition payment from {self.status} to {target_status.value}")

    def mark_processing(self) -> None:
        self._assert_can_transition(PaymentStatus.PROCESSING)
        self.status = PaymentStatus.PROCESSING.value
        self.updated_at = datetime.now(UTC)

        self.raise_(PaymentProcessing(payment_id=str(self.id), order_id=str(self.order_id)))

    def mark_completed(self, transaction_id=None, capture_id=None) -> None:
        self._assert_can_transition(PaymentStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.COMPLETED.value
        self.transaction_id = transaction_id
        if capture_id:
            self.paypal_capture_id = capture_id
        self.failure_reason = None
        self.processed_at = now
        self.updated_at = now

        self.raise_(
            PaymentCompleted(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                amount=self.amount,
                currency=self.currency,
                transaction_id=transaction_id,
                processed_at=now,
            )
        )

    def mark_failed(self, reason: str) -> None:
        self._assert_can_transition(PaymentStatus.FAILED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                reason=reason,
                failed_at=now,
            )
        )

    def mark_cancelled(self, reason: str) -> None:
        self._assert_can_transition(PaymentStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.CANCELLED.value
        self.failure_reason = reason
        self.updated_at = now

        self.raise_(
            PaymentCancelled(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                reason=reason,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def refundable_amount(self, amount=None) -> float:
        """Validate a refund request and return the amount to refund.

        ``None`` means the full amount.
        """
        if PaymentStatus(self.status) != PaymentStatus.COMPLETED:
            raise InvalidState("Only completed payments can be refunded")

        if amount is None:
            return self.amount
        if to_decimal(amount) <= 0:
            raise BadRequest("Refund amount must be greater than zero", field="amount")
        if to_decimal(amount) > to_decimal(self.amount):
            raise BadRequest("Refund amount cannot exceed the payment amount", field="amount")
        return to_money(amount)

    def record_refund(self, amount, refund_id=None) -> None:
        self._assert_can_transition(PaymentStatus.REFUNDED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.REFUNDED.value
        self.refunded_amount = to_money(amount)
        self.refund_id = refund_id
        self.refunded_at = now
        self.updated_at = now

        self.raise_(
            PaymentRefunded(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                refund_id=refund_id,
                refunded_amount=self.refunded_amount,
                refunded_at=now,
            )
        )
