"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. JSON is camelCase on the wire.
"""

from datetime import datetime

from pydantic import Field

from shared.http import ApiModel


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class CreatePaymentRequest(ApiModel):
    order_id: str
    amount: float = Field(gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    success_url: str | None = None
    cancel_url: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "orderId": "0b6a1f7e-5d3c-4a8e-9f10-2c4d6e8f0a1b",
                    "amount": 59.99,
                    "currency": "USD",
                }
            ]
        }
    }


class ConfirmStripePaymentRequest(ApiModel):
    payment_intent_id: str | None = None


class ConfirmPayPalPaymentRequest(ApiModel):
    paypal_order_id: str | None = None


class RefundPaymentRequest(ApiModel):
    amount: float | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class StripePaymentResponse(ApiModel):
    payment_id: str
    client_secret: str | None
    payment_intent_id: str
    amount: float
    currency: str


class PayPalPaymentResponse(ApiModel):
    payment_id: str
    order_id: str
    approval_url: str | None
    amount: float
    currency: str


class PaymentResponse(ApiModel):
    id: str
    order_id: str
    user_id: str
    payment_method: str
    amount: float
    currency: str
    status: str
    payment_intent_id: str | None = None
    paypal_order_id: str | None = None
    paypal_capture_id: str | None = None
    transaction_id: str | None = None
    failure_reason: str | None = None
    refund_id: str | None = None
    refunded_amount: float | None = None
    processed_at: datetime | None = None
    refunded_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentResponse":
        return cls(
            id=str(payment.id),
            order_id=str(payment.order_id),
            user_id=str(payment.user_id),
            payment_method=payment.payment_method,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status,
            payment_intent_id=payment.payment_intent_id,
            paypal_order_id=payment.paypal_order_id,
            paypal_capture_id=payment.paypal_capture_id,
            transaction_id=payment.transaction_id,
            failure_reason=payment.failure_reason,
            refund_id=payment.refund_id,
            refunded_amount=payment.refunded_amount,
            processed_at=payment.processed_at,
            refunded_at=payment.refunded_at,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class WebhookAckResponse(ApiModel):
    received: bool = True
    status: str
