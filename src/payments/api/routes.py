"""FastAPI routes for the Payments domain."""

from fastapi import APIRouter, Depends, Header, Request
from protean.utils.globals import current_domain

from payments.api.schemas import (
    ConfirmPayPalPaymentRequest,
    ConfirmStripePaymentRequest,
    CreatePaymentRequest,
    PaymentResponse,
    PayPalPaymentResponse,
    RefundPaymentRequest,
    StripePaymentResponse,
    WebhookAckResponse,
)
from payments.payment.confirmation import ConfirmPayPalPayment, ConfirmStripePayment
from payments.payment.creation import CreatePayment
from payments.payment.payment import PaymentMethod
from payments.payment.queries import get_payment, payments_for_order, payments_for_user
from payments.payment.refund import RefundPayment
from payments.payment.webhook import ProcessStripeWebhook
from shared.errors import BadRequest, Forbidden
from shared.http import ADMIN_ROLE, current_user_id, require_admin

payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _create(body: CreatePaymentRequest, user_id: str, method: PaymentMethod):
    payment_id = _process(
        CreatePayment(
            order_id=body.order_id,
            user_id=user_id,
            payment_method=method.value,
            amount=body.amount,
            currency=body.currency,
            success_url=body.success_url,
            cancel_url=body.cancel_url,
        )
    )
    return get_payment(payment_id)


def _assert_can_read(owner_id, user_id: str, role: str) -> None:
    if str(owner_id) != user_id and role.lower() != ADMIN_ROLE:
        raise Forbidden("You do not have access to these payments")


@payment_router.post("/stripe/create", status_code=201, response_model=StripePaymentResponse)
async def create_stripe_payment(
    body: CreatePaymentRequest, user_id: str = Depends(current_user_id)
) -> StripePaymentResponse:
    """Create a Stripe PaymentIntent for an order."""
    payment = _create(body, user_id, PaymentMethod.STRIPE)
    return StripePaymentResponse(
        payment_id=str(payment.id),
        client_secret=payment.client_secret,
        payment_intent_id=payment.payment_intent_id,
        amount=payment.amount,
        currency=payment.currency,
    )


@payment_router.post("/paypal/create", status_code=201, response_model=PayPalPaymentResponse)
async def create_paypal_payment(
    body: CreatePaymentRequest, user_id: str = Depends(current_user_id)
) -> PayPalPaymentResponse:
    """Create a PayPal order and return the buyer approval URL."""
    payment = _create(body, user_id, PaymentMethod.PAYPAL)
    return PayPalPaymentResponse(
        payment_id=str(payment.id),
        order_id=payment.paypal_order_id,
        approval_url=payment.approval_url,
        amount=payment.amount,
        currency=payment.currency,
    )


@payment_router.post("/stripe/confirm", response_model=PaymentResponse)
async def confirm_stripe_payment(
    body: ConfirmStripePaymentRequest, _: str = Depends(current_user_id)
) -> PaymentResponse:
    if not body.payment_intent_id:
        raise BadRequest("Payment intent ID is required", field="payment_intent_id")
    payment_id = _process(ConfirmStripePayment(payment_intent_id=body.payment_intent_id))
    return PaymentResponse.from_payment(get_payment(payment_id))


@payment_router.post("/paypal/confirm", response_model=PaymentResponse)
async def confirm_paypal_payment(
    body: ConfirmPayPalPaymentRequest, _: str = Depends(current_user_id)
) -> PaymentResponse:
    if not body.paypal_order_id:
        raise BadRequest("PayPal order ID is required", field="paypal_order_id")
    payment_id = _process(ConfirmPayPalPayment(paypal_order_id=body.paypal_order_id))
    return PaymentResponse.from_payment(get_payment(payment_id))


@payment_router.post("/stripe/webhook", response_model=WebhookAckResponse)
async def stripe_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookAckResponse:
    """Receive a Stripe event. The raw body is needed for signature checks."""
    payload = (await request.body()).decode("utf-8")
    status = _process(ProcessStripeWebhook(raw_body=payload, signature=stripe_signature))
    return WebhookAckResponse(status=status)


@payment_router.get("/user/{user_id}", response_model=list[PaymentResponse])
async def user_payments(
    user_id: str,
    caller_id: str = Depends(current_user_id),
    x_user_role: str = Header(default=""),
) -> list[PaymentResponse]:
    _assert_can_read(user_id, caller_id, x_user_role)
    return [PaymentResponse.from_payment(p) for p in payments_for_user(user_id)]


@payment_router.get("/order/{order_id}", response_model=list[PaymentResponse])
async def order_payments(order_id: str, _: str = Depends(require_admin)) -> list[PaymentResponse]:
    return [PaymentResponse.from_payment(p) for p in payments_for_order(order_id)]


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def payment_detail(
    payment_id: str,
    caller_id: str = Depends(current_user_id),
    x_user_role: str = Header(default=""),
) -> PaymentResponse:
    payment = get_payment(payment_id)
    _assert_can_read(payment.user_id, caller_id, x_user_role)
    return PaymentResponse.from_payment(payment)


@payment_router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: str, body: RefundPaymentRequest | None = None, _: str = Depends(require_admin)
) -> PaymentResponse:
    _process(RefundPayment(payment_id=payment_id, amount=body.amount if body else None))
    return PaymentResponse.from_payment(get_payment(payment_id))
