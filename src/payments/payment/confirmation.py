"""Payment confirmation against the provider: commands and handler.

Confirming a payment that is already settled does not call the provider
again, so clients may safely retry.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway import get_provider
from payments.gateway.port import GatewayError
from payments.payment.payment import Payment, PaymentMethod, PaymentStatus
from shared.errors import NotFound, ProviderError

_SETTLED = {PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value, PaymentStatus.CANCELLED.value}


@payments.command(part_of="Payment")
class ConfirmStripePayment:
    payment_intent_id = String(required=True, max_length=255)


@payments.command(part_of="Payment")
class ConfirmPayPalPayment:
    paypal_order_id = String(required=True, max_length=255)


def reconcile(payment: Payment, outcome) -> bool:
    """Apply a provider outcome and persist it. Returns False when nothing changed.

    A completion is not recorded when another payment for the same order
    has already completed. The duplicate capture is logged for a refund.
    """
    repo = current_domain.repository_for(Payment)
    if PaymentStatus(outcome.status) == PaymentStatus.COMPLETED:
        paid = repo.completed_for_order(payment.order_id, exclude=payment.id)
        if paid is not None:
            logger.error(
                "Duplicate payment completion ignored",
                payment_id=str(payment.id),
                order_id=str(payment.order_id),
                completed_payment_id=str(paid.id),
            )
            return False

    if not payment.apply_outcome(outcome):
        return False

    repo.add(payment)
    logger.info("Payment reconciled", payment_id=str(payment.id), status=payment.status)
    return True


def _confirm(payment: Payment, error_prefix: str) -> str:
    if payment.status in _SETTLED:
        return str(payment.id)

    provider = get_provider(payment.payment_method)
    try:
        outcome = provider.confirm(payment.provider_reference)
    except GatewayError as exc:
        logger.error("Payment confirmation failed", payment_id=str(payment.id), error=str(exc))
        raise ProviderError(error_prefix, str(exc)) from exc

    reconcile(payment, outcome)
    return str(payment.id)


@payments.command_handler(part_of=Payment)
class ConfirmPaymentHandler:
    @handle(ConfirmStripePayment)
    def confirm_stripe_payment(self, command):
        payment = current_domain.repository_for(Payment).find_by_intent(command.payment_intent_id)
        if payment is None or payment.payment_method != PaymentMethod.STRIPE.value:
            raise NotFound("Payment not found")
        return _confirm(payment, "Payment confirmation failed")

    @handle(ConfirmPayPalPayment)
    def confirm_paypal_payment(self, command):
        payment = current_domain.repository_for(Payment).find_by_paypal_order(command.paypal_order_id)
        if payment is None or payment.payment_method != PaymentMethod.PAYPAL.value:
            raise NotFound("Payment not found")
        return _confirm(payment, "PayPal payment confirmation failed")
