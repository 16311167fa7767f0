"""Refunds through the original provider: command and handler."""

from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway import get_provider
from payments.gateway.port import GatewayError, RefundRequest
from payments.payment.payment import Payment
from payments.payment.queries import get_payment
from shared.errors import ProviderError


@payments.command(part_of="Payment")
class RefundPayment:
    payment_id = Identifier(required=True)
    amount = Float(min_value=0.01)  # Full amount when omitted


@payments.command_handler(part_of=Payment)
class RefundPaymentHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        payment = get_payment(command.payment_id)
        amount = payment.refundable_amount(command.amount)

        provider = get_provider(payment.payment_method)
        try:
            result = provider.refund(
                RefundRequest(
                    reference=payment.provider_reference,
                    amount=amount,
                    currency=payment.currency,
                    capture_id=payment.paypal_capture_id or payment.transaction_id,
                )
            )
        except GatewayError as exc:
            logger.error("Refund failed", payment_id=str(payment.id), error=str(exc))
            raise ProviderError("Refund failed", str(exc)) from exc

        payment.record_refund(amount, refund_id=result.refund_id)
        current_domain.repository_for(Payment).add(payment)
        return str(payment.id)
