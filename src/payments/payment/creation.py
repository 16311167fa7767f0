"""Payment creation at a provider: command and handler."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from payments.domain import logger, payments
from payments.gateway import get_provider
from payments.gateway.port import GatewayError, PaymentRequest
from payments.payment.payment import Payment, PaymentMethod
from shared.errors import Conflict, ProviderError


@payments.command(part_of="Payment")
class CreatePayment:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    amount = Float(required=True, min_value=0.01)
    currency = String(max_length=3)  # Settings default when omitted
    success_url = String(max_length=2000)
    cancel_url = String(max_length=2000)


@payments.command_handler(part_of=Payment)
class CreatePaymentHandler:
    @handle(CreatePayment)
    def create_payment(self, command):
        repo = current_domain.repository_for(Payment)
        if repo.completed_for_order(command.order_id) is not None:
            raise Conflict("Order has already been paid")

        provider = get_provider(command.payment_method)

        payment = Payment.create(
            order_id=command.order_id,
            user_id=command.user_id,
            payment_method=command.payment_method,
            amount=command.amount,
            currency=command.currency,
        )

        try:
            created = provider.create(
                PaymentRequest(
                    order_id=str(command.order_id),
                    user_id=str(command.user_id),
                    amount=payment.amount,
                    currency=payment.currency,
                    payment_id=str(payment.id),
                    success_url=command.success_url,
                    cancel_url=command.cancel_url,
                )
            )
        except GatewayError as exc:
            logger.error(
                "Payment creation failed",
                order_id=str(command.order_id),
                payment_method=command.payment_method,
                error=str(exc),
            )
            raise ProviderError(f"{provider.label} payment creation failed", str(exc)) from exc

        payment.attach(
            created.reference,
            client_secret=created.client_secret,
            approval_url=created.approval_url,
        )
        repo.add(payment)
        return str(payment.id)
