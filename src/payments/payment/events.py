"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from payments.domain import payments


@payments.event(part_of="Payment")
class PaymentInitiated:
    """A payment was created at the provider and awaits the buyer."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True, max_length=20)
    amount = Float(required=True)
    currency = String(required=True, max_length=3)
    provider_reference = String(max_length=255)
    initiated_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentProcessing:
    """The provider reported the payment as in flight."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)


@payments.event(part_of="Payment")
class PaymentCompleted:
    """The provider confirmed the funds were captured."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True, max_length=3)
    transaction_id = String(max_length=255)
    processed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    failed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentCancelled:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentRefunded:
    """Money was returned to the buyer through the provider."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    refund_id = String(max_length=255)
    refunded_amount = Float(required=True)
    refunded_at = DateTime(required=True)
