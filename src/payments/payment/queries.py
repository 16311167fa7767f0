"""Read side for payments."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from payments.payment.payment import Payment
from shared.errors import NotFound


def get_payment(payment_id) -> Payment:
    try:
        return current_domain.repository_for(Payment).get(payment_id)
    except ObjectNotFoundError:
        raise NotFound("Payment not found") from None


def payments_for_user(user_id) -> list[Payment]:
    """Newest first."""
    return current_domain.repository_for(Payment).for_user(user_id)


def payments_for_order(order_id) -> list[Payment]:
    """Newest first."""
    return current_domain.repository_for(Payment).for_order(order_id)
