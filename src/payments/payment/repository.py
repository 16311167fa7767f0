"""Repository for the Payment aggregate."""

from payments.domain import payments
from payments.payment.payment import Payment, PaymentStatus


@payments.repository(part_of=Payment)
class PaymentRepository:
    def find_by_intent(self, payment_intent_id) -> Payment | None:
        found = self._dao.query.filter(payment_intent_id=payment_intent_id).all().items
        return found[0] if found else None

    def find_by_paypal_order(self, paypal_order_id) -> Payment | None:
        found = self._dao.query.filter(paypal_order_id=paypal_order_id).all().items
        return found[0] if found else None

    def for_user(self, user_id) -> list[Payment]:
        return self._dao.query.filter(user_id=str(user_id)).order_by("-created_at").all().items

    def for_order(self, order_id) -> list[Payment]:
        return self._dao.query.filter(order_id=str(order_id)).order_by("-created_at").all().items

    def completed_for_order(self, order_id, exclude=None) -> Payment | None:
        """Another completed payment for the order, if there is one."""
        for payment in self.for_order(order_id):
            if payment.status == PaymentStatus.COMPLETED.value and str(payment.id) != str(exclude):
                return payment
        return None
