"""Application tests for RefundPayment."""

import pytest
from payments.payment.confirmation import ConfirmPayPalPayment, ConfirmStripePayment
from payments.payment.creation import CreatePayment
from payments.payment.payment import Payment
from payments.payment.refund import RefundPayment
from protean import current_domain
from shared.errors import BadRequest, InvalidState, NotFound, ProviderError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _payment(method="stripe") -> Payment:
    payment_id = _process(CreatePayment(order_id="ord-001", user_id="user-001", payment_method=method, amount=37.5))
    return current_domain.repository_for(Payment).get(payment_id)


def _completed(method="stripe") -> Payment:
    payment = _payment(method)
    if method == "stripe":
        _process(ConfirmStripePayment(payment_intent_id=payment.payment_intent_id))
    else:
        _process(ConfirmPayPalPayment(paypal_order_id=payment.paypal_order_id))
    return current_domain.repository_for(Payment).get(payment.id)


def _reload(payment) -> Payment:
    return current_domain.repository_for(Payment).get(payment.id)


class TestRefund:
    def test_full_refund(self, stripe_provider):
        payment = _completed()

        _process(RefundPayment(payment_id=payment.id))

        payment = _reload(payment)
        assert payment.status == "refunded"
        assert payment.refunded_amount == 37.5
        assert payment.refund_id.startswith("fake_ref_")

        request = stripe_provider.calls[-1]["request"]
        assert request.reference == payment.payment_intent_id
        assert request.amount == 37.5

    def test_partial_refund(self, stripe_provider):
        payment = _completed()

        _process(RefundPayment(payment_id=payment.id, amount=10.0))

        assert _reload(payment).refunded_amount == 10.0
        assert stripe_provider.calls[-1]["request"].amount == 10.0

    def test_paypal_refund_uses_capture(self, paypal_provider):
        paypal_provider.will_confirm("completed", transaction_id="CAP-7", capture_id="CAP-7")
        payment = _completed("paypal")

        _process(RefundPayment(payment_id=payment.id))

        assert paypal_provider.calls[-1]["request"].capture_id == "CAP-7"
        assert _reload(payment).status == "refunded"

    def test_pending_payment_cannot_be_refunded(self):
        payment = _payment()
        with pytest.raises(InvalidState):
            _process(RefundPayment(payment_id=payment.id))

    def test_amount_above_payment(self):
        payment = _completed()
        with pytest.raises(BadRequest):
            _process(RefundPayment(payment_id=payment.id, amount=50.0))

    def test_unknown_payment(self):
        with pytest.raises(NotFound):
            _process(RefundPayment(payment_id="missing"))

    def test_provider_failure_leaves_payment_completed(self, stripe_provider):
        payment = _completed()
        stripe_provider.configure(should_succeed=False, failure_reason="charge_already_refunded")

        with pytest.raises(ProviderError) as exc:
            _process(RefundPayment(payment_id=payment.id))

        assert exc.value.message == "Refund failed: charge_already_refunded"
        assert _reload(payment).status == "completed"
