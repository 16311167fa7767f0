import pytest
from protean.integrations.pytest import DomainFixture

from payments.gateway import reset_providers, set_provider
from payments.gateway.fake_adapter import FakeProvider


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payments_bed):
    with payments_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def stripe_provider():
    provider = FakeProvider("stripe")
    set_provider("stripe", provider)
    yield provider
    reset_providers()


@pytest.fixture(autouse=True)
def paypal_provider():
    provider = FakeProvider("paypal")
    set_provider("paypal", provider)
    yield provider
    reset_providers()
