"""Tests for provider selection from settings."""

import pytest
from payments.gateway import get_provider, reset_providers
from payments.gateway.paypal_adapter import PayPalProvider
from payments.gateway.stripe_adapter import StripeProvider
from shared.errors import BadRequest, ProviderError


@pytest.fixture()
def unconfigured(monkeypatch):
    for name in ("STRIPE_SECRET_KEY", "PAYPAL_CLIENT_ID", "PAYPAL_CLIENT_SECRET"):
        monkeypatch.delenv(f"STOREFRONT_{name}", raising=False)
    reset_providers()


def test_unsupported_method():
    with pytest.raises(BadRequest) as exc:
        get_provider("bitcoin")
    assert "Unsupported payment method" in exc.value.message


def test_installed_fake_is_returned(stripe_provider):
    assert get_provider("STRIPE") is stripe_provider


def test_stripe_from_settings(unconfigured, monkeypatch):
    monkeypatch.setenv("STOREFRONT_STRIPE_SECRET_KEY", "sk_test_123")
    provider = get_provider("stripe")
    assert isinstance(provider, StripeProvider)
    assert provider.secret_key == "sk_test_123"


def test_paypal_from_settings(unconfigured, monkeypatch):
    monkeypatch.setenv("STOREFRONT_PAYPAL_CLIENT_ID", "client")
    monkeypatch.setenv("STOREFRONT_PAYPAL_CLIENT_SECRET", "secret")
    assert isinstance(get_provider("paypal"), PayPalProvider)


def test_missing_credentials(unconfigured):
    with pytest.raises(ProviderError) as exc:
        get_provider("paypal")
    assert "STOREFRONT_PAYPAL_CLIENT_ID" in exc.value.message
