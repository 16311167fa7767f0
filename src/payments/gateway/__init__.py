"""Payment provider registry.

``get_provider(method)`` returns the provider for ``stripe`` or
``paypal``, building the real adapter from settings on first use.
Tests install fakes with ``set_provider``.
"""

from payments.gateway.port import PaymentProvider
from shared.errors import BadRequest
from shared.settings import get_settings

SUPPORTED_METHODS = ("stripe", "paypal")

_providers: dict[str, PaymentProvider] = {}


def _build(method: str) -> PaymentProvider:
    settings = get_settings()
    if method == "stripe":
        from payments.gateway.stripe_adapter import StripeProvider

        settings.require("stripe_secret_key")
        return StripeProvider(
            secret_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            timeout=settings.provider_timeout_seconds,
        )

    from payments.gateway.paypal_adapter import PayPalProvider

    settings.require("paypal_client_id", "paypal_client_secret")
    return PayPalProvider(
        client_id=settings.paypal_client_id,
        client_secret=settings.paypal_client_secret,
        base_url=settings.paypal_base_url,
        frontend_url=settings.frontend_url,
        brand_name=settings.paypal_brand_name,
        timeout=settings.provider_timeout_seconds,
    )


def get_provider(method: str) -> PaymentProvider:
    """Return the provider for a payment method."""
    method = (method or "").lower()
    if method not in SUPPORTED_METHODS:
        raise BadRequest(f"Unsupported payment method '{method}'", field="payment_method")

    if method not in _providers:
        _providers[method] = _build(method)
    return _providers[method]


def set_provider(method: str, provider: PaymentProvider) -> None:
    """Override the provider for a payment method (useful for tests)."""
    _providers[method.lower()] = provider


def reset_providers() -> None:
    """Drop all installed providers."""
    _providers.clear()
