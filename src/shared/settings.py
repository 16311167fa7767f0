"""Process-wide configuration, read from ``STOREFRONT_*`` environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ProviderError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # PayPal
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_base_url: str = "https://api-m.sandbox.paypal.com"
    paypal_brand_name: str = "Storefront"

    frontend_url: str = "http://localhost:3000"

    # Pricing
    free_shipping_threshold: float = 100.0
    flat_shipping_cost: float = 10.0
    tax_rate: float = 0.10
    default_currency: str = "USD"

    provider_timeout_seconds: float = 10.0
    order_number_attempts: int = 5

    catalog_base_url: str = ""

    def require(self, *names: str) -> None:
        """Fail fast when a provider is used without its credentials."""
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise ProviderError(
                "Payment provider is not configured",
                f"missing {', '.join('STOREFRONT_' + name.upper() for name in missing)}",
            )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings() -> None:
    get_settings.cache_clear()
