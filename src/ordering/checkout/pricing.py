"""Order pricing: shipping and tax derived from a cart subtotal.

Shipping is free at or above the threshold and flat below it. Tax is a
flat rate on the subtotal, rounded half-up to cents. The total is the
sum of the three.
"""

from dataclasses import dataclass

from shared.money import to_decimal, to_money
from shared.settings import get_settings


@dataclass(frozen=True)
class PricingPolicy:
    free_shipping_threshold: float = 100.0
    flat_shipping_cost: float = 10.0
    tax_rate: float = 0.10

    @classmethod
    def from_settings(cls, settings=None) -> "PricingPolicy":
        settings = settings or get_settings()
        return cls(
            free_shipping_threshold=settings.free_shipping_threshold,
            flat_shipping_cost=settings.flat_shipping_cost,
            tax_rate=settings.tax_rate,
        )


@dataclass(frozen=True)
class OrderPricing:
    subtotal: float
    shipping_cost: float
    tax: float
    total_amount: float


def shipping_cost_for(subtotal, policy: PricingPolicy) -> float:
    if to_decimal(subtotal) >= to_decimal(policy.free_shipping_threshold):
        return 0.0
    return to_money(policy.flat_shipping_cost)


def tax_for(subtotal, policy: PricingPolicy) -> float:
    return to_money(to_decimal(subtotal) * to_decimal(policy.tax_rate))


def price_subtotal(subtotal, policy: PricingPolicy | None = None) -> OrderPricing:
    policy = policy or PricingPolicy.from_settings()
    subtotal = to_money(subtotal)
    shipping_cost = shipping_cost_for(subtotal, policy)
    tax = tax_for(subtotal, policy)
    return OrderPricing(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        total_amount=to_money(to_decimal(subtotal) + to_decimal(shipping_cost) + to_decimal(tax)),
    )
