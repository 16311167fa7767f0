"""Money arithmetic. Amounts are floats on the wire and in storage, rounded
half-up to two decimal places through ``Decimal``."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    return Decimal(str(value))


def to_money(value) -> float:
    """Round to cents, half-up: ``to_money(0.125) == 0.13``."""
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def to_minor_units(value) -> int:
    """Convert a decimal amount into an integer number of cents."""
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(value) -> str:
    """Two-decimal string, as PayPal expects amounts."""
    return str(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def money_equal(a, b) -> bool:
    return to_money(a) == to_money(b)
