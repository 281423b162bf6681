"""Cent arithmetic shared by the checkout preview and the order service.

All amounts are integer cents. Fractional cents only appear while computing tax
and are rounded half up.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from packages.shared.env import env_decimal, env_int

DEFAULT_UNIT_PRICE_CENTS = 2999
DEFAULT_SHIPPING_CENTS = 599
DEFAULT_TAX_RATE = "0.07"


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int, currency: str = "USD") -> str:
    """Format cents the way en-US currency formatting does, e.g. 7017 -> "$70.17"."""

    if currency.upper() != "USD":
        raise ValueError(f"Unsupported currency: {currency!r}")

    amount = Decimal(abs(cents)) / 100
    sign = "-" if cents < 0 else ""
    return f"{sign}${amount:,.2f}"


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    subtotal_cents: int
    shipping_cents: int
    tax_cents: int

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.shipping_cents + self.tax_cents

    def human(self, currency: str = "USD") -> dict[str, str]:
        return {
            "subtotal": format_cents(self.subtotal_cents, currency),
            "shipping": format_cents(self.shipping_cents, currency),
            "tax": format_cents(self.tax_cents, currency),
            "total": format_cents(self.total_cents, currency),
        }


@dataclass(frozen=True, slots=True)
class PricingRules:
    unit_price_cents: int
    shipping_cents: int
    tax_rate: Decimal
    # Shipping is waived once the subtotal reaches this amount.
    free_shipping_threshold_cents: int | None = None

    def __post_init__(self) -> None:
        if self.unit_price_cents <= 0:
            raise ValueError("unit_price_cents must be a positive number of cents")
        if self.shipping_cents < 0:
            raise ValueError("shipping_cents must not be negative")
        if not Decimal(0) <= self.tax_rate < Decimal(1):
            raise ValueError("tax_rate must be within [0, 1)")

    @classmethod
    def from_env(cls, *, allow_free_shipping: bool = True) -> "PricingRules":
        threshold = (
            env_int("STOREFRONT_FREE_SHIPPING_THRESHOLD_CENTS", None)
            if allow_free_shipping
            else None
        )
        return cls(
            unit_price_cents=env_int("STOREFRONT_UNIT_PRICE_CENTS", DEFAULT_UNIT_PRICE_CENTS),
            shipping_cents=env_int("STOREFRONT_SHIPPING_CENTS", DEFAULT_SHIPPING_CENTS),
            tax_rate=env_decimal("STOREFRONT_TAX_RATE", DEFAULT_TAX_RATE),
            free_shipping_threshold_cents=threshold,
        )

    @property
    def tax_label(self) -> str:
        percent = (self.tax_rate * 100).normalize()
        return f"Tax ({percent:f}%)"

    def breakdown(self, quantity: int) -> PriceBreakdown:
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {quantity}")

        subtotal = self.unit_price_cents * quantity

        shipping = self.shipping_cents
        threshold = self.free_shipping_threshold_cents
        if threshold is not None and subtotal >= threshold:
            shipping = 0

        tax = round_half_up(Decimal(subtotal) * self.tax_rate)
        return PriceBreakdown(subtotal_cents=subtotal, shipping_cents=shipping, tax_cents=tax)
