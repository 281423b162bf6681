from __future__ import annotations

import os
from dataclasses import dataclass

from packages.shared.money import PricingRules


@dataclass(frozen=True, slots=True)
class StoreSettings:
    pricing: PricingRules
    order_prefix: str
    currency: str = "USD"

    @classmethod
    def from_env(cls) -> "StoreSettings":
        """Read order-service settings.

        Read on every request rather than at import so tests can override pricing
        with monkeypatch.setenv.
        """

        prefix = os.getenv("STOREFRONT_ORDER_PREFIX", "GG").strip()
        if not prefix:
            raise ValueError("STOREFRONT_ORDER_PREFIX must not be empty")

        return cls(pricing=PricingRules.from_env(), order_prefix=prefix)

    def order_number(self, order_id: int) -> str:
        return f"{self.order_prefix}-{1000 + order_id}"
