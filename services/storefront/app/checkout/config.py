from __future__ import annotations

import os
from dataclasses import dataclass

from packages.shared.env import env_float
from packages.shared.money import PricingRules


@dataclass(frozen=True, slots=True)
class CheckoutSettings:
    functions_url: str
    pricing: PricingRules
    timeout_seconds: float | None = None
    product_name: str = "Golden Graze Whipped Tallow Balm"
    product_description: str = "4oz jar, Unscented"

    def __post_init__(self) -> None:
        if not self.functions_url.strip():
            raise ValueError("functions_url must not be empty")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        """Build settings from STOREFRONT_* variables.

        The preview always uses the flat shipping fee; free-shipping thresholds are
        only known to the order service.
        """

        functions_url = os.getenv("STOREFRONT_FUNCTIONS_URL", "").strip().rstrip("/")
        if not functions_url:
            raise ValueError("STOREFRONT_FUNCTIONS_URL is required")

        return cls(
            functions_url=functions_url,
            pricing=PricingRules.from_env(allow_free_shipping=False),
            timeout_seconds=env_float("STOREFRONT_HTTP_TIMEOUT_SECONDS", None),
        )
