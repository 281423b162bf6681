from __future__ import annotations

from decimal import Decimal

import pytest
from services.api.app.settings import StoreSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "STOREFRONT_UNIT_PRICE_CENTS",
        "STOREFRONT_SHIPPING_CENTS",
        "STOREFRONT_TAX_RATE",
        "STOREFRONT_FREE_SHIPPING_THRESHOLD_CENTS",
        "STOREFRONT_ORDER_PREFIX",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = StoreSettings.from_env()

    assert settings.pricing.unit_price_cents == 2999
    assert settings.pricing.shipping_cents == 599
    assert settings.pricing.tax_rate == Decimal("0.07")
    assert settings.pricing.free_shipping_threshold_cents is None
    assert settings.order_number(1) == "GG-1001"


def test_custom_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_ORDER_PREFIX", "TB")
    assert StoreSettings.from_env().order_number(42) == "TB-1042"


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("STOREFRONT_UNIT_PRICE_CENTS", "abc", "STOREFRONT_UNIT_PRICE_CENTS must be an integer"),
        ("STOREFRONT_UNIT_PRICE_CENTS", "0", "unit_price_cents must be a positive"),
        ("STOREFRONT_TAX_RATE", "NaN", "STOREFRONT_TAX_RATE must be a finite number"),
        ("STOREFRONT_TAX_RATE", "1.5", "tax_rate must be within"),
        ("STOREFRONT_ORDER_PREFIX", "  ", "STOREFRONT_ORDER_PREFIX must not be empty"),
    ],
)
def test_invalid_values_raise(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str, message: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        StoreSettings.from_env()
