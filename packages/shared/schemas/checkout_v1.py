"""Shared checkout wire schema (v1).

These models describe the JSON exchanged between the storefront checkout and the
order placement function. Field names follow the wire format (``userId`` on the
request, snake_case everywhere else).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from packages.shared.money import PriceBreakdown

US_ONLY_MESSAGE = "Only US shipping is supported."
SITE_CHECKOUT_SOURCE = "site_checkout"
MIN_QUANTITY = 1
MAX_QUANTITY = 10


class OrderStatusV1(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


STATUS_LABELS: dict[str, str] = {
    OrderStatusV1.PENDING.value: "Pending Payment",
    OrderStatusV1.PAID.value: "Paid",
    OrderStatusV1.PROCESSING.value: "Processing",
    OrderStatusV1.PACKED.value: "Packed",
    OrderStatusV1.SHIPPED.value: "Shipped",
    OrderStatusV1.DELIVERED.value: "Delivered",
    OrderStatusV1.CANCELLED.value: "Cancelled",
    OrderStatusV1.REFUNDED.value: "Refunded",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status.lower(), status.replace("_", " ").title())


class ShippingAddressV1(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=40)
    address1: str = Field(..., min_length=1, max_length=200)
    address2: str = Field(default="", max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal: str = Field(..., min_length=1, max_length=20)
    country: str = Field(default="US", min_length=1, max_length=56)


class PlaceOrderRequestV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    user_id: str | None = Field(default=None, alias="userId")
    quantity: int = Field(..., ge=MIN_QUANTITY, le=MAX_QUANTITY)
    shipping: ShippingAddressV1
    notes: str = Field(default="", max_length=2000)
    source: str = Field(default=SITE_CHECKOUT_SOURCE, min_length=1, max_length=64)


class HumanTotalsV1(BaseModel):
    subtotal: str
    shipping: str
    tax: str
    total: str


class TotalsV1(BaseModel):
    # Cent fields are always sent by the order service; clients only require `human`.
    subtotal_cents: int | None = None
    shipping_cents: int | None = None
    tax_cents: int | None = None
    total_cents: int | None = None
    currency: str = "USD"
    human: HumanTotalsV1

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown, currency: str = "USD") -> "TotalsV1":
        return cls(
            subtotal_cents=breakdown.subtotal_cents,
            shipping_cents=breakdown.shipping_cents,
            tax_cents=breakdown.tax_cents,
            total_cents=breakdown.total_cents,
            currency=currency,
            human=HumanTotalsV1(**breakdown.human(currency)),
        )


class PlacedOrderV1(BaseModel):
    order_number: str = Field(..., min_length=1)
    status: str = OrderStatusV1.PENDING.value
    quantity: int | None = None
    placed_at: datetime | None = None


class OrderConfirmationV1(BaseModel):
    order: PlacedOrderV1
    totals: TotalsV1


class LatestShippingV1(BaseModel):
    shipping: ShippingAddressV1 | None = None


class ErrorBodyV1(BaseModel):
    error: str
    details: str | None = None
