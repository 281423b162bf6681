from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from packages.shared.schemas.checkout_v1 import ShippingAddressV1, TotalsV1


class OrderSummary(BaseModel):
    order_number: str
    status: str
    status_label: str
    quantity: int
    total_cents: int
    total: str
    placed_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderSummary]


class OrderEventOut(BaseModel):
    event_type: str
    created_at: datetime
    payload: dict[str, Any] = Field(default_factory=dict)


class OrderDetailResponse(BaseModel):
    order: OrderSummary
    totals: TotalsV1
    shipping: ShippingAddressV1
    notes: str
    source: str
    events: list[OrderEventOut]
