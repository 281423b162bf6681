from __future__ import annotations

from dataclasses import dataclass

from packages.shared.money import PriceBreakdown, PricingRules, format_cents
from packages.shared.schemas.checkout_v1 import OrderConfirmationV1, status_label


@dataclass(frozen=True, slots=True)
class SummaryView:
    product_name: str
    product_description: str
    quantity: int
    breakdown: PriceBreakdown
    subtotal: str
    shipping: str
    tax_label: str
    tax: str
    total: str
    submitting: bool
    prefill_loading: bool
    error: str | None

    @property
    def can_submit(self) -> bool:
        return not self.submitting

    @property
    def submit_label(self) -> str:
        return "PROCESSING ORDER..." if self.submitting else "PLACE ORDER"


@dataclass(frozen=True, slots=True)
class ConfirmationView:
    order_number: str
    status: str
    status_label: str
    subtotal: str
    shipping: str
    tax: str
    total: str


def summary_view(
    *,
    product_name: str,
    product_description: str,
    quantity: int,
    pricing: PricingRules,
    submitting: bool,
    prefill_loading: bool,
    error: str | None,
) -> SummaryView:
    breakdown = pricing.breakdown(quantity)
    return SummaryView(
        product_name=product_name,
        product_description=product_description,
        quantity=quantity,
        breakdown=breakdown,
        subtotal=format_cents(breakdown.subtotal_cents),
        shipping=format_cents(breakdown.shipping_cents),
        tax_label=pricing.tax_label,
        tax=format_cents(breakdown.tax_cents),
        total=format_cents(breakdown.total_cents),
        submitting=submitting,
        prefill_loading=prefill_loading,
        error=error,
    )


def confirmation_view(confirmation: OrderConfirmationV1) -> ConfirmationView:
    # Server strings are shown verbatim, never recomputed from the local preview.
    human = confirmation.totals.human
    return ConfirmationView(
        order_number=confirmation.order.order_number,
        status=confirmation.order.status,
        status_label=status_label(confirmation.order.status),
        subtotal=human.subtotal,
        shipping=human.shipping,
        tax=human.tax,
        total=human.total,
    )
