from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from packages.shared.money import PriceBreakdown
from packages.shared.schemas.checkout_v1 import (
    US_ONLY_MESSAGE,
    OrderConfirmationV1,
    OrderStatusV1,
    PlacedOrderV1,
    PlaceOrderRequestV1,
    ShippingAddressV1,
    TotalsV1,
)
from services.api.app.db.models import Order, OrderEvent
from services.api.app.services.errors import (
    IdempotencyConflictError,
    InvalidOrderRequestError,
    OrderNotFoundError,
)
from services.api.app.settings import StoreSettings
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlacementResult:
    confirmation: OrderConfirmationV1
    created: bool


def request_fingerprint(payload: PlaceOrderRequestV1, user_id: str | None) -> str:
    canonical = json.dumps(
        {"user_id": user_id, "request": payload.model_dump(mode="json", by_alias=True)},
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def place_order(
    db: Session,
    *,
    payload: PlaceOrderRequestV1,
    user_id: str | None,
    idempotency_key: str,
    settings: StoreSettings,
) -> PlacementResult:
    """Persist an order with authoritative totals, at most once per idempotency key."""

    if payload.shipping.country.upper() != "US":
        raise InvalidOrderRequestError(US_ONLY_MESSAGE)

    fingerprint = request_fingerprint(payload, user_id)

    existing = _find_by_idempotency_key(db, idempotency_key)
    if existing is not None:
        return _replay(existing, fingerprint, idempotency_key)

    breakdown = settings.pricing.breakdown(payload.quantity)
    shipping = payload.shipping

    order = Order(
        user_id=user_id,
        idempotency_key=idempotency_key,
        request_fingerprint=fingerprint,
        status=OrderStatusV1.PENDING.value,
        source=payload.source,
        notes=payload.notes,
        quantity=payload.quantity,
        unit_price_cents=settings.pricing.unit_price_cents,
        subtotal_cents=breakdown.subtotal_cents,
        shipping_cents=breakdown.shipping_cents,
        tax_cents=breakdown.tax_cents,
        total_cents=breakdown.total_cents,
        currency=settings.currency,
        shipping_name=shipping.name,
        shipping_phone=shipping.phone,
        shipping_address1=shipping.address1,
        shipping_address2=shipping.address2 or None,
        shipping_city=shipping.city,
        shipping_state=shipping.state,
        shipping_postal=shipping.postal,
        shipping_country=shipping.country.upper(),
        placed_at=datetime.utcnow(),
    )
    db.add(order)

    try:
        db.flush()
    except IntegrityError:
        # Another request with the same key committed between our lookup and insert.
        db.rollback()
        existing = _find_by_idempotency_key(db, idempotency_key)
        if existing is None:
            raise
        return _replay(existing, fingerprint, idempotency_key)

    order.order_number = settings.order_number(order.id)
    db.add(
        OrderEvent(
            id=uuid4().hex,
            order_id=order.id,
            event_type="ORDER_PLACED",
            event_payload_json={
                "order_number": order.order_number,
                "total_cents": order.total_cents,
                "source": order.source,
                "guest": user_id is None,
            },
        )
    )
    db.commit()

    logger.info(
        "Order %s placed: quantity=%s total_cents=%s guest=%s",
        order.order_number,
        order.quantity,
        order.total_cents,
        user_id is None,
    )
    return PlacementResult(confirmation=order_confirmation(order), created=True)


def _find_by_idempotency_key(db: Session, idempotency_key: str) -> Order | None:
    return db.query(Order).filter(Order.idempotency_key == idempotency_key).one_or_none()


def _replay(existing: Order, fingerprint: str, idempotency_key: str) -> PlacementResult:
    if existing.request_fingerprint != fingerprint:
        logger.warning("Idempotency-Key %s reused with a different request", idempotency_key)
        raise IdempotencyConflictError(idempotency_key)

    logger.info("Replaying order %s for Idempotency-Key %s", existing.order_number, idempotency_key)
    return PlacementResult(confirmation=order_confirmation(existing), created=False)


def order_breakdown(order: Order) -> PriceBreakdown:
    return PriceBreakdown(
        subtotal_cents=order.subtotal_cents,
        shipping_cents=order.shipping_cents,
        tax_cents=order.tax_cents,
    )


def order_confirmation(order: Order) -> OrderConfirmationV1:
    return OrderConfirmationV1(
        order=PlacedOrderV1(
            order_number=order.order_number or "",
            status=order.status,
            quantity=order.quantity,
            placed_at=order.placed_at,
        ),
        totals=TotalsV1.from_breakdown(order_breakdown(order), order.currency),
    )


def order_shipping(order: Order) -> ShippingAddressV1:
    return ShippingAddressV1(
        name=order.shipping_name,
        phone=order.shipping_phone,
        address1=order.shipping_address1,
        address2=order.shipping_address2 or "",
        city=order.shipping_city,
        state=order.shipping_state,
        postal=order.shipping_postal,
        country=order.shipping_country or "US",
    )


def latest_shipping(db: Session, user_id: str) -> ShippingAddressV1 | None:
    """Shipping address from the user's most recent order.

    Ordered by placed_at descending with unplaced orders last, then created_at descending.
    """

    order = (
        db.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.placed_at.is_(None), Order.placed_at.desc(), Order.created_at.desc())
        .first()
    )
    if order is None:
        return None
    return order_shipping(order)


def list_orders(
    db: Session,
    user_id: str,
    *,
    status: str | None = None,
    limit: int = 50,
) -> list[Order]:
    query = db.query(Order).filter(Order.user_id == user_id)
    if status:
        query = query.filter(Order.status == status.lower())

    return (
        query.order_by(Order.placed_at.is_(None), Order.placed_at.desc(), Order.created_at.desc())
        .limit(limit)
        .all()
    )


def get_order(db: Session, user_id: str, order_number: str) -> Order:
    order = (
        db.query(Order)
        .filter(Order.order_number == order_number, Order.user_id == user_id)
        .one_or_none()
    )
    if order is None:
        raise OrderNotFoundError(order_number)
    return order


def order_events(db: Session, order: Order) -> list[OrderEvent]:
    return (
        db.query(OrderEvent)
        .filter(OrderEvent.order_id == order.id)
        .order_by(OrderEvent.created_at.asc())
        .all()
    )
