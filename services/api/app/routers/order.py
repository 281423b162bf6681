from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Query, Response
from packages.shared.money import format_cents
from packages.shared.schemas.checkout_v1 import (
    LatestShippingV1,
    OrderConfirmationV1,
    PlaceOrderRequestV1,
    TotalsV1,
    status_label,
)
from services.api.app.db.deps import get_db
from services.api.app.db.models import Order
from services.api.app.models.order import (
    OrderDetailResponse,
    OrderEventOut,
    OrderListResponse,
    OrderSummary,
)
from services.api.app.services import orders
from services.api.app.services.auth import (
    authorize_order_user,
    require_session_user,
    resolve_session_user,
)
from services.api.app.services.errors import (
    ConfigurationError,
    InvalidOrderRequestError,
    MissingIdempotencyKeyError,
)
from services.api.app.settings import StoreSettings
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1")

MAX_IDEMPOTENCY_KEY_LENGTH = 200


def _store_settings() -> StoreSettings:
    try:
        return StoreSettings.from_env()
    except ValueError as e:
        logger.error("Invalid store configuration: %s", e)
        raise ConfigurationError("Order service is misconfigured", details=str(e)) from e


def _idempotency_key(raw: str | None) -> str:
    key = (raw or "").strip()
    if not key:
        raise MissingIdempotencyKeyError()
    if len(key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise InvalidOrderRequestError(
            "Idempotency-Key is too long",
            details=f"max_length={MAX_IDEMPOTENCY_KEY_LENGTH}",
        )
    return key


@router.post("/place-order", response_model=OrderConfirmationV1, status_code=201)
def place_order(
    payload: PlaceOrderRequestV1,
    response: Response,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> OrderConfirmationV1:
    key = _idempotency_key(idempotency_key)
    session_user_id = resolve_session_user(db, authorization)
    user_id = authorize_order_user(payload.user_id, session_user_id)
    settings = _store_settings()

    result = orders.place_order(
        db,
        payload=payload,
        user_id=user_id,
        idempotency_key=key,
        settings=settings,
    )
    if not result.created:
        response.status_code = 200
    return result.confirmation


@router.get("/orders/latest-shipping", response_model=LatestShippingV1)
def latest_shipping(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> LatestShippingV1:
    user_id = require_session_user(db, authorization)
    return LatestShippingV1(shipping=orders.latest_shipping(db, user_id))


@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    status: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> OrderListResponse:
    user_id = require_session_user(db, authorization)
    rows = orders.list_orders(db, user_id, status=status, limit=limit)
    return OrderListResponse(orders=[_order_summary(o) for o in rows])


@router.get("/orders/{order_number}", response_model=OrderDetailResponse)
def get_order(
    order_number: str,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> OrderDetailResponse:
    user_id = require_session_user(db, authorization)
    order = orders.get_order(db, user_id, order_number)

    return OrderDetailResponse(
        order=_order_summary(order),
        totals=TotalsV1.from_breakdown(orders.order_breakdown(order), order.currency),
        shipping=orders.order_shipping(order),
        notes=order.notes,
        source=order.source,
        events=[
            OrderEventOut(
                event_type=e.event_type,
                created_at=e.created_at,
                payload=e.event_payload_json or {},
            )
            for e in orders.order_events(db, order)
        ],
    )


def _order_summary(order: Order) -> OrderSummary:
    return OrderSummary(
        order_number=order.order_number or "",
        status=order.status,
        status_label=status_label(order.status),
        quantity=order.quantity,
        total_cents=order.total_cents,
        total=format_cents(order.total_cents, order.currency),
        placed_at=order.placed_at,
    )
