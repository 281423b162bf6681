"""HTTP client for the order placement functions.

Every failure is mapped to an ``Err`` here so the controller never sees raw
transport exceptions or loosely typed error bodies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from packages.shared.schemas.checkout_v1 import (
    LatestShippingV1,
    OrderConfirmationV1,
    ShippingAddressV1,
)
from services.storefront.app.checkout.config import CheckoutSettings
from services.storefront.app.checkout.result import Err, ErrorKind, Ok, Result
from services.storefront.app.checkout.session import SessionInfo

logger = logging.getLogger(__name__)

PLACE_ORDER_PATH = "/functions/v1/place-order"
LATEST_SHIPPING_PATH = "/functions/v1/orders/latest-shipping"

GENERIC_ORDER_ERROR = "Order failed"
MALFORMED_SUCCESS_MESSAGE = "Invalid response from order service"


@dataclass(frozen=True, slots=True)
class OrderRequest:
    user_id: str | None
    quantity: int
    shipping: dict[str, str]
    notes: str
    source: str

    def to_json(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "quantity": self.quantity,
            "shipping": dict(self.shipping),
            "notes": self.notes,
            "source": self.source,
        }


class PrefillSource(Protocol):
    async def latest_shipping(self, session: SessionInfo) -> ShippingAddressV1 | None: ...


def _auth_headers(access_token: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"} if access_token else {}


def error_from_response(response: httpx.Response) -> Err:
    """Turn a non-2xx response into an Err carrying only a user-facing message.

    Bodies that are not a JSON object fall back to ``HTTP <status>: <reason>``.
    """

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        kind = ErrorKind.SERVER
        message = str(body.get("error") or GENERIC_ORDER_ERROR)
        details = body.get("details")
        details = str(details) if details else None
    else:
        kind = ErrorKind.MALFORMED_RESPONSE
        message = f"HTTP {response.status_code}: {response.reason_phrase}"
        details = None

    logger.error(
        "Order API error: status=%s message=%s details=%s",
        response.status_code,
        message,
        details or "",
    )
    return Err(kind, message, status_code=response.status_code, details=details)


class OrderServiceClient:
    def __init__(self, http: httpx.AsyncClient, functions_url: str) -> None:
        self._http = http
        self._base_url = functions_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: CheckoutSettings) -> "OrderServiceClient":
        return cls(
            httpx.AsyncClient(timeout=settings.timeout_seconds),
            settings.functions_url,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def place_order(
        self,
        request: OrderRequest,
        *,
        access_token: str | None,
        idempotency_key: str,
    ) -> Result[OrderConfirmationV1]:
        headers = {
            "Content-Type": "application/json",
            **_auth_headers(access_token),
            "Idempotency-Key": idempotency_key,
        }

        try:
            response = await self._http.post(
                f"{self._base_url}{PLACE_ORDER_PATH}",
                json=request.to_json(),
                headers=headers,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = str(e) or type(e).__name__
            logger.error("Order request failed before a response arrived: %s", message)
            return Err(ErrorKind.TRANSPORT, message)

        if not response.is_success:
            return error_from_response(response)

        try:
            confirmation = OrderConfirmationV1.model_validate(response.json())
        except ValueError as e:
            logger.error("Unparseable order confirmation (status=%s): %s", response.status_code, e)
            return Err(
                ErrorKind.MALFORMED_RESPONSE,
                MALFORMED_SUCCESS_MESSAGE,
                status_code=response.status_code,
            )

        logger.info("Order %s confirmed", confirmation.order.order_number)
        return Ok(confirmation)

    async def latest_shipping(self, session: SessionInfo) -> ShippingAddressV1 | None:
        """Shipping address of the session user's most recent order.

        Raises httpx.HTTPError or ValueError on failure; callers treat prefill as best-effort.
        """

        response = await self._http.get(
            f"{self._base_url}{LATEST_SHIPPING_PATH}",
            headers=_auth_headers(session.access_token),
        )
        response.raise_for_status()
        return LatestShippingV1.model_validate(response.json()).shipping
