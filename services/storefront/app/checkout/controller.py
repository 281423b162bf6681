"""Checkout form controller.

Holds the form state for one checkout session, validates it, shows a local price
preview, and submits at most one order placement request at a time. After a
successful placement only the server's totals are shown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from packages.shared.money import PriceBreakdown
from packages.shared.schemas.checkout_v1 import SITE_CHECKOUT_SOURCE, OrderConfirmationV1
from services.storefront.app.checkout.client import (
    OrderRequest,
    OrderServiceClient,
    PrefillSource,
)
from services.storefront.app.checkout.config import CheckoutSettings
from services.storefront.app.checkout.form import ShippingForm, coerce_quantity, validate_form
from services.storefront.app.checkout.result import Err, ErrorKind, Ok, Result
from services.storefront.app.checkout.session import SessionProvider, SessionUnavailableError
from services.storefront.app.checkout.views import (
    ConfirmationView,
    SummaryView,
    confirmation_view,
    summary_view,
)

logger = logging.getLogger(__name__)

SUBMISSION_IN_PROGRESS = "Order submission already in progress"
ORDER_ALREADY_PLACED = "Order already placed; start a new order to check out again"
SESSION_UNAVAILABLE = "Session unavailable"


class IdempotencyKeyPolicy(str, Enum):
    # New key on every place_order call, retries included.
    PER_SUBMISSION = "per_submission"
    # One key per logical order; reused across retries until the order changes or succeeds.
    PER_ATTEMPT = "per_attempt"


def new_idempotency_key() -> str:
    return str(uuid4())


@dataclass
class CheckoutState:
    shipping: ShippingForm = field(default_factory=ShippingForm)
    quantity: int = 1
    notes: str = ""
    submitting: bool = False
    prefill_loading: bool = False
    error: str | None = None
    confirmation: OrderConfirmationV1 | None = None


class CheckoutController:
    def __init__(
        self,
        *,
        client: OrderServiceClient,
        sessions: SessionProvider,
        settings: CheckoutSettings,
        prefill_source: PrefillSource | None = None,
        key_policy: IdempotencyKeyPolicy = IdempotencyKeyPolicy.PER_SUBMISSION,
        key_factory: Callable[[], str] = new_idempotency_key,
        source: str = SITE_CHECKOUT_SOURCE,
    ) -> None:
        self._client = client
        self._sessions = sessions
        self._settings = settings
        self._prefill_source: PrefillSource = prefill_source or client
        self._key_policy = key_policy
        self._key_factory = key_factory
        self._source = source

        self._state = CheckoutState()
        self._attempt_key: str | None = None
        self._attempt_fingerprint: tuple | None = None

    @property
    def state(self) -> CheckoutState:
        return self._state

    def update_shipping(self, field_name: str, value: str) -> None:
        self._state.shipping.update(field_name, value)

    def set_quantity(self, value: object) -> int:
        self._state.quantity = coerce_quantity(value)
        return self._state.quantity

    def set_notes(self, value: str) -> None:
        self._state.notes = value or ""

    def preview(self) -> PriceBreakdown:
        """Display-only totals; never sent to the order service."""

        return self._settings.pricing.breakdown(self._state.quantity)

    def validate_form(self) -> Result[ShippingForm]:
        result = validate_form(self._state.shipping)
        if isinstance(result, Err):
            self._state.error = result.message
        return result

    async def load_prefill(self) -> bool:
        """Copy the shipping address of the user's last order into the form.

        Best-effort: no session, no prior order, or any lookup failure leaves the form
        untouched and returns False.
        """

        try:
            session = await self._sessions.get_session()
        except SessionUnavailableError as e:
            logger.warning("Skipping shipping prefill, session unavailable: %s", e)
            return False

        if session is None or not session.user_id:
            return False

        self._state.prefill_loading = True
        try:
            address = await self._prefill_source.latest_shipping(session)
        except Exception as e:
            logger.warning("Shipping prefill failed for user %s: %s", session.user_id, e)
            return False
        finally:
            self._state.prefill_loading = False

        if address is None:
            logger.debug("No prior order to prefill from for user %s", session.user_id)
            return False

        self._state.shipping = ShippingForm.from_address(address)
        return True

    async def place_order(self) -> Result[OrderConfirmationV1]:
        if self._state.submitting:
            return Err(ErrorKind.BLOCKED, SUBMISSION_IN_PROGRESS)
        if self._state.confirmation is not None:
            return Err(ErrorKind.BLOCKED, ORDER_ALREADY_PLACED)

        validated = self.validate_form()
        if isinstance(validated, Err):
            return validated

        # Set before the first await so a second call sees it.
        self._state.submitting = True
        self._state.error = None
        self._state.confirmation = None
        try:
            result = await self._submit()
        finally:
            self._state.submitting = False

        if isinstance(result, Ok):
            self._state.confirmation = result.value
            self._state.shipping = ShippingForm()
            self._state.notes = ""
            self._attempt_key = None
            self._attempt_fingerprint = None
        else:
            self._state.error = result.message
        return result

    async def _submit(self) -> Result[OrderConfirmationV1]:
        try:
            session = await self._sessions.get_session()
        except SessionUnavailableError as e:
            return Err(ErrorKind.TRANSPORT, str(e) or SESSION_UNAVAILABLE)
        except Exception as e:
            logger.error("Session lookup failed before order submission: %s", e)
            return Err(ErrorKind.TRANSPORT, str(e) or type(e).__name__)

        request = OrderRequest(
            user_id=session.user_id if session else None,
            quantity=self._state.quantity,
            shipping=self._state.shipping.to_payload(),
            notes=self._state.notes,
            source=self._source,
        )
        return await self._client.place_order(
            request,
            access_token=session.access_token if session else None,
            idempotency_key=self._idempotency_key(request),
        )

    def _idempotency_key(self, request: OrderRequest) -> str:
        if self._key_policy is IdempotencyKeyPolicy.PER_SUBMISSION:
            return self._key_factory()

        fingerprint = (
            request.user_id,
            request.quantity,
            tuple(sorted(request.shipping.items())),
            request.notes,
        )
        if self._attempt_key is None or fingerprint != self._attempt_fingerprint:
            self._attempt_key = self._key_factory()
            self._attempt_fingerprint = fingerprint
        return self._attempt_key

    def view(self) -> SummaryView | ConfirmationView:
        if self._state.confirmation is not None:
            return confirmation_view(self._state.confirmation)

        return summary_view(
            product_name=self._settings.product_name,
            product_description=self._settings.product_description,
            quantity=self._state.quantity,
            pricing=self._settings.pricing,
            submitting=self._state.submitting,
            prefill_loading=self._state.prefill_loading,
            error=self._state.error,
        )

    def start_new_order(self) -> None:
        """Discard the finished checkout and start over with a blank form."""

        self._state = CheckoutState()
        self._attempt_key = None
        self._attempt_fingerprint = None
