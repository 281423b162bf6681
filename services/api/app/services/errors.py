from __future__ import annotations

from packages.shared.schemas.checkout_v1 import ErrorBodyV1


class StorefrontError(Exception):
    """Base class for errors returned to callers as ``{"error", "details"}`` bodies."""

    status_code = 500

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        return ErrorBodyV1(error=self.message, details=self.details).model_dump(exclude_none=True)


class InvalidOrderRequestError(StorefrontError):
    status_code = 400


class MissingIdempotencyKeyError(InvalidOrderRequestError):
    def __init__(self) -> None:
        super().__init__("Missing Idempotency-Key header")


class AuthenticationRequiredError(StorefrontError):
    status_code = 401


class ForbiddenUserError(StorefrontError):
    status_code = 403

    def __init__(self) -> None:
        super().__init__("userId does not match the authenticated session")


class OrderNotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, order_number: str) -> None:
        super().__init__("Order not found", details=f"order_number={order_number}")
        self.order_number = order_number


class IdempotencyConflictError(StorefrontError):
    status_code = 409

    def __init__(self, idempotency_key: str) -> None:
        super().__init__(
            "Idempotency-Key reused with a different request",
            details=f"idempotency_key={idempotency_key}",
        )
        self.idempotency_key = idempotency_key


class ConfigurationError(StorefrontError):
    status_code = 500
