from __future__ import annotations

from datetime import datetime, timezone

from services.api.app.db.models import AuthSession
from services.api.app.services.errors import AuthenticationRequiredError, ForbiddenUserError
from sqlalchemy.orm import Session


def bearer_token(authorization: str | None) -> str | None:
    if authorization is None or not authorization.strip():
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationRequiredError("Malformed Authorization header")
    return token.strip()


def as_naive_utc(value: datetime) -> datetime:
    """Naive datetimes are stored as UTC; aware ones are converted first."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def resolve_session_user(db: Session, authorization: str | None) -> str | None:
    """Return the user id behind a bearer token, or None for guests."""

    token = bearer_token(authorization)
    if token is None:
        return None

    row = db.get(AuthSession, token)
    if row is None:
        raise AuthenticationRequiredError("Invalid or expired session")

    if row.expires_at is not None and as_naive_utc(row.expires_at) <= datetime.utcnow():
        raise AuthenticationRequiredError("Invalid or expired session")

    return row.user_id


def require_session_user(db: Session, authorization: str | None) -> str:
    user_id = resolve_session_user(db, authorization)
    if user_id is None:
        raise AuthenticationRequiredError("Authentication required")
    return user_id


def authorize_order_user(requested_user_id: str | None, session_user_id: str | None) -> str | None:
    """Pick the user an order is placed for.

    Guests send no token and userId=null. A userId in the body must match the session.
    """

    if session_user_id is None:
        if requested_user_id is not None:
            raise AuthenticationRequiredError("Authentication required")
        return None

    if requested_user_id is not None and requested_user_id != session_user_id:
        raise ForbiddenUserError()

    return session_user_id
