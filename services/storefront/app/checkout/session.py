from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class SessionUnavailableError(Exception):
    """The session store could not be read. Providers raise this instead of returning garbage."""


@dataclass(frozen=True, slots=True)
class SessionInfo:
    access_token: str | None
    user_id: str | None


class SessionProvider(Protocol):
    async def get_session(self) -> SessionInfo | None: ...


class GuestSessionProvider:
    async def get_session(self) -> SessionInfo | None:
        return None


class StaticSessionProvider:
    """Fixed session, e.g. a token handed over by the sign-in flow."""

    def __init__(self, access_token: str | None, user_id: str | None) -> None:
        self._session = SessionInfo(access_token=access_token, user_id=user_id)

    async def get_session(self) -> SessionInfo | None:
        return self._session
