"""Explicit outcome type for checkout operations.

Call sites branch with ``isinstance(result, Ok)`` / ``isinstance(result, Err)``
instead of probing loosely shaped error objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    TRANSPORT = "TRANSPORT"
    SERVER = "SERVER"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    kind: ErrorKind
    message: str
    status_code: int | None = None
    details: str | None = None


Result = Union[Ok[T], Err]
