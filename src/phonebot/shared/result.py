"""
Tagged result threaded through the call-up pipeline.

Each pipeline step returns ``Ok(value)`` or ``Err(kind, detail)``; only the
orchestrator boundary turns an ``Err`` into a chat message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure taxonomy of one orchestration."""

    WRONG_PARTICIPANT_COUNT = "wrong_participant_count"
    AUTHENTICATION_FAILURE = "authentication_failure"
    PHONE_NOT_FOUND = "phone_not_found"
    DISPATCH_FAILURE = "dispatch_failure"
    UNHANDLED_FAILURE = "unhandled_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A failed step.

    ``detail`` depends on the kind: the participant name for PHONE_NOT_FOUND,
    the bridge response body for DISPATCH_FAILURE, the exception text otherwise.
    """

    kind: ErrorKind
    detail: str = ""

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[T] | Err
