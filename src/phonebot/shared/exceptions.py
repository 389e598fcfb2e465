"""
Exceptions raised by the remote collaborators.

The orchestrator converts each of them into a pipeline result; none of
them escapes an invocation.
"""

from typing import Any


class PhoneBotError(Exception):
    """Base exception for collaborator failures."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class TokenAcquisitionError(PhoneBotError):
    """Client-credentials exchange with the identity provider failed."""


class DirectoryLookupError(PhoneBotError):
    """Directory returned an error other than "user not found"."""


class ConnectorError(PhoneBotError):
    """Chat platform connector call failed."""


class CallDispatchError(PhoneBotError):
    """Telephony bridge refused or could not receive the dispatch request.

    ``body`` is the bridge's response text, shown to the user verbatim.
    """

    def __init__(
        self,
        body: str,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(body, error_code=error_code, details={"status_code": status_code})
        self.body = body
        self.status_code = status_code
