"""
Telephony bridge interface definition.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from phonebot.config import Settings


@dataclass(frozen=True)
class CallRequest:
    """Rendered dispatch request, caller first and callee second."""

    from_suffix: str
    to_suffix: str
    url: str


class CallDispatcher(ABC):
    """Abstract interface for telephony bridges."""

    @staticmethod
    def build_request(settings: Settings, from_suffix: str, to_suffix: str) -> CallRequest:
        """Render the dispatch URL template with both suffixes."""
        return CallRequest(
            from_suffix=from_suffix,
            to_suffix=to_suffix,
            url=settings.dispatch_url_template.format(from_suffix, to_suffix),
        )

    @abstractmethod
    async def dispatch(
        self,
        settings: Settings,
        from_suffix: str,
        to_suffix: str,
    ) -> CallRequest:
        """Ask the bridge to connect ``from_suffix`` with ``to_suffix``.

        Returns the request that was accepted.

        Raises:
            CallDispatchError: When the bridge cannot be reached or answers
                with a non-success status. ``body`` carries the response text.
        """
        ...
