"""
Telephony dispatcher selection.

The bridge implementation is picked from Settings.telephony_provider. A new
dispatcher is built for every invocation so no call state outlives an event.
"""

from phonebot.config import Settings, TelephonyProviderType
from phonebot.shared.logging import get_logger
from phonebot.telephony.http_bridge import HttpBridgeDispatcher
from phonebot.telephony.interface import CallDispatcher
from phonebot.telephony.mock_bridge import MockBridgeDispatcher

logger = get_logger(__name__)


def build_call_dispatcher(settings: Settings) -> CallDispatcher:
    """Return a fresh dispatcher for the configured bridge."""
    logger.debug(
        "Building call dispatcher",
        extra={"provider_type": settings.telephony_provider.value},
    )

    if settings.telephony_provider == TelephonyProviderType.MOCK:
        return MockBridgeDispatcher()
    return HttpBridgeDispatcher(timeout=settings.http_timeout_seconds)
