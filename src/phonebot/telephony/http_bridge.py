"""
HTTP telephony bridge dispatcher.

The bridge exposes a single URL per call; a 2xx answer means the call was
accepted, anything else is a failure described by the response body.
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx

from phonebot.config import Settings
from phonebot.shared.exceptions import CallDispatchError
from phonebot.shared.logging import get_logger
from phonebot.telephony.interface import CallDispatcher, CallRequest

logger = get_logger(__name__)


class HttpBridgeDispatcher(CallDispatcher):
    """Issues one GET per call to the rendered dispatch URL. No retries."""

    def __init__(
        self,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        timeout: float = 30.0,
    ) -> None:
        self.http_client_factory = http_client_factory or (
            lambda: httpx.AsyncClient(timeout=timeout)
        )

    async def dispatch(
        self,
        settings: Settings,
        from_suffix: str,
        to_suffix: str,
    ) -> CallRequest:
        request = self.build_request(settings, from_suffix, to_suffix)

        logger.debug(f"trying to call: {request.url}")

        try:
            async with self.http_client_factory() as client:
                response = await client.get(request.url)
        except httpx.HTTPError as e:
            raise CallDispatchError(body=str(e) or type(e).__name__, error_code="HTTP_ERROR") from e

        if not response.is_success:
            content = response.text
            logger.debug(f"Error: {request.url}, Message: {content}")
            raise CallDispatchError(body=content, status_code=response.status_code)

        logger.info(
            "Call dispatched",
            extra={"from_suffix": from_suffix, "to_suffix": to_suffix},
        )
        return request
