"""
Mock telephony bridge for dry-run deployments and tests.
"""

from phonebot.config import Settings
from phonebot.shared.exceptions import CallDispatchError
from phonebot.shared.logging import get_logger
from phonebot.telephony.interface import CallDispatcher, CallRequest

logger = get_logger(__name__)


class MockBridgeDispatcher(CallDispatcher):
    """Records dispatch requests instead of placing calls."""

    def __init__(self) -> None:
        self._calls: list[CallRequest] = []
        self._should_fail: bool = False
        self._fail_body: str = "Mock failure"
        self._fail_status: int = 500

    def reset(self) -> None:
        self._calls.clear()
        self._should_fail = False
        self._fail_body = "Mock failure"
        self._fail_status = 500

    def configure_failure(
        self,
        should_fail: bool = True,
        body: str = "Mock failure",
        status_code: int = 500,
    ) -> None:
        self._should_fail = should_fail
        self._fail_body = body
        self._fail_status = status_code

    @property
    def calls(self) -> list[CallRequest]:
        return self._calls.copy()

    def get_last_call(self) -> CallRequest | None:
        return self._calls[-1] if self._calls else None

    async def dispatch(
        self,
        settings: Settings,
        from_suffix: str,
        to_suffix: str,
    ) -> CallRequest:
        request = self.build_request(settings, from_suffix, to_suffix)
        logger.debug(f"trying to call: {request.url}")

        if self._should_fail:
            logger.debug(f"Error: {request.url}, Message: {self._fail_body}")
            raise CallDispatchError(body=self._fail_body, status_code=self._fail_status)

        self._calls.append(request)
        logger.info(
            "Mock call dispatched",
            extra={"from_suffix": from_suffix, "to_suffix": to_suffix},
        )
        return request
