"""
Minimal Microsoft Graph wrapper for participant phone lookups.
"""

from __future__ import annotations

from typing import Callable, Optional
from urllib.parse import quote

import httpx

from phonebot.config import Settings
from phonebot.shared.exceptions import DirectoryLookupError
from phonebot.shared.logging import get_logger

logger = get_logger(__name__)


class DirectoryClient:
    """Resolves a directory user's first business phone number.

    Bound to a single bearer token; build a new client for each invocation.
    """

    def __init__(
        self,
        settings: Settings | None,
        token: str,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ) -> None:
        if settings is None:
            raise ValueError("settings must not be None")
        if not token or not token.strip():
            raise ValueError("token must not be empty")

        self._settings = settings
        self._token = token
        self.http_client_factory = http_client_factory or (
            lambda: httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Prefer": f'outlook.timezone="{self._settings.directory_timezone}"',
            "Accept": "application/json",
        }

    async def get_user_phone(self, directory_id: str) -> str | None:
        """Return the first entry of the user's ``businessPhones``.

        Returns None when the user has no business phone or does not exist.

        Raises:
            DirectoryLookupError: On transport errors or any other non-2xx response.
        """
        if not directory_id or not directory_id.strip():
            logger.info("Participant has no directory id; skipping lookup")
            return None

        url = f"{self._settings.users_endpoint}/{quote(directory_id, safe='')}"

        try:
            async with self.http_client_factory() as client:
                response = await client.get(
                    url,
                    params={"$select": "id,displayName,businessPhones"},
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise DirectoryLookupError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code == 404:
            logger.info("Directory user not found", extra={"directory_id": directory_id})
            return None

        if response.status_code >= 400:
            raise DirectoryLookupError(
                message=f"Directory lookup failed with status {response.status_code}",
                error_code=str(response.status_code),
                details={"body": response.text},
            )

        user = response.json() or {}
        phones = user.get("businessPhones") or []
        return phones[0] if phones else None
