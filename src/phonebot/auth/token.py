"""
Client-credentials token acquisition.

A fresh exchange is made on every call; nothing is cached between
invocations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx

from phonebot.config import Settings
from phonebot.shared.exceptions import TokenAcquisitionError
from phonebot.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenResult:
    """Bearer token and its validity window."""

    access_token: str
    token_type: str
    expires_in: int
    expires_on: datetime

    @property
    def is_valid(self) -> bool:
        return bool(self.access_token) and datetime.now(timezone.utc) < self.expires_on


class TokenAcquirer:
    """Performs the OAuth2 client-credentials grant for a tenant."""

    def __init__(
        self,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        timeout: float = 30.0,
    ) -> None:
        self.http_client_factory = http_client_factory or (
            lambda: httpx.AsyncClient(timeout=timeout)
        )

    async def acquire(
        self,
        tenant_id: str,
        settings: Settings,
        scope: str | None = None,
    ) -> TokenResult:
        """Request an application-only token for ``tenant_id``.

        Args:
            tenant_id: Tenant rendered into the authority template.
            settings: Application settings holding the client credentials.
            scope: Scope to request; defaults to the directory API default scope.

        Returns:
            The token issued by the identity provider.

        Raises:
            TokenAcquisitionError: On transport errors, non-2xx responses or
                a response without an access token.
        """
        token_url = settings.token_endpoint(tenant_id)
        requested_scope = scope or settings.directory_scope

        logger.debug(
            "Requesting client-credentials token",
            extra={"tenant_id": tenant_id, "scope": requested_scope},
        )

        try:
            async with self.http_client_factory() as client:
                response = await client.post(
                    token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": settings.microsoft_app_id,
                        "client_secret": settings.microsoft_app_password,
                        "scope": requested_scope,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise TokenAcquisitionError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            error_data = _safe_json(response)
            raise TokenAcquisitionError(
                message=error_data.get("error_description", "token_exchange_failed"),
                error_code=str(error_data.get("error", response.status_code)),
                details={"status_code": response.status_code},
            )

        payload = _safe_json(response)
        access_token = payload.get("access_token") or ""
        if not access_token:
            raise TokenAcquisitionError(
                message="Token response carried no access_token",
                error_code="EMPTY_TOKEN",
            )

        try:
            expires_in = int(payload.get("expires_in", 3600))
            expires_on = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenAcquisitionError(
                message=f"Malformed token response: {e!s}",
                error_code="INVALID_RESPONSE",
            ) from e

        return TokenResult(
            access_token=access_token,
            token_type=payload.get("token_type", "Bearer"),
            expires_in=expires_in,
            expires_on=expires_on,
        )


def _safe_json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
