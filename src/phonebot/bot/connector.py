"""
Bot Framework connector client.

Covers the two chat-platform calls the orchestrator needs: listing the
members of a conversation and posting a text message into it.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol
from urllib.parse import quote

import httpx

from phonebot.auth.token import TokenAcquirer
from phonebot.bot.models import ConversationContext, Participant
from phonebot.config import Settings
from phonebot.shared.exceptions import ConnectorError
from phonebot.shared.logging import get_logger

logger = get_logger(__name__)


class ChatConnector(Protocol):
    """Chat platform operations used by the orchestrator."""

    async def list_participants(self, context: ConversationContext) -> list[Participant]:
        ...

    async def send_message(self, context: ConversationContext, text: str) -> None:
        ...


class BotConnectorClient:
    """httpx implementation of ChatConnector against the Bot Framework REST API."""

    def __init__(
        self,
        settings: Settings,
        token_acquirer: TokenAcquirer,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ) -> None:
        self._settings = settings
        self._token_acquirer = token_acquirer
        self.http_client_factory = http_client_factory or (
            lambda: httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        )

    async def _auth_headers(self) -> dict[str, str]:
        token = await self._token_acquirer.acquire(
            self._settings.bot_connector_tenant,
            self._settings,
            scope=self._settings.bot_connector_scope,
        )
        return {"Authorization": f"Bearer {token.access_token}"}

    @staticmethod
    def _conversation_url(context: ConversationContext) -> str:
        if not context.service_url:
            raise ConnectorError(
                message="Activity carried no serviceUrl",
                error_code="MISSING_SERVICE_URL",
            )
        base = context.service_url.rstrip("/")
        return f"{base}/v3/conversations/{quote(context.conversation_id, safe='')}"

    async def list_participants(self, context: ConversationContext) -> list[Participant]:
        """Return the conversation members in the order the platform lists them."""
        url = f"{self._conversation_url(context)}/members"
        headers = await self._auth_headers()

        async with self.http_client_factory() as client:
            response = await client.get(url, headers=headers)

        if response.status_code >= 400:
            raise ConnectorError(
                message=f"Listing conversation members failed with status {response.status_code}",
                error_code=str(response.status_code),
                details={"body": response.text},
            )

        members = response.json() or []
        return [
            Participant(
                name=member.get("name") or "",
                directory_id=member.get("aadObjectId") or member.get("objectId") or "",
            )
            for member in members
        ]

    async def send_message(self, context: ConversationContext, text: str) -> None:
        """Post a plain-text reply to the triggering activity."""
        url = f"{self._conversation_url(context)}/activities"
        if context.activity_id:
            url = f"{url}/{quote(context.activity_id, safe='')}"

        activity: dict = {
            "type": "message",
            "text": text,
            "textFormat": "plain",
            "conversation": {"id": context.conversation_id},
        }
        if context.bot_account is not None:
            activity["from"] = context.bot_account.model_dump(by_alias=True, exclude_none=True)
        if context.activity_id:
            activity["replyToId"] = context.activity_id

        headers = await self._auth_headers()
        async with self.http_client_factory() as client:
            response = await client.post(url, json=activity, headers=headers)

        if response.status_code >= 400:
            raise ConnectorError(
                message=f"Sending message failed with status {response.status_code}",
                error_code=str(response.status_code),
                details={"body": response.text},
            )
