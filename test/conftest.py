"""
Pytest configuration and shared fixtures.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest

from phonebot.auth.token import TokenResult
from phonebot.bot.models import ChannelAccount, ConversationContext, Participant
from phonebot.config import Settings
from phonebot.shared.exceptions import TokenAcquisitionError
from phonebot.telephony.mock_bridge import MockBridgeDispatcher

DISPATCH_TEMPLATE = "https://pbx.example.com/call?from={0}&to={1}"


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        authority_template="https://login.example.com/{0}",
        api_url="https://graph.example.com/",
        microsoft_app_id="test-app-id",
        microsoft_app_password="test-app-secret",
        dispatch_url_template=DISPATCH_TEMPLATE,
        telephony_provider="mock",
        directory_timezone="Europe/Berlin",
        invoke_timeout_seconds=5,
    )


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Populate the environment so get_settings() succeeds."""
    monkeypatch.setenv("MICROSOFT_APP_ID", "env-app-id")
    monkeypatch.setenv("MICROSOFT_APP_PASSWORD", "env-app-secret")
    monkeypatch.setenv("DISPATCH_URL_TEMPLATE", DISPATCH_TEMPLATE)
    monkeypatch.setenv("TELEPHONY_PROVIDER", "mock")


def mock_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[], httpx.AsyncClient]:
    """Build an http_client_factory served by an in-process handler."""
    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def conversation() -> ConversationContext:
    return ConversationContext(
        conversation_id="19:chat-abc@thread.v2",
        tenant_id="tenant-123",
        activity_id="activity-1",
        service_url="https://smba.example.com/emea/",
        bot_account=ChannelAccount(id="28:bot-id", name="PhoneBot"),
    )


@pytest.fixture
def alice() -> Participant:
    return Participant(name="Alice", directory_id="aad-alice")


@pytest.fixture
def bob() -> Participant:
    return Participant(name="Bob", directory_id="aad-bob")


class FakeConnector:
    """In-memory chat connector."""

    def __init__(
        self,
        participants: list[Participant] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.participants = participants or []
        self.error = error
        self.messages: list[str] = []
        self.list_calls = 0

    async def list_participants(self, context: ConversationContext) -> list[Participant]:
        self.list_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.participants)

    async def send_message(self, context: ConversationContext, text: str) -> None:
        self.messages.append(text)


class FakeTokenAcquirer:
    """Token acquirer returning a canned token, None, or raising."""

    def __init__(
        self,
        token: str | None = "access-token",
        error: Exception | None = None,
        as_none: bool = False,
        expired: bool = False,
    ) -> None:
        self.token = token
        self.error = error
        self.as_none = as_none
        self.expired = expired
        self.calls: list[str] = []

    async def acquire(self, tenant_id: str, settings: Settings, scope: str | None = None) -> TokenResult | None:
        self.calls.append(tenant_id)
        if self.error is not None:
            raise self.error
        if self.as_none:
            return None
        return TokenResult(
            access_token=self.token or "",
            token_type="Bearer",
            expires_in=3600,
            expires_on=datetime.now(timezone.utc) + timedelta(hours=-1 if self.expired else 1),
        )


class FakeDirectory:
    """Directory client stand-in keyed by directory id."""

    def __init__(self, phones: dict[str, Any]) -> None:
        self.phones = phones
        self.lookups: list[str] = []
        self.tokens: list[str] = []

    def factory(self, settings: Settings, token: str) -> "FakeDirectory":
        self.tokens.append(token)
        return self

    async def get_user_phone(self, directory_id: str) -> str | None:
        self.lookups.append(directory_id)
        value = self.phones.get(directory_id)
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def mock_dispatcher() -> MockBridgeDispatcher:
    return MockBridgeDispatcher()


@pytest.fixture
def failing_token_acquirer() -> FakeTokenAcquirer:
    return FakeTokenAcquirer(error=TokenAcquisitionError("invalid_client", error_code="invalid_client"))
