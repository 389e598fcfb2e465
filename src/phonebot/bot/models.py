"""
Inbound activity schemas and per-event domain objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class ChannelAccount(_CamelModel):
    """Account on the channel (user or bot)."""

    id: str | None = None
    name: str | None = None
    aad_object_id: str | None = None


class ConversationAccount(_CamelModel):
    id: str
    tenant_id: str | None = None
    conversation_type: str | None = None


class Activity(_CamelModel):
    """Subset of the Bot Framework activity schema used by the bot."""

    type: str
    id: str | None = None
    name: str | None = None
    service_url: str | None = None
    channel_id: str | None = None
    conversation: ConversationAccount | None = None
    from_: ChannelAccount | None = Field(default=None, alias="from")
    recipient: ChannelAccount | None = None
    channel_data: dict[str, Any] | None = None

    @property
    def tenant_id(self) -> str | None:
        """Tenant of the conversation, falling back to the Teams channel data."""
        if self.conversation and self.conversation.tenant_id:
            return self.conversation.tenant_id
        tenant = (self.channel_data or {}).get("tenant") or {}
        return tenant.get("id")


@dataclass(frozen=True)
class Participant:
    """Chat member as reported by the chat platform."""

    name: str
    directory_id: str


@dataclass(frozen=True)
class ConversationContext:
    """Everything one invocation knows about its triggering event."""

    conversation_id: str
    tenant_id: str
    activity_id: str | None = None
    service_url: str | None = None
    bot_account: ChannelAccount | None = None
    participants: tuple[Participant, ...] = ()

    @classmethod
    def from_activity(cls, activity: Activity) -> ConversationContext:
        if activity.conversation is None:
            raise ValueError("activity has no conversation")
        return cls(
            conversation_id=activity.conversation.id,
            tenant_id=activity.tenant_id or "",
            activity_id=activity.id,
            service_url=activity.service_url,
            bot_account=activity.recipient,
        )


@dataclass(frozen=True)
class InvokeResponse:
    """Synchronous acknowledgment returned for an invoke activity."""

    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, activity_id: str | None) -> InvokeResponse:
        return cls(status=HTTPStatus.OK, body={"id": activity_id or ""})
