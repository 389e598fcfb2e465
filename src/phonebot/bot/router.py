"""
FastAPI router for the Bot Framework messaging endpoint.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from phonebot.auth.token import TokenAcquirer
from phonebot.bot.connector import BotConnectorClient
from phonebot.bot.handler import CallUpHandler
from phonebot.bot.models import Activity, ConversationContext
from phonebot.config import Settings, get_settings
from phonebot.shared.logging import get_logger
from phonebot.telephony.factory import build_call_dispatcher

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["bot"])

INVOKE_ACTIVITY = "invoke"


def get_call_up_handler(
    settings: Annotated[Settings, Depends(get_settings)],
) -> CallUpHandler:
    """Build a handler for one request; nothing but Settings is shared."""
    token_acquirer = TokenAcquirer(timeout=settings.http_timeout_seconds)
    return CallUpHandler(
        settings=settings,
        connector=BotConnectorClient(settings, token_acquirer),
        token_acquirer=token_acquirer,
        dispatcher=build_call_dispatcher(settings),
    )


@router.post("/messages")
async def messages(
    activity: Activity,
    handler: Annotated[CallUpHandler, Depends(get_call_up_handler)],
) -> Response:
    """Receive an activity from the Bot Framework channel."""
    if activity.type != INVOKE_ACTIVITY:
        logger.debug("Ignoring activity", extra={"activity_type": activity.type})
        return Response(status_code=status.HTTP_200_OK)

    if activity.conversation is None:
        logger.warning("Invoke activity without conversation", extra={"activity_id": activity.id})
        return JSONResponse(status_code=status.HTTP_200_OK, content={"id": activity.id or ""})

    logger.info(
        "Call-up invoke received",
        extra={
            "activity_id": activity.id,
            "invoke_name": activity.name,
            "conversation_id": activity.conversation.id,
        },
    )

    ack = await handler.handle_invoke(ConversationContext.from_activity(activity))
    return JSONResponse(status_code=ack.status, content=ack.body)
