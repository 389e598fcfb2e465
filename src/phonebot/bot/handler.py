"""
Call-up orchestrator.

Turns one "connect these two chat participants by phone" invoke into a
single telephony dispatch request, or into a chat message explaining why
no call was placed. The invoke is acknowledged in both cases.

Pipeline states:

    START -> PARTICIPANTS_FETCHED -> COUNT_VALIDATED -> TOKEN_ACQUIRED
          -> PHONES_RESOLVED -> DISPATCHED -> ACKNOWLEDGED

with ERROR reachable from every non-terminal state. Each step returns a
Result; only ``handle_invoke`` converts an Err into a user message.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from enum import Enum
from typing import Callable

import anyio

from phonebot.auth.token import TokenAcquirer, TokenResult
from phonebot.bot.connector import ChatConnector
from phonebot.bot.messages import render_error
from phonebot.bot.models import ConversationContext, InvokeResponse, Participant
from phonebot.config import Settings
from phonebot.directory.graph_client import DirectoryClient
from phonebot.shared.exceptions import CallDispatchError, TokenAcquisitionError
from phonebot.shared.logging import correlation_id_var, get_logger
from phonebot.shared.result import Err, ErrorKind, Ok, Result
from phonebot.telephony.interface import CallDispatcher, CallRequest
from phonebot.telephony.normalizer import normalize_phone

logger = get_logger(__name__)

REQUIRED_PARTICIPANTS = 2


class OrchestrationState(str, Enum):
    START = "start"
    PARTICIPANTS_FETCHED = "participants_fetched"
    COUNT_VALIDATED = "count_validated"
    TOKEN_ACQUIRED = "token_acquired"
    PHONES_RESOLVED = "phones_resolved"
    DISPATCHED = "dispatched"
    ACKNOWLEDGED = "acknowledged"
    ERROR = "error"


DirectoryClientFactory = Callable[[Settings, str], DirectoryClient]


class CallUpHandler:
    """Handles the invoke activity that asks for a phone call between two members."""

    def __init__(
        self,
        settings: Settings,
        connector: ChatConnector,
        token_acquirer: TokenAcquirer,
        dispatcher: CallDispatcher,
        directory_client_factory: DirectoryClientFactory = DirectoryClient,
    ) -> None:
        self._settings = settings
        self._connector = connector
        self._token_acquirer = token_acquirer
        self._dispatcher = dispatcher
        self._directory_client_factory = directory_client_factory
        self.state = OrchestrationState.START

    def _transition(self, state: OrchestrationState) -> None:
        logger.debug(
            "Call-up state transition",
            extra={"from_state": self.state.value, "to_state": state.value},
        )
        self.state = state

    async def handle_invoke(self, context: ConversationContext) -> InvokeResponse:
        """Run the pipeline for one invoke and always return the acknowledgment."""
        correlation_id_var.set(context.activity_id)
        self.state = OrchestrationState.START

        result: Result[CallRequest]
        try:
            with anyio.fail_after(self._settings.invoke_timeout_seconds):
                result = await self._run(context)
        except TimeoutError:
            result = Err(ErrorKind.UNHANDLED_FAILURE, "the request timed out")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Unhandled error during call-up")
            result = Err(ErrorKind.UNHANDLED_FAILURE, str(e) or type(e).__name__)

        if isinstance(result, Err):
            await self._report(context, result)

        self._transition(OrchestrationState.ACKNOWLEDGED)
        return InvokeResponse.ok(context.activity_id)

    async def _report(self, context: ConversationContext, err: Err) -> None:
        self._transition(OrchestrationState.ERROR)
        logger.error(
            "Call-up failed",
            extra={
                "error_kind": err.kind.value,
                "detail": err.detail,
                "conversation_id": context.conversation_id,
            },
        )
        try:
            await self._connector.send_message(context, render_error(err))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Could not deliver error message to the conversation")

    async def _run(self, context: ConversationContext) -> Result[CallRequest]:
        fetched = await self._fetch_participants(context)
        if isinstance(fetched, Err):
            return fetched
        context = replace(context, participants=tuple(fetched.value))
        self._transition(OrchestrationState.PARTICIPANTS_FETCHED)

        if len(context.participants) != REQUIRED_PARTICIPANTS:
            return Err(ErrorKind.WRONG_PARTICIPANT_COUNT, str(len(context.participants)))
        self._transition(OrchestrationState.COUNT_VALIDATED)

        token = await self._acquire_token(context.tenant_id)
        if isinstance(token, Err):
            return token
        self._transition(OrchestrationState.TOKEN_ACQUIRED)

        caller, callee = context.participants
        phones = await self._resolve_phones(token.value, caller, callee)
        if isinstance(phones, Err):
            return phones
        self._transition(OrchestrationState.PHONES_RESOLVED)

        from_phone, to_phone = phones.value
        dispatched = await self._dispatch(from_phone, to_phone)
        if isinstance(dispatched, Err):
            return dispatched
        self._transition(OrchestrationState.DISPATCHED)
        return dispatched

    async def _fetch_participants(self, context: ConversationContext) -> Result[list[Participant]]:
        try:
            participants = await self._connector.list_participants(context)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Listing conversation participants failed")
            return Err(ErrorKind.UNHANDLED_FAILURE, str(e) or type(e).__name__)
        return Ok(list(participants))

    async def _acquire_token(self, tenant_id: str) -> Result[str]:
        try:
            token: TokenResult | None = await self._token_acquirer.acquire(
                tenant_id, self._settings
            )
        except TokenAcquisitionError as e:
            logger.error(
                "Token acquisition failed",
                extra={"tenant_id": tenant_id, "error_code": e.error_code, "error": e.message},
            )
            return Err(ErrorKind.AUTHENTICATION_FAILURE, e.message)

        if token is None or not token.is_valid:
            return Err(ErrorKind.AUTHENTICATION_FAILURE, "empty or expired token")
        return Ok(token.access_token)

    async def _resolve_phones(
        self,
        access_token: str,
        caller: Participant,
        callee: Participant,
    ) -> Result[tuple[str, str]]:
        directory = self._directory_client_factory(self._settings, access_token)

        # Both lookups run concurrently; the caller is still checked first.
        lookups = await asyncio.gather(
            directory.get_user_phone(caller.directory_id),
            directory.get_user_phone(callee.directory_id),
            return_exceptions=True,
        )

        phones: list[str] = []
        for participant, lookup in zip((caller, callee), lookups):
            if isinstance(lookup, asyncio.CancelledError):
                raise lookup
            if isinstance(lookup, BaseException):
                logger.error(
                    "Directory lookup failed",
                    exc_info=lookup,
                    extra={"directory_id": participant.directory_id},
                )
                return Err(ErrorKind.UNHANDLED_FAILURE, str(lookup) or type(lookup).__name__)
            if not lookup:
                return Err(ErrorKind.PHONE_NOT_FOUND, participant.name)
            phones.append(lookup)

        return Ok((phones[0], phones[1]))

    async def _dispatch(self, from_phone: str, to_phone: str) -> Result[CallRequest]:
        try:
            request = await self._dispatcher.dispatch(
                self._settings,
                normalize_phone(from_phone),
                normalize_phone(to_phone),
            )
        except CallDispatchError as e:
            return Err(ErrorKind.DISPATCH_FAILURE, e.body)
        return Ok(request)
