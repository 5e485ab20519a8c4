"""
Dispatcher

Runs one chat message through the bot pipeline:

1. Parse the message into an Action (silently ignore non-commands)
2. Query the documentation service
3. Classify the outcome
4. Format the result
5. Send at most one reply

Only "not found" is reported to the room. Transport and decode failures are
logged for operators; the room sees nothing.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable

from ..common.doc_client import (
    DocServiceClient,
    QueryOutcome,
    Success,
    NotFound,
    TransportFailure,
    DecodeFailure,
)
from ..common.errors import ChatSendError, ParseFailure
from .command_parser import Action, NativeQuery, parse
from .formatter import NO_RESULTS, ReplyContent, format_reply

logger = logging.getLogger("jassbot.bot.dispatcher")

ReplySender = Callable[[ReplyContent], Awaitable[None]]


class DispatchStatus(str, Enum):
    """What a single handle() call did"""
    IGNORED = "ignored"          # not a command
    EMPTY = "empty"              # found, but nothing worth posting
    REPLIED = "replied"
    NOT_FOUND = "not_found"      # "No results found" posted
    FAILED = "failed"            # transport/decode failure, logged only
    SEND_FAILED = "send_failed"


class Dispatcher:
    """
    Stateless message handler.

    Holds only the documentation client and the doc page base URL, so a
    single instance serves concurrent messages.
    """

    def __init__(self, client: DocServiceClient, doc_base: str):
        self._client = client
        self._doc_base = doc_base

    async def handle(self, text: str, send: ReplySender) -> DispatchStatus:
        """
        Handle one message body.

        Args:
            text: Plain-text message body
            send: Coroutine function delivering a reply to the originating room

        Returns:
            DispatchStatus describing the outcome
        """
        try:
            action = parse(text)
        except ParseFailure as e:
            logger.debug("Ignoring message: %s", e)
            return DispatchStatus.IGNORED

        outcome = await self._query(action)

        if isinstance(outcome, NotFound):
            return await self._send(send, NO_RESULTS, action, DispatchStatus.NOT_FOUND)

        if isinstance(outcome, (TransportFailure, DecodeFailure)):
            logger.error(
                "%s for %s %r: %s",
                type(outcome).__name__, type(action).__name__, action.query, outcome.detail,
                extra={
                    "failure": type(outcome).__name__,
                    "action": type(action).__name__,
                    "query": action.query,
                },
            )
            return DispatchStatus.FAILED

        content = format_reply(outcome.value, action.query, self._doc_base)
        if content is None:
            logger.info("Nothing to display for %r", action.query)
            return DispatchStatus.EMPTY

        return await self._send(send, content, action, DispatchStatus.REPLIED)

    async def _query(self, action: Action) -> QueryOutcome:
        logger.debug("Querying %s %r", type(action).__name__, action.query)
        if isinstance(action, NativeQuery):
            return await self._client.fetch_native(action.query)
        return await self._client.fetch_doc(action.query)

    async def _send(
        self,
        send: ReplySender,
        content: ReplyContent,
        action: Action,
        status: DispatchStatus,
    ) -> DispatchStatus:
        try:
            await send(content)
        except ChatSendError as e:
            logger.warning(
                "Failed to send reply for %r: %s", action.query, e.message,
                extra={"room_id": e.room_id, "query": action.query},
            )
            return DispatchStatus.SEND_FAILED

        logger.info("Replied to %s %r (%s)", type(action).__name__, action.query, status.value)
        return status
