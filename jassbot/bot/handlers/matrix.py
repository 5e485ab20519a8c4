"""
Matrix Handler

Converts Matrix /sync payloads into Messages and adapts a room into the
reply capability the Dispatcher expects.
"""

from typing import Any, Dict, Iterator, Optional

from ..formatter import ReplyContent
from ..matrix_client import MatrixClient
from .base import BaseHandler, Message


class MatrixHandler(BaseHandler):
    """
    Handler for Matrix joined-room timelines.

    Processes:
    - m.room.message events with msgtype m.text

    Ignores:
    - Non-text messages (images, notices, emotes, files)
    - Edits (m.replace relations)
    - State events and everything else
    - Messages sent by the bot itself
    """

    def __init__(self, client: MatrixClient):
        self._client = client

    def parse_event(self, room_id: str, raw_event: Dict[str, Any]) -> Optional[Message]:
        if raw_event.get("type") != "m.room.message":
            return None

        content = raw_event.get("content") or {}
        if content.get("msgtype") != "m.text":
            return None

        # edits repeat an already answered command
        relates_to = content.get("m.relates_to") or {}
        if relates_to.get("rel_type") == "m.replace":
            return None

        body = content.get("body")
        if not isinstance(body, str):
            return None

        sender = raw_event.get("sender", "")
        return Message(
            text=body,
            sender=sender,
            room_id=room_id,
            event_id=raw_event.get("event_id", ""),
            is_own=sender == self._client.user_id,
        )

    def iter_messages(self, sync_payload: Dict[str, Any]) -> Iterator[Message]:
        """Yield processable messages from joined rooms, in timeline order"""
        joined = (sync_payload.get("rooms") or {}).get("join") or {}
        for room_id, room in joined.items():
            events = ((room or {}).get("timeline") or {}).get("events") or []
            for raw_event in events:
                message = self.parse_event(room_id, raw_event)
                if message and self.should_process(message):
                    yield message

    def reply_sender(self, room_id: str):
        """Return a coroutine function that posts a ReplyContent to room_id"""
        async def send(content: ReplyContent) -> None:
            await self._client.send_message(room_id, content)
        return send
