"""
Matrix Client

Minimal Matrix client-server API client over httpx: password login,
/sync long-polling and m.room.message sending.

Rich replies are sent with both the markdown source as `body` and the
rendered HTML as `formatted_body`, so clients without HTML support still
get readable text.
"""

import logging
import uuid
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import markdown

from ..common.errors import ChatSendError, MatrixError
from .formatter import ReplyContent

logger = logging.getLogger("jassbot.bot.matrix_client")

CLIENT_API = "/_matrix/client/v3"
_SYNC_HTTP_TIMEOUT_BUFFER_SECONDS = 10.0


def render_message_content(content: ReplyContent) -> Dict[str, Any]:
    """Build the m.room.message event content for a reply"""
    event: Dict[str, Any] = {"msgtype": "m.text", "body": content.text}
    if content.rich:
        event["format"] = "org.matrix.custom.html"
        event["formatted_body"] = markdown.markdown(content.text)
    return event


class MatrixClient:
    """
    Matrix session for a single bot account.

    Usage:
        client = MatrixClient("https://matrix.org", "@jassbot:matrix.org")
        await client.login(password)
        payload = await client.sync(since=None, timeout_ms=0)
        await client.send_message(room_id, ReplyContent("hi"))
        await client.close()
    """

    def __init__(
        self,
        homeserver: str,
        user_id: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Matrix client.

        Args:
            homeserver: Homeserver base URL, e.g. "https://matrix.org"
            user_id: Fully qualified bot user id, e.g. "@jassbot:matrix.org"
            timeout: Default request timeout in seconds (sync adds its own)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.homeserver = homeserver.rstrip("/")
        self.user_id = user_id
        self.access_token: Optional[str] = None
        self._http = httpx.AsyncClient(
            base_url=self.homeserver + CLIENT_API,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    def is_logged_in(self) -> bool:
        return self.access_token is not None

    def _auth_headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise MatrixError("Not logged in")
        return {"Authorization": f"Bearer {self.access_token}"}

    async def login(self, password: str, device_name: str = "jassbot") -> str:
        """Log in with a password and keep the access token"""
        body = {
            "type": "m.login.password",
            "identifier": {"type": "m.id.user", "user": self.user_id},
            "password": password,
            "initial_device_display_name": device_name,
        }
        try:
            response = await self._http.post("/login", json=body)
        except httpx.HTTPError as e:
            raise MatrixError(f"Failed to reach homeserver {self.homeserver}: {e}") from e

        if response.status_code != 200:
            raise MatrixError(
                f"Failed to login to {self.homeserver}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        data = _json_object(response)
        token = data.get("access_token") if data else None
        if not isinstance(token, str) or not token:
            raise MatrixError(f"Login to {self.homeserver} returned no access token")

        self.access_token = token
        logger.info("Logged in as %s", self.user_id)
        return self.access_token

    async def sync(self, since: Optional[str] = None, timeout_ms: int = 30000) -> Dict[str, Any]:
        """Fetch one /sync payload"""
        params: Dict[str, Any] = {"timeout": timeout_ms}
        if since:
            params["since"] = since

        try:
            response = await self._http.get(
                "/sync",
                params=params,
                headers=self._auth_headers(),
                timeout=timeout_ms / 1000 + _SYNC_HTTP_TIMEOUT_BUFFER_SECONDS,
            )
        except httpx.HTTPError as e:
            raise MatrixError(f"Sync failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise MatrixError(f"Sync failed: HTTP {response.status_code}", status_code=response.status_code)

        payload = _json_object(response)
        if payload is None:
            raise MatrixError("Sync failed: response is not a JSON object")

        return payload

    async def send_message(self, room_id: str, content: ReplyContent) -> str:
        """Send a reply to a room and return the created event id"""
        txn_id = uuid.uuid4().hex
        path = f"/rooms/{quote(room_id, safe='')}/send/m.room.message/{txn_id}"

        try:
            response = await self._http.put(
                path,
                json=render_message_content(content),
                headers=self._auth_headers(),
            )
        except (httpx.HTTPError, MatrixError) as e:
            raise ChatSendError(f"Send failed: {e}", room_id=room_id) from e

        if response.status_code != 200:
            raise ChatSendError(f"Send failed: HTTP {response.status_code}", room_id=room_id)

        # the reply was accepted; the event id is informational only
        data = _json_object(response)
        if data is None:
            logger.warning("Send to %s accepted but response is not a JSON object", room_id)
            return ""
        return data.get("event_id", "")

    async def close(self) -> None:
        await self._http.aclose()


def _json_object(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Decoded JSON body if it is an object, else None"""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def extract_next_batch(sync_payload: Dict[str, Any], fallback: Optional[str] = None) -> Optional[str]:
    """Sync token to resume from; keeps the previous one if absent"""
    token = sync_payload.get("next_batch")
    if isinstance(token, str) and token:
        return token
    return fallback
