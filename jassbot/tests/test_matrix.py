"""
Tests for the Matrix collaborator

Tests event parsing, login/sync/send over httpx.MockTransport, and the
reply capability handed to the Dispatcher.
"""

import json

import httpx
import pytest


BOT = "@jassbot:hs.example"
ROOM = "!room:hs.example"


def text_event(body, sender="@alice:hs.example", msgtype="m.text", **content):
    return {
        "type": "m.room.message",
        "sender": sender,
        "event_id": "$evt",
        "origin_server_ts": 1700000000000,
        "content": {"msgtype": msgtype, "body": body, **content},
    }


def sync_payload(*events, room_id=ROOM, next_batch="s2"):
    return {
        "next_batch": next_batch,
        "rooms": {"join": {room_id: {"timeline": {"events": list(events)}}}},
    }


def make_client(handler):
    from jassbot.bot.matrix_client import MatrixClient
    return MatrixClient("https://hs.example", BOT, transport=httpx.MockTransport(handler))


class TestMatrixHandler:
    """Tests for MatrixHandler event parsing"""

    @pytest.fixture
    def handler(self):
        from jassbot.bot.handlers import MatrixHandler
        return MatrixHandler(make_client(lambda request: httpx.Response(500)))

    def test_parse_text_message(self, handler):
        message = handler.parse_event(ROOM, text_event("!d CreateUnit"))

        assert message.text == "!d CreateUnit"
        assert message.room_id == ROOM
        assert message.sender == "@alice:hs.example"
        assert message.is_own is False

    @pytest.mark.parametrize("msgtype", ["m.image", "m.notice", "m.emote", "m.file"])
    def test_non_text_ignored(self, handler, msgtype):
        assert handler.parse_event(ROOM, text_event("!d CreateUnit", msgtype=msgtype)) is None

    def test_non_message_event_ignored(self, handler):
        event = {"type": "m.room.member", "sender": "@alice:hs.example", "content": {"membership": "join"}}

        assert handler.parse_event(ROOM, event) is None

    def test_edit_ignored(self, handler):
        event = text_event("* !d CreateUnit", **{"m.relates_to": {"rel_type": "m.replace", "event_id": "$orig"}})

        assert handler.parse_event(ROOM, event) is None

    def test_own_message_not_processed(self, handler):
        message = handler.parse_event(ROOM, text_event("No results found", sender=BOT))

        assert message.is_own is True
        assert handler.should_process(message) is False

    def test_iter_messages(self, handler):
        payload = sync_payload(
            text_event("!j CreateUnit"),
            text_event("picture", msgtype="m.image"),
            text_event("reply", sender=BOT),
            text_event("   "),
            text_event("hello"),
        )

        messages = list(handler.iter_messages(payload))

        assert [m.text for m in messages] == ["!j CreateUnit", "hello"]

    def test_iter_messages_empty_payload(self, handler):
        assert list(handler.iter_messages({"next_batch": "s1"})) == []


class TestMatrixClient:
    """Tests for MatrixClient HTTP calls"""

    @pytest.mark.asyncio
    async def test_login_stores_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok", "user_id": BOT})

        client = make_client(handler)
        token = await client.login("hunter2")

        assert token == "tok"
        assert client.is_logged_in
        assert seen[0].url.path == "/_matrix/client/v3/login"
        body = json.loads(seen[0].content)
        assert body["type"] == "m.login.password"
        assert body["identifier"] == {"type": "m.id.user", "user": BOT}
        assert body["password"] == "hunter2"
        await client.close()

    @pytest.mark.asyncio
    async def test_login_failure(self):
        from jassbot.common.errors import MatrixError

        client = make_client(lambda request: httpx.Response(403, json={"errcode": "M_FORBIDDEN"}))

        with pytest.raises(MatrixError) as exc_info:
            await client.login("wrong")

        assert exc_info.value.status_code == 403
        assert not client.is_logged_in

    @pytest.mark.asyncio
    async def test_sync_sends_token_and_since(self):
        from jassbot.bot.matrix_client import extract_next_batch

        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, json=sync_payload(next_batch="s3"))

        client = make_client(handler)
        await client.login("pw")
        payload = await client.sync(since="s2", timeout_ms=1000)

        request = seen[-1]
        assert request.headers["Authorization"] == "Bearer tok"
        assert request.url.params["since"] == "s2"
        assert request.url.params["timeout"] == "1000"
        assert extract_next_batch(payload, fallback="s2") == "s3"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json={"user_id": BOT}),
        httpx.Response(200, json=["tok"]),
    ])
    async def test_login_without_token_raises_matrix_error(self, response):
        from jassbot.common.errors import MatrixError

        client = make_client(lambda request: response)

        with pytest.raises(MatrixError):
            await client.login("pw")

        assert not client.is_logged_in

    @pytest.mark.asyncio
    async def test_sync_non_json_raises_matrix_error(self):
        from jassbot.common.errors import MatrixError

        client = make_client(lambda request: httpx.Response(200, text="<html>502 gateway</html>"))
        client.access_token = "tok"

        with pytest.raises(MatrixError):
            await client.sync(since="s1")

    @pytest.mark.asyncio
    async def test_sync_requires_login(self):
        from jassbot.common.errors import MatrixError

        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(MatrixError):
            await client.sync()

    @pytest.mark.asyncio
    async def test_send_plain(self):
        from jassbot.bot.formatter import ReplyContent

        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, json={"event_id": "$sent"})

        client = make_client(handler)
        await client.login("pw")
        event_id = await client.send_message(ROOM, ReplyContent("r1\nr2", rich=False))

        request = seen[-1]
        assert event_id == "$sent"
        assert request.method == "PUT"
        assert "/rooms/%21room%3Ahs.example/send/m.room.message/" in request.url.raw_path.decode()
        assert json.loads(request.content) == {"msgtype": "m.text", "body": "r1\nr2"}

    @pytest.mark.asyncio
    async def test_send_failure_raises_chat_send_error(self):
        from jassbot.bot.formatter import ReplyContent
        from jassbot.common.errors import ChatSendError

        def handler(request):
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(403, json={"errcode": "M_FORBIDDEN"})

        client = make_client(handler)
        await client.login("pw")

        with pytest.raises(ChatSendError) as exc_info:
            await client.send_message(ROOM, ReplyContent("hi"))

        assert exc_info.value.room_id == ROOM

    @pytest.mark.asyncio
    async def test_send_accepted_with_non_json_body(self):
        from jassbot.bot.formatter import ReplyContent

        def handler(request):
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, text="<html>proxy</html>")

        client = make_client(handler)
        await client.login("pw")

        assert await client.send_message(ROOM, ReplyContent("hi")) == ""

    @pytest.mark.asyncio
    async def test_dispatch_with_non_json_send_body(self):
        from unittest.mock import AsyncMock, Mock
        from jassbot.bot.dispatcher import Dispatcher, DispatchStatus
        from jassbot.bot.handlers import MatrixHandler
        from jassbot.common.doc_client import NotFound

        def handler(request):
            if request.url.path.endswith("/login"):
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, text="<html>proxy</html>")

        client = make_client(handler)
        await client.login("pw")
        doc_client = Mock()
        doc_client.fetch_doc = AsyncMock(return_value=NotFound())
        dispatcher = Dispatcher(doc_client, doc_base="https://docs.example/jassbot")

        status = await dispatcher.handle("!d Qwerty", MatrixHandler(client).reply_sender(ROOM))

        assert status == DispatchStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_send_without_login_raises_chat_send_error(self):
        from jassbot.bot.formatter import ReplyContent
        from jassbot.common.errors import ChatSendError

        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ChatSendError):
            await client.send_message(ROOM, ReplyContent("hi"))


class TestRenderMessageContent:
    """Tests for m.room.message content rendering"""

    def test_plain(self):
        from jassbot.bot.formatter import ReplyContent
        from jassbot.bot.matrix_client import render_message_content

        content = render_message_content(ReplyContent("a <b>", rich=False))

        assert content == {"msgtype": "m.text", "body": "a <b>"}

    def test_rich_renders_link(self):
        from jassbot.bot.formatter import ReplyContent
        from jassbot.bot.matrix_client import render_message_content

        text = "<https://docs.example/jassbot/doc/CreateUnit>\n\n* id parameter: owner"
        content = render_message_content(ReplyContent(text, rich=True))

        assert content["body"] == text
        assert content["format"] == "org.matrix.custom.html"
        assert '<a href="https://docs.example/jassbot/doc/CreateUnit">' in content["formatted_body"]
        assert "<li>id parameter: owner</li>" in content["formatted_body"]


class TestReplySender:
    """Tests for the Dispatcher-facing send capability"""

    @pytest.mark.asyncio
    async def test_reply_sender_targets_room(self):
        from unittest.mock import AsyncMock, Mock
        from jassbot.bot.formatter import ReplyContent
        from jassbot.bot.handlers import MatrixHandler

        client = Mock()
        client.user_id = BOT
        client.send_message = AsyncMock(return_value="$sent")
        handler = MatrixHandler(client)

        send = handler.reply_sender(ROOM)
        await send(ReplyContent("hi"))

        client.send_message.assert_awaited_once_with(ROOM, ReplyContent("hi"))
