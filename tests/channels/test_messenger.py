"""Tests for the Messenger channel: webhook intake and Send API calls."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from mangabot.bus.events import OutboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.channels.messenger import MessengerChannel
from mangabot.config.schema import MessengerConfig
from mangabot.delivery.errors import DeliveryError


def make_channel(**overrides) -> MessengerChannel:
    config = MessengerConfig(
        enabled=True,
        verify_token="secret",
        page_access_token="page-token",
        **overrides,
    )
    return MessengerChannel(config, MessageBus())


def messaging_body(*events: dict) -> dict:
    return {"object": "page", "entry": [{"id": "page", "messaging": list(events)}]}


def text_event(sender: str, text: str) -> dict:
    return {"sender": {"id": sender}, "recipient": {"id": "page"}, "message": {"mid": "m1", "text": text}}


class TestVerification:
    """Tests for the GET subscription handshake."""

    def test_valid_handshake_returns_challenge(self) -> None:
        client = TestClient(make_channel().app)
        r = client.get(
            "/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "secret", "hub.challenge": "12345"},
        )
        assert r.status_code == 200
        assert r.text == "12345"

    def test_wrong_token_rejected(self) -> None:
        client = TestClient(make_channel().app)
        r = client.get(
            "/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "12345"},
        )
        assert r.status_code == 403

    def test_wrong_mode_rejected(self) -> None:
        client = TestClient(make_channel().app)
        r = client.get("/webhook", params={"hub.mode": "unsubscribe", "hub.verify_token": "secret"})
        assert r.status_code == 403

    def test_unconfigured_token_rejects_everything(self) -> None:
        channel = MessengerChannel(MessengerConfig(enabled=True), MessageBus())
        r = TestClient(channel.app).get("/webhook", params={"hub.mode": "subscribe", "hub.verify_token": ""})
        assert r.status_code == 403

    def test_custom_webhook_path(self) -> None:
        client = TestClient(make_channel(webhook_path="/hooks/messenger").app)
        r = client.get(
            "/hooks/messenger",
            params={"hub.mode": "subscribe", "hub.verify_token": "secret", "hub.challenge": "ok"},
        )
        assert r.text == "ok"


class TestWebhookEvents:
    """Tests for POST event intake."""

    def test_text_event_published(self) -> None:
        channel = make_channel()
        r = TestClient(channel.app).post("/webhook", json=messaging_body(text_event("100", "  One Piece  ")))

        assert r.status_code == 200
        assert channel.bus.inbound_size == 1
        msg = channel.bus.inbound.get_nowait()
        assert msg.channel == "messenger"
        assert msg.sender_id == "100"
        assert msg.chat_id == "100"
        assert msg.content == "One Piece"
        assert msg.metadata["mid"] == "m1"

    def test_multiple_events(self) -> None:
        channel = make_channel()
        body = messaging_body(text_event("1", "a"), text_event("2", "b"))
        TestClient(channel.app).post("/webhook", json=body)
        assert channel.bus.inbound_size == 2

    def test_event_without_text_ignored(self) -> None:
        channel = make_channel()
        event = {"sender": {"id": "1"}, "message": {"mid": "m", "attachments": [{"type": "image"}]}}
        r = TestClient(channel.app).post("/webhook", json=messaging_body(event))

        assert r.status_code == 200
        assert channel.bus.inbound_size == 0

    def test_echo_ignored(self) -> None:
        channel = make_channel()
        event = {"sender": {"id": "page"}, "message": {"is_echo": True, "text": "hello"}}
        TestClient(channel.app).post("/webhook", json=messaging_body(event))
        assert channel.bus.inbound_size == 0

    def test_missing_entry_is_bad_request(self) -> None:
        channel = make_channel()
        r = TestClient(channel.app).post("/webhook", json={"object": "page"})
        assert r.status_code == 400

    def test_missing_messaging_is_bad_request(self) -> None:
        channel = make_channel()
        r = TestClient(channel.app).post("/webhook", json={"entry": [{"id": "page"}]})
        assert r.status_code == 400

    def test_invalid_json_is_bad_request(self) -> None:
        channel = make_channel()
        r = TestClient(channel.app).post(
            "/webhook", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 400

    def test_sender_not_in_allow_list_dropped(self) -> None:
        channel = make_channel(allow_from=["200"])
        TestClient(channel.app).post("/webhook", json=messaging_body(text_event("100", "hi")))
        assert channel.bus.inbound_size == 0


class TestSend:
    """Tests for outbound Send API calls."""

    @staticmethod
    def attach(channel: MessengerChannel, handler) -> list[httpx.Request]:
        requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        channel._http = httpx.AsyncClient(transport=httpx.MockTransport(record))
        return requests

    @pytest.mark.asyncio
    async def test_send_text(self) -> None:
        channel = make_channel()
        requests = self.attach(channel, lambda r: httpx.Response(200, json={"message_id": "x"}))

        await channel.send(OutboundMessage(channel="messenger", chat_id="100", content="hello"))

        assert len(requests) == 1
        req = requests[0]
        assert req.url.path == "/v19.0/me/messages"
        assert req.url.params["access_token"] == "page-token"
        assert json.loads(req.content) == {"recipient": {"id": "100"}, "message": {"text": "hello"}}

    @pytest.mark.asyncio
    async def test_send_image(self) -> None:
        channel = make_channel()
        requests = self.attach(channel, lambda r: httpx.Response(200, json={}))

        await channel.send(OutboundMessage(channel="messenger", chat_id="100", media=["https://cdn.example/a.jpg"]))

        payload = json.loads(requests[0].content)
        assert payload["message"] == {
            "attachment": {"type": "image", "payload": {"url": "https://cdn.example/a.jpg", "is_reusable": True}}
        }

    @pytest.mark.asyncio
    async def test_empty_image_url_skipped(self) -> None:
        channel = make_channel()
        requests = self.attach(channel, lambda r: httpx.Response(200, json={}))

        await channel.send(OutboundMessage(channel="messenger", chat_id="100", media=[""]))

        assert requests == []

    @pytest.mark.asyncio
    async def test_http_error_raises_delivery_error(self) -> None:
        channel = make_channel()
        self.attach(channel, lambda r: httpx.Response(400, json={"error": {"message": "bad"}}))

        with pytest.raises(DeliveryError) as exc_info:
            await channel.send(OutboundMessage(channel="messenger", chat_id="100", content="hello"))

        assert "400" in str(exc_info.value)
        assert exc_info.value.chat_id == "100"

    @pytest.mark.asyncio
    async def test_network_error_raises_delivery_error(self) -> None:
        channel = make_channel()

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        self.attach(channel, handler)

        with pytest.raises(DeliveryError):
            await channel.send(OutboundMessage(channel="messenger", chat_id="100", content="hello"))

    @pytest.mark.asyncio
    async def test_send_before_start_raises(self) -> None:
        channel = make_channel()
        with pytest.raises(DeliveryError):
            await channel.send(OutboundMessage(channel="messenger", chat_id="100", content="hello"))

    @pytest.mark.asyncio
    async def test_stop_closes_client(self) -> None:
        channel = make_channel()
        self.attach(channel, lambda r: httpx.Response(200))
        channel._running = True

        await channel.stop()

        assert channel._http is None
        assert not channel.is_running
