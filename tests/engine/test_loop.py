"""Tests for the engine loop: end-to-end handling of inbound events."""

import asyncio

import pytest

from mangabot.bus.events import InboundMessage, OutboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.config.schema import MessagesConfig
from mangabot.delivery.sequencer import DeliverySequencer
from mangabot.engine.conversation import ConversationEngine
from mangabot.engine.loop import EngineLoop
from mangabot.scraper.types import MangaInfo
from mangabot.session.manager import Session, SessionManager
from tests.conftest import FakeExtractor, make_chapters


def build_loop(sessions: SessionManager, extractor: FakeExtractor, send, delay: float = 0) -> EngineLoop:
    engine = ConversationEngine(sessions, extractor)
    return EngineLoop(MessageBus(), engine, DeliverySequencer(send, image_delay=delay))


class TestProcessDirect:
    """Scenarios driven through process_direct."""

    @pytest.mark.asyncio
    async def test_search_scenario(self, sessions: SessionManager, send, sent: list[OutboundMessage]) -> None:
        info = MangaInfo(title="My Manga", cover_image="https://cdn.example/cover.jpg", chapters=make_chapters(2))
        loop = build_loop(sessions, FakeExtractor(info=info), send)

        report = await loop.process_direct("My Manga", channel="messenger", sender_id="7")

        assert report.sent == 2
        assert sent[0].content.startswith("📖 My Manga")
        assert sent[1].media == ["https://cdn.example/cover.jpg"]
        assert sessions.get("messenger:7").title == "My Manga"

    @pytest.mark.asyncio
    async def test_chapter_scenario(self, sessions: SessionManager, send, sent: list[OutboundMessage]) -> None:
        chapters = make_chapters(5)
        sessions.set("console:direct", Session(title="My Manga", chapters=chapters))
        images = [f"https://cdn.example/{i}.jpg" for i in range(4)]
        loop = build_loop(sessions, FakeExtractor(images={chapters[2].url: images}), send)

        await loop.process_direct("3")

        assert sent[0].content == MessagesConfig().progress.format(number=3)
        assert [m.media[0] for m in sent[1:]] == images

    @pytest.mark.asyncio
    async def test_empty_input_sends_nothing(self, sessions: SessionManager, send) -> None:
        loop = build_loop(sessions, FakeExtractor(), send)

        report = await loop.process_direct("   ")

        assert report.total == 0
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_engine_error_is_contained(self, sessions: SessionManager, send) -> None:
        extractor = FakeExtractor()
        extractor.fetch_listing_info.side_effect = RuntimeError("boom")
        loop = build_loop(sessions, extractor, send)

        assert await loop.process_direct("anything") is None
        send.assert_not_awaited()


class TestRun:
    """Tests for the bus-driven loop."""

    @pytest.mark.asyncio
    async def test_consumes_bus_and_delivers(self, sessions: SessionManager, send, sent: list[OutboundMessage]) -> None:
        info = MangaInfo(title="My Manga", chapters=make_chapters(1))
        loop = build_loop(sessions, FakeExtractor(info=info), send)

        runner = asyncio.create_task(loop.run())
        await loop.bus.publish_inbound(
            InboundMessage(channel="messenger", sender_id="1", chat_id="1", content="My Manga")
        )
        for _ in range(100):
            if sent:
                break
            await asyncio.sleep(0.01)
        loop.stop()
        await runner
        await loop.drain()

        assert len(sent) == 1
        assert sent[0].chat_id == "1"

    @pytest.mark.asyncio
    async def test_same_user_events_are_serialized(self, sessions: SessionManager) -> None:
        chapters = make_chapters(2)
        sessions.set("messenger:1", Session(title="T", chapters=chapters))
        extractor = FakeExtractor(images={chapters[0].url: ["a", "b", "c"]})
        order: list[str] = []

        async def slow_send(msg: OutboundMessage) -> None:
            order.append(msg.content or msg.media[0])
            await asyncio.sleep(0.01)

        loop = build_loop(sessions, extractor, slow_send)
        first = InboundMessage(channel="messenger", sender_id="1", chat_id="1", content="1")
        reset = InboundMessage(channel="messenger", sender_id="1", chat_id="1", content="list")

        await asyncio.gather(loop._dispatch(first), loop._dispatch(reset))

        messages = MessagesConfig()
        assert order == [messages.progress.format(number=1), "a", "b", "c", messages.reset_prompt]
        assert sessions.get("messenger:1") is None
