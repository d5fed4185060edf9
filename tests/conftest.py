"""Shared test fixtures for mangabot tests.

Provides HTML builders for Madara-style listing and chapter pages, a fake
extractor that records calls, and a recording send callback for delivery
tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mangabot.bus.events import OutboundMessage
from mangabot.config.schema import MessagesConfig
from mangabot.scraper.extractor import build_listing_url
from mangabot.scraper.types import Chapter, MangaInfo
from mangabot.session.manager import SessionManager

SITE_ROOT = "https://manga.example"


def listing_html(
    title: str | None = "My Manga",
    chapter_urls: list[str] | None = None,
    cover: str | None = "https://cdn.example/cover.jpg",
) -> str:
    """Build a listing page in the site's markup."""
    parts = ["<html><body>"]
    if title is not None:
        parts.append(f'<div class="post-title"><h1>\n  {title}  \n</h1></div>')
    if cover is not None:
        parts.append(f'<div class="summary_image"><a href="#"><img src="{cover}"></a></div>')
    parts.append('<ul class="main version-chap">')
    for url in chapter_urls or []:
        parts.append(f'<li class="wp-manga-chapter"><a href="{url}">Chapter</a></li>')
    parts.append("</ul></body></html>")
    return "".join(parts)


def chapter_html(image_urls: list[str]) -> str:
    """Build a chapter page with images inside the reading region."""
    imgs = "".join(f'<div class="page-break"><img src="{u}"></div>' for u in image_urls)
    return (
        "<html><body>"
        '<img src="https://cdn.example/logo.png">'
        f'<div class="reading-content">{imgs}</div>'
        "</body></html>"
    )


class FakeExtractor:
    """Extractor double returning canned results and recording calls."""

    def __init__(
        self,
        info: MangaInfo | None = None,
        images: dict[str, list[str]] | None = None,
    ) -> None:
        self.info = info
        self.images = images or {}
        self.fetch_listing_info = AsyncMock(side_effect=self._listing)
        self.fetch_chapter_images = AsyncMock(side_effect=self._images)

    def listing_url(self, query: str) -> str:
        return build_listing_url(SITE_ROOT, query)

    async def _listing(self, url: str) -> MangaInfo | None:
        return self.info

    async def _images(self, url: str) -> list[str]:
        return self.images.get(url, [])


def make_chapters(count: int) -> list[Chapter]:
    """Chapters numbered 1..count with predictable URLs."""
    return [Chapter(number=i, url=f"{SITE_ROOT}/ch/{i}/") for i in range(1, count + 1)]


@pytest.fixture
def messages() -> MessagesConfig:
    """Default user-visible templates."""
    return MessagesConfig()


@pytest.fixture
def sessions() -> SessionManager:
    """Empty in-memory session store."""
    return SessionManager()


@pytest.fixture
def sent() -> list[OutboundMessage]:
    """List that collects everything passed to the send callback."""
    return []


@pytest.fixture
def send(sent: list[OutboundMessage]) -> AsyncMock:
    """Send callback that records outbound messages."""

    async def _send(msg: OutboundMessage) -> None:
        sent.append(msg)

    return AsyncMock(side_effect=_send)
