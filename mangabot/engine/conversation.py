"""
会话引擎模块 (engine/conversation.py)

本模块实现每用户的会话状态机。每条入站文本 t（已去除首尾空白）按下表转移：

| 当前状态 | 输入                       | 动作                                         | 下一状态 |
|----------|----------------------------|----------------------------------------------|----------|
| 任意     | 空文本                     | 忽略                                         | 不变     |
| 任意     | 重置关键字（大小写不敏感） | 删除会话，发送搜索提示                       | Idle     |
| Browsing | 整数 n                     | 校验 n，抓取第 n 章图片，发送进度 + 图片     | 不变     |
| 任意     | 其他文本                   | 新搜索：成功则覆盖会话并发送摘要 + 封面      | Browsing |

要点：
- 空闲状态下的纯数字是合法的搜索词（数字分支只在已有会话时生效）
- 章节编号严格校验，0、负数、超过章节数都视为无效，不做截断
- 新的成功搜索无条件替换已有会话；搜索失败时会话保持不变

引擎本身不发送任何消息，只返回有序的出站动作列表，由投递序列器负责执行。
"""

import re

from loguru import logger

from mangabot.config.schema import MessagesConfig
from mangabot.delivery.actions import ImageMessage, OutboundAction, TextMessage
from mangabot.engine.state import Browsing, current_state
from mangabot.scraper.extractor import MangaExtractor
from mangabot.session.manager import Session, SessionManager

_INTEGER_RE = re.compile(r"[+-]?\d+")


def parse_chapter_number(text: str) -> int | None:
    """
    把文本解析为整数章节编号。

    整段文本必须是一个整数（允许正负号），如 "3"、"-1"、"+2"；
    "3a"、"1.5"、"chapter 3" 都不算。

    参数:
        text: 已去除首尾空白的输入

    返回:
        int 或 None（不是整数）
    """
    if not _INTEGER_RE.fullmatch(text):
        return None
    return int(text)


class ConversationEngine:
    """
    会话引擎 - 根据用户状态和输入决定下一步动作。

    属性:
        sessions: 会话存储
        extractor: 漫画站点抽取器
        messages: 面向用户的文本模板
        reset_keyword: 重置关键字
    """

    def __init__(
        self,
        sessions: SessionManager,
        extractor: MangaExtractor,
        messages: MessagesConfig | None = None,
        reset_keyword: str = "list",
    ):
        self.sessions = sessions
        self.extractor = extractor
        self.messages = messages or MessagesConfig()
        self.reset_keyword = reset_keyword.strip().lower()

    async def handle(self, key: str, text: str | None) -> list[OutboundAction]:
        """
        处理一条入站文本。

        参数:
            key: 用户标识（会话存储的键）
            text: 原始入站文本，可能为 None

        返回:
            有序的出站动作列表（可能为空）
        """
        t = (text or "").strip()
        if not t:
            return []

        if t.lower() == self.reset_keyword:
            self.sessions.delete(key)
            logger.info(f"Session reset for {key}")
            return [TextMessage(self.messages.reset_prompt)]

        state = current_state(self.sessions, key)
        if isinstance(state, Browsing):
            number = parse_chapter_number(t)
            if number is not None:
                return await self._chapter(state.session, number)

        return await self._search(key, t)

    async def _search(self, key: str, query: str) -> list[OutboundAction]:
        """新搜索：抓取列表页，成功时覆盖会话并返回摘要（和封面）。"""
        url = self.extractor.listing_url(query)
        logger.info(f"Searching '{query}' for {key}: {url}")

        info = await self.extractor.fetch_listing_info(url)
        if info is None:
            return [TextMessage(self.messages.not_found)]

        self.sessions.set(key, Session(title=info.title, chapters=list(info.chapters)))

        cover = self.messages.cover_found if info.has_cover else self.messages.cover_missing
        actions: list[OutboundAction] = [
            TextMessage(self.messages.search_summary.format(
                title=info.title,
                count=len(info.chapters),
                cover=cover,
            ))
        ]
        if info.cover_image:
            actions.append(ImageMessage(info.cover_image))
        return actions

    async def _chapter(self, session: Session, number: int) -> list[OutboundAction]:
        """章节选择：校验编号，抓取图片并返回进度提示 + 图片。"""
        chapter = session.get_chapter(number)
        if chapter is None:
            return [TextMessage(self.messages.invalid_chapter)]

        try:
            images = await self.extractor.fetch_chapter_images(chapter.url)
        except Exception as e:
            logger.error(f"Unexpected error fetching chapter {number} of '{session.title}': {e}")
            return [TextMessage(self.messages.chapter_error)]

        if not images:
            return [TextMessage(self.messages.no_images)]

        logger.info(f"Chapter {number} of '{session.title}': {len(images)} images")
        actions: list[OutboundAction] = [TextMessage(self.messages.progress.format(number=number))]
        actions.extend(ImageMessage(url) for url in images)
        return actions
