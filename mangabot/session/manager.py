"""
会话管理器实现模块 - 用户浏览会话的存取与失效。

本模块包含两个核心类：
- Session：单个用户的浏览会话（标题 + 章节列表）
- SessionManager：以用户标识为键的会话存储，提供 get / set / delete

【Java 开发者类比】
- SessionManager 类似于一个只在内存中的 Map<String, Session>
- 存储后端是实现细节：换成外部缓存时只需保持 get/set/delete 语义
"""

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from mangabot.scraper.types import Chapter


@dataclass
class Session:
    """
    单个用户的浏览会话。

    属性:
        title: 最近一次成功搜索解析出的标题
        chapters: 章节列表，用户输入的数字 n 对应 chapters[n - 1]
        created_at: 会话创建时间
    """

    title: str
    chapters: list[Chapter] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    def get_chapter(self, number: int) -> Chapter | None:
        """
        按用户可见编号取章节。

        编号严格校验：小于 1 或大于章节数都返回 None，不做截断。

        参数:
            number: 用户输入的章节编号（1 起始）

        返回:
            对应的 Chapter，越界时返回 None
        """
        if 1 <= number <= len(self.chapters):
            return self.chapters[number - 1]
        return None


class SessionManager:
    """
    会话存储 - 进程内的用户会话表。

    单键读写是原子的（asyncio 单线程事件循环中不会交错）；
    同一用户并发请求的串行化由引擎循环的每用户锁负责。

    属性:
        _sessions: 会话字典 {用户标识: Session}
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def get(self, key: str) -> Session | None:
        """获取用户会话，不存在时返回 None。"""
        return self._sessions.get(key)

    def set(self, key: str, session: Session) -> None:
        """
        保存用户会话（无条件覆盖已有会话）。

        参数:
            key: 用户标识（通常为 "channel:sender_id"）
            session: 新会话
        """
        if key in self._sessions:
            logger.debug(f"Replacing session for {key}")
        self._sessions[key] = session

    def delete(self, key: str) -> bool:
        """
        删除用户会话。

        参数:
            key: 用户标识

        返回:
            True 表示删除了已有会话，False 表示会话本不存在（此时为空操作）
        """
        return self._sessions.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
