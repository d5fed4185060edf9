"""
会话状态定义 - 每个用户只有两种状态。

- Idle：没有会话（从未搜索，或刚发送了重置关键字）
- Browsing：持有一次成功搜索的会话（标题 + 章节列表）

状态不单独存储，而是由会话存储中是否存在该用户的 Session 推导出来。
"""

from dataclasses import dataclass
from typing import Union

from mangabot.session.manager import Session, SessionManager


@dataclass(frozen=True)
class Idle:
    """空闲：下一条非重置文本一律视为新搜索。"""


@dataclass(frozen=True)
class Browsing:
    """浏览中：数字输入被解释为章节选择。"""
    session: Session


ConversationState = Union[Idle, Browsing]


def current_state(sessions: SessionManager, key: str) -> ConversationState:
    """根据会话存储推导用户当前状态。"""
    session = sessions.get(key)
    if session is None:
        return Idle()
    return Browsing(session)
