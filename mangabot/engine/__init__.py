"""
会话引擎模块 - mangabot 的核心处理逻辑。

- state：显式的两状态模型（Idle / Browsing）
- conversation：ConversationEngine，把一条入站文本转换为有序的出站动作
- loop：EngineLoop，消费消息总线、按用户串行处理并交给投递序列器
"""

from mangabot.engine.conversation import ConversationEngine, parse_chapter_number
from mangabot.engine.loop import EngineLoop
from mangabot.engine.state import Browsing, ConversationState, Idle

__all__ = [
    "ConversationEngine",
    "EngineLoop",
    "Idle",
    "Browsing",
    "ConversationState",
    "parse_chapter_number",
]
