"""
消息事件类型定义模块 - 定义渠道与引擎之间传输的数据结构。

本模块定义了两个核心数据类：
- InboundMessage：入站消息（从渠道到引擎），即平台已验证过的 {sender_id, text}
- OutboundMessage：出站消息（从投递序列器到渠道），文本或图片二选一

【设计要点】
- session_key 属性将 channel 和 sender_id 组合为唯一用户标识，
  会话存储（SessionManager）以此为键保存每个用户的浏览状态
- 图片消息通过 media 列表携带 URL，content 为空字符串
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class InboundMessage:
    """
    入站消息 - 从聊天渠道接收到的用户文本。

    属性:
        channel: 消息来源渠道标识（如 'messenger', 'console'）
        sender_id: 发送者唯一标识（平台提供的用户 ID）
        chat_id: 回复地址（Messenger 中与 sender_id 相同）
        content: 消息文本内容（可能为空）
        timestamp: 消息时间戳，默认为当前时间
        metadata: 渠道特有的附加数据（如 Messenger 的 mid）
    """

    channel: str            # 来源渠道：messenger, console
    sender_id: str          # 发送者 ID
    chat_id: str            # 回复地址
    content: str            # 消息正文
    timestamp: datetime = field(default_factory=datetime.now)  # 接收时间戳
    metadata: dict[str, Any] = field(default_factory=dict)     # 渠道特有的元数据

    @property
    def session_key(self) -> str:
        """
        生成唯一的会话标识键。

        格式为 "channel:sender_id"，例如 "messenger:24012345678"。
        同一平台同一用户的所有消息共享同一个浏览会话。

        返回:
            格式化的会话标识字符串
        """
        return f"{self.channel}:{self.sender_id}"


@dataclass
class OutboundMessage:
    """
    出站消息 - 发往聊天渠道的一条文本或一张图片。

    属性:
        channel: 目标渠道标识（决定消息发往哪个渠道）
        chat_id: 目标接收者 ID
        content: 文本内容（图片消息为空）
        media: 图片 URL 列表（文本消息为空）
        metadata: 渠道特有的附加数据
    """

    channel: str                                                # 目标渠道标识
    chat_id: str                                                # 目标接收者 ID
    content: str = ""                                           # 文本内容
    media: list[str] = field(default_factory=list)              # 图片 URL 列表
    metadata: dict[str, Any] = field(default_factory=dict)      # 渠道特有的元数据

    @property
    def is_image(self) -> bool:
        """是否为图片消息（携带 media 且没有文本）。"""
        return bool(self.media) and not self.content
