"""
出站动作类型定义。

会话引擎处理一条入站消息后返回有序的动作列表，顺序有意义：
文本在图片之前，图片按章节页面中的文档顺序排列。
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class TextMessage:
    """发送一条文本。"""
    text: str


@dataclass(frozen=True)
class ImageMessage:
    """发送一张图片（按 URL 引用）。"""
    url: str


OutboundAction = Union[TextMessage, ImageMessage]
