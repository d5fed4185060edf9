"""
出站投递模块 - 把会话引擎产生的动作按顺序发到渠道。

- actions：出站动作类型（TextMessage / ImageMessage）
- sequencer：投递序列器，相邻图片之间强制最小间隔
- errors：渠道发送失败时抛出的 DeliveryError
"""

from mangabot.delivery.actions import ImageMessage, OutboundAction, TextMessage
from mangabot.delivery.errors import DeliveryError
from mangabot.delivery.sequencer import DeliveryReport, DeliverySequencer

__all__ = [
    "TextMessage",
    "ImageMessage",
    "OutboundAction",
    "DeliveryError",
    "DeliveryReport",
    "DeliverySequencer",
]
