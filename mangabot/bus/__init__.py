"""
消息总线模块 - 实现渠道与会话引擎之间的解耦通信。

消息流向：
  用户消息 → 渠道(Channel) → InboundMessage → 消息总线 → 引擎循环(EngineLoop)
  引擎动作 → 投递序列器(DeliverySequencer) → OutboundMessage → 渠道(Channel) → 用户

【Java 开发者类比】
- MessageBus 类似于一个 LinkedBlockingQueue 包装的入站事件通道
- InboundMessage / OutboundMessage 类似于入站/出站 DTO
"""

from mangabot.bus.events import InboundMessage, OutboundMessage
from mangabot.bus.queue import MessageBus

__all__ = ["MessageBus", "InboundMessage", "OutboundMessage"]
