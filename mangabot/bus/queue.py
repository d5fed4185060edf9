"""
异步消息队列模块 - 消息总线的核心实现。

本模块实现了 MessageBus 类，基于 Python asyncio.Queue 实现入站消息的异步传递：

入站流程（用户 → 引擎）：
  渠道适配器 → publish_inbound() → inbound 队列 → consume_inbound() → 引擎循环

出站方向不经过队列：图片投递需要逐条等待发送结果并在两张图片之间计时，
由投递序列器直接调用 ChannelManager.send() 完成。
"""

import asyncio

from mangabot.bus.events import InboundMessage


class MessageBus:
    """
    异步消息总线 - 解耦聊天渠道与会话引擎。

    属性:
        inbound: 入站消息异步队列（渠道 → 引擎）
    """

    def __init__(self):
        """初始化消息总线，创建入站异步队列。"""
        self.inbound: asyncio.Queue[InboundMessage] = asyncio.Queue()

    async def publish_inbound(self, msg: InboundMessage) -> None:
        """
        发布入站消息（渠道 → 引擎）。

        参数:
            msg: 入站消息对象
        """
        await self.inbound.put(msg)

    async def consume_inbound(self) -> InboundMessage:
        """
        消费下一条入站消息（阻塞等待）。

        返回:
            下一条入站消息
        """
        return await self.inbound.get()

    @property
    def inbound_size(self) -> int:
        """待处理的入站消息数量。"""
        return self.inbound.qsize()
