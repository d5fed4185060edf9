"""
渠道基类模块 - 定义所有消息渠道的统一接口。

本模块提供了 BaseChannel 抽象基类，所有具体渠道（Messenger、Console）
都必须继承此基类并实现其抽象方法。

【核心抽象方法】
- start(): 启动渠道，开始监听消息（长期运行的异步任务）
- stop(): 停止渠道，释放资源
- send(): 发送一条出站消息（文本或图片），失败时抛出 DeliveryError

【公共能力】
- is_allowed(): 基于白名单的权限控制
- _handle_message(): 消息预处理与转发（权限检查 → 构造 InboundMessage → 发布到总线）
"""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from mangabot.bus.events import InboundMessage, OutboundMessage
from mangabot.bus.queue import MessageBus


class BaseChannel(ABC):
    """
    消息渠道抽象基类 - 所有渠道实现的统一契约。

    属性:
        name: 渠道标识名（如 "messenger"），用于消息路由
        config: 渠道特定的配置对象
        bus: 消息总线实例，用于发布入站消息
        _running: 渠道运行状态标志
    """

    name: str = "base"  # 子类必须覆盖此属性为具体渠道名

    def __init__(self, config: Any, bus: MessageBus):
        """
        初始化渠道。

        参数:
            config: 渠道特定的配置对象
            bus: 消息总线实例，所有渠道共享同一个总线
        """
        self.config = config
        self.bus = bus
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """启动渠道并开始监听消息（长期运行）。"""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """停止渠道并清理资源。"""
        pass

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """
        通过此渠道发送一条消息。

        参数:
            msg: 出站消息；content 非空为文本，media 非空为图片

        异常:
            DeliveryError: 发送失败（由投递序列器捕获并记录）
        """
        pass

    def is_allowed(self, sender_id: str) -> bool:
        """
        检查发送者是否有权限使用该机器人。

        - 白名单为空 → 允许所有人（开放模式）
        - 白名单非空 → 只允许名单中的用户

        参数:
            sender_id: 发送者标识符

        返回:
            True 表示允许访问，False 表示拒绝
        """
        allow_list = getattr(self.config, "allow_from", [])
        if not allow_list:
            return True
        return str(sender_id) in allow_list

    async def _handle_message(
        self,
        sender_id: str,
        chat_id: str,
        content: str,
        metadata: dict[str, Any] | None = None
    ) -> None:
        """
        处理来自聊天平台的入站消息（模板方法）。

        1. 权限校验：不在白名单中的发送者直接丢弃
        2. 消息标准化：转换为统一的 InboundMessage
        3. 发布到总线：交给引擎循环处理

        参数:
            sender_id: 发送者标识符（平台用户 ID）
            chat_id: 回复地址
            content: 消息文本内容
            metadata: 可选的渠道特定元数据
        """
        if not self.is_allowed(sender_id):
            logger.warning(
                f"Access denied for sender {sender_id} on channel {self.name}. "
                f"Add them to allowFrom list in config to grant access."
            )
            return

        msg = InboundMessage(
            channel=self.name,
            sender_id=str(sender_id),
            chat_id=str(chat_id),
            content=content,
            metadata=metadata or {}
        )
        await self.bus.publish_inbound(msg)

    @property
    def is_running(self) -> bool:
        """渠道是否正在运行。"""
        return self._running
