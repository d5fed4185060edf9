"""
渠道管理器模块 - 统一管理所有消息渠道的生命周期和出站路由。

职责：
- 根据配置初始化所有已启用的渠道
- 统一启动 / 停止渠道
- 把 OutboundMessage 路由到对应渠道发送（投递序列器的发送回调）
"""

import asyncio
from typing import Any

from loguru import logger

from mangabot.bus.events import OutboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.channels.base import BaseChannel
from mangabot.config.schema import Config
from mangabot.delivery.errors import DeliveryError


class ChannelManager:
    """
    渠道管理器。

    属性:
        config: 全局配置对象
        bus: 消息总线实例
        channels: 已初始化的渠道字典 {渠道名: 渠道实例}
    """

    def __init__(self, config: Config, bus: MessageBus):
        """
        初始化渠道管理器（只创建渠道，不启动）。

        参数:
            config: 全局配置对象
            bus: 消息总线实例，所有渠道共享
        """
        self.config = config
        self.bus = bus
        self.channels: dict[str, BaseChannel] = {}

        self._init_channels()

    def _init_channels(self) -> None:
        """
        根据配置初始化所有已启用的渠道。

        采用延迟导入：只有启用的渠道才导入其模块，
        缺少依赖时仅打印警告，不影响其他渠道。
        """
        if self.config.channels.messenger.enabled:
            try:
                from mangabot.channels.messenger import MessengerChannel
                self.channels["messenger"] = MessengerChannel(
                    self.config.channels.messenger, self.bus
                )
                logger.info("Messenger channel enabled")
            except ImportError as e:
                logger.warning(f"Messenger channel not available: {e}")

    def register(self, channel: BaseChannel) -> None:
        """手动注册一个渠道（如本地 ConsoleChannel）。"""
        self.channels[channel.name] = channel

    async def _start_channel(self, name: str, channel: BaseChannel) -> None:
        """启动单个渠道，失败只记录日志，不影响其他渠道。"""
        try:
            await channel.start()
        except Exception as e:
            logger.error(f"Failed to start channel {name}: {e}")

    async def start_all(self) -> None:
        """并行启动所有渠道（各渠道的 start() 通常会一直运行）。"""
        if not self.channels:
            logger.warning("No channels enabled")
            return

        tasks = []
        for name, channel in self.channels.items():
            logger.info(f"Starting {name} channel...")
            tasks.append(asyncio.create_task(self._start_channel(name, channel)))

        await asyncio.gather(*tasks, return_exceptions=True)

    async def stop_all(self) -> None:
        """逐个停止所有渠道，确保每个都尝试清理。"""
        logger.info("Stopping all channels...")

        for name, channel in self.channels.items():
            try:
                await channel.stop()
                logger.info(f"Stopped {name} channel")
            except Exception as e:
                logger.error(f"Error stopping {name}: {e}")

    async def send(self, msg: OutboundMessage) -> None:
        """
        把出站消息路由到目标渠道发送。

        参数:
            msg: 出站消息

        异常:
            DeliveryError: 目标渠道不存在或渠道发送失败
        """
        channel = self.channels.get(msg.channel)
        if channel is None:
            logger.warning(f"Unknown channel: {msg.channel}")
            raise DeliveryError(f"Unknown channel: {msg.channel}", msg.channel, msg.chat_id)
        await channel.send(msg)

    def get_channel(self, name: str) -> BaseChannel | None:
        """根据名称获取渠道实例。"""
        return self.channels.get(name)

    def get_status(self) -> dict[str, Any]:
        """
        获取所有渠道的运行状态。

        返回:
            {渠道名: {"enabled": bool, "running": bool}}
        """
        return {
            name: {"enabled": True, "running": channel.is_running}
            for name, channel in self.channels.items()
        }

    @property
    def enabled_channels(self) -> list[str]:
        """已启用的渠道名称列表。"""
        return list(self.channels.keys())
