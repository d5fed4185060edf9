"""
投递序列器模块 (delivery/sequencer.py)

模块职责：
    按顺序执行一个用户的一批出站动作，并在相邻两次图片发送之间等待固定间隔，
    避免一次性推送几十张章节图片把消息通道压垮或触发平台限流。

调度方式：
    间隔通过 asyncio.sleep 实现（计时器门控的顺序分发），只挂起当前任务，
    不阻塞事件循环，其他用户的事件可以同时被处理。

错误处理：
    每次发送相互独立。某一条失败会被记录并计入报告，但不会中断本批次剩余的发送，
    也不做回滚和重试（尽力而为投递）。
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from loguru import logger

from mangabot.bus.events import OutboundMessage
from mangabot.delivery.actions import ImageMessage, OutboundAction, TextMessage

SendCallback = Callable[[OutboundMessage], Awaitable[None]]


@dataclass
class DeliveryReport:
    """
    一批动作的投递结果。

    属性:
        sent: 成功发送的条数
        failed: 失败的动作及错误信息列表
    """
    sent: int = 0
    failed: list[tuple[OutboundAction, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.sent + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


class DeliverySequencer:
    """
    投递序列器 - 带图片节流的顺序发送。

    属性:
        send: 发送回调，接收一条 OutboundMessage（通常是 ChannelManager.send）
        image_delay: 相邻两张图片之间的最小间隔（秒）
    """

    def __init__(
        self,
        send: SendCallback,
        image_delay: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        初始化投递序列器。

        参数:
            send: 发送回调，失败时应抛出异常（通常是 DeliveryError）
            image_delay: 图片间隔（秒），默认 0.5
            sleep: 计时原语，默认 asyncio.sleep
        """
        self.send = send
        self.image_delay = image_delay
        self._sleep = sleep

    @staticmethod
    def to_message(channel: str, chat_id: str, action: OutboundAction) -> OutboundMessage:
        """把出站动作转换为渠道可发送的 OutboundMessage。"""
        if isinstance(action, ImageMessage):
            return OutboundMessage(channel=channel, chat_id=chat_id, media=[action.url])
        if isinstance(action, TextMessage):
            return OutboundMessage(channel=channel, chat_id=chat_id, content=action.text)
        raise TypeError(f"Unsupported outbound action: {action!r}")

    async def deliver(
        self,
        channel: str,
        chat_id: str,
        actions: list[OutboundAction],
    ) -> DeliveryReport:
        """
        按顺序执行一批动作。

        两张相邻图片之间先等待 image_delay 再发送下一张；文本不等待。
        无论上一张图片是否发送成功，间隔都照常执行。

        参数:
            channel: 目标渠道名
            chat_id: 接收者 ID
            actions: 有序的出站动作列表

        返回:
            DeliveryReport 投递结果
        """
        report = DeliveryReport()
        previous_was_image = False

        for action in actions:
            is_image = isinstance(action, ImageMessage)
            if is_image and previous_was_image and self.image_delay > 0:
                await self._sleep(self.image_delay)

            try:
                await self.send(self.to_message(channel, chat_id, action))
                report.sent += 1
            except Exception as e:
                logger.error(f"Delivery to {channel}:{chat_id} failed for {action}: {e}")
                report.failed.append((action, str(e)))

            previous_was_image = is_image

        if report.failed:
            logger.warning(
                f"Delivered {report.sent}/{report.total} messages to {channel}:{chat_id}"
            )
        return report
