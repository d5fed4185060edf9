"""
引擎主循环模块 —— 把消息总线、会话引擎和投递序列器串起来。

处理流水线：
  InboundMessage → ConversationEngine.handle() → 出站动作列表
                 → DeliverySequencer.deliver() → 渠道

并发模型：
- 每条入站消息由一个独立的 asyncio 任务端到端处理（抽取 + 全部图片投递）
- 不同用户的消息并发处理，互不保证顺序
- 同一用户的消息通过每用户 asyncio.Lock 串行化，避免两条几乎同时到达的消息
  读到不一致的会话；正在投递的章节图片不会被后续消息打断

【Java 开发者类比】
- run() 类似于 @KafkaListener 消费循环
- 每用户锁类似于 ConcurrentHashMap<String, ReentrantLock>
"""

import asyncio

from loguru import logger

from mangabot.bus.events import InboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.delivery.sequencer import DeliveryReport, DeliverySequencer
from mangabot.engine.conversation import ConversationEngine
from mangabot.utils.helpers import truncate_string


class EngineLoop:
    """
    引擎主循环。

    属性:
        bus: 消息总线，提供入站消息
        engine: 会话引擎
        sequencer: 投递序列器
        _locks: 每用户锁 {session_key: asyncio.Lock}
        _tasks: 正在运行的处理任务（持有引用防止被垃圾回收）
    """

    def __init__(self, bus: MessageBus, engine: ConversationEngine, sequencer: DeliverySequencer):
        self.bus = bus
        self.engine = engine
        self.sequencer = sequencer
        self._locks: dict[str, asyncio.Lock] = {}
        self._tasks: set[asyncio.Task] = set()
        self._running = False

    async def run(self) -> None:
        """
        启动主循环，持续从消息总线消费入站消息。

        每条消息放进独立任务处理，主循环立即回去等待下一条。
        使用 1 秒超时轮询，以便及时响应 stop()。
        """
        self._running = True
        logger.info("Engine loop started")

        while self._running:
            try:
                msg = await asyncio.wait_for(self.bus.consume_inbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            task = asyncio.create_task(self._dispatch(msg))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def stop(self) -> None:
        """停止主循环。已开始的投递会继续跑完。"""
        self._running = False
        logger.info("Engine loop stopping")

    async def drain(self) -> None:
        """等待所有正在处理的消息完成。"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _dispatch(self, msg: InboundMessage) -> DeliveryReport | None:
        """
        处理单条入站消息：在该用户的锁内运行引擎并投递全部动作。

        参数:
            msg: 入站消息

        返回:
            DeliveryReport，处理过程出现意外错误时返回 None
        """
        key = msg.session_key
        async with self._lock_for(key):
            logger.info(f"Processing message from {key}: {truncate_string(msg.content)}")
            try:
                actions = await self.engine.handle(key, msg.content)
                if not actions:
                    return DeliveryReport()
                return await self.sequencer.deliver(msg.channel, msg.chat_id, actions)
            except Exception as e:
                logger.error(f"Error processing message from {key}: {e}")
                return None

    async def process_direct(
        self,
        content: str,
        channel: str = "console",
        sender_id: str = "direct",
    ) -> DeliveryReport | None:
        """
        直接处理一条消息（不经过消息总线），用于 CLI 本地对话。

        参数:
            content: 用户输入
            channel: 渠道名，默认 "console"
            sender_id: 用户标识，默认 "direct"

        返回:
            本次投递的 DeliveryReport
        """
        msg = InboundMessage(channel=channel, sender_id=sender_id, chat_id=sender_id, content=content)
        return await self._dispatch(msg)
