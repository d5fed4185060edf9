"""
控制台渠道 - 在本地终端里和机器人对话。

供 `mangabot chat` 使用：输入由 CLI 直接交给引擎循环（process_direct），
本渠道只负责把出站消息渲染到终端。图片无法在终端显示，打印其 URL。
"""

from rich.console import Console
from rich.text import Text

from mangabot.bus.events import OutboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.channels.base import BaseChannel


class ConsoleChannel(BaseChannel):
    """本地终端渠道。"""

    name = "console"

    def __init__(self, bus: MessageBus, console: Console | None = None):
        super().__init__(None, bus)
        self.console = console or Console()

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False

    async def send(self, msg: OutboundMessage) -> None:
        for url in msg.media:
            self.console.print(Text(f"🖼️  {url}", style="dim"))
        if msg.content:
            self.console.print(Text(msg.content))
