"""
CLI 命令模块 - mangabot 的所有命令行命令定义。

本模块使用 Typer 框架定义 mangabot 的命令体系：
- onboard：写入默认配置文件
- gateway：启动网关服务（消息渠道 + 引擎主循环）
- chat：在本地终端与机器人对话（单条消息或交互式对话）
- status：查看配置与渠道状态

技术栈：
- Typer：CLI 框架（基于 Click，支持类型注解自动生成帮助文档）
- Rich：终端美化输出
- prompt_toolkit：交互式输入（历史记录、行编辑）
"""

import asyncio
import sys

import typer
from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from mangabot import __logo__, __version__
from mangabot.utils.helpers import ensure_dir, get_data_path

app = typer.Typer(
    name="mangabot",
    help=f"{__logo__} mangabot - Manga reader chat bot",
    no_args_is_help=True,
)

console = Console()
EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit", ":q"}


def _configure_logging(verbose: bool) -> None:
    """替换 loguru 默认输出：verbose 时输出 DEBUG 级别，否则 INFO。"""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _build_engine_loop(config, bus, send):
    """
    按配置组装会话引擎、投递序列器和引擎主循环。

    参数:
        config: 全局配置
        bus: 消息总线
        send: 出站发送回调（ChannelManager.send 或某个渠道的 send）

    返回:
        EngineLoop 实例
    """
    from mangabot.delivery.sequencer import DeliverySequencer
    from mangabot.engine.conversation import ConversationEngine
    from mangabot.engine.loop import EngineLoop
    from mangabot.scraper.extractor import MangaExtractor
    from mangabot.session.manager import SessionManager

    engine = ConversationEngine(
        sessions=SessionManager(),
        extractor=MangaExtractor(config.scraper),
        messages=config.messages,
        reset_keyword=config.conversation.reset_keyword,
    )
    sequencer = DeliverySequencer(send, image_delay=config.delivery.image_delay)
    return EngineLoop(bus, engine, sequencer)


def version_callback(value: bool):
    """版本号回调：传入 --version 时打印版本号并退出。"""
    if value:
        console.print(f"{__logo__} mangabot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", callback=version_callback, is_eager=True
    ),
):
    """mangabot CLI 根命令回调。处理全局选项（如 --version）。"""
    pass


# ============================================================================
# Onboard / Setup
# ============================================================================


@app.command()
def onboard(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
):
    """写入默认配置文件 ~/.mangabot/config.json。"""
    from mangabot.config.loader import get_config_path, save_config
    from mangabot.config.schema import Config

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow] (use --force to overwrite)")
        raise typer.Exit()

    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print("\nNext steps:")
    console.print("  1. Set [cyan]channels.messenger.verifyToken[/cyan] and [cyan]pageAccessToken[/cyan]")
    console.print("  2. Set [cyan]channels.messenger.enabled[/cyan] to true")
    console.print("  3. Run [cyan]mangabot gateway[/cyan]")


# ============================================================================
# Gateway / Server
# ============================================================================


@app.command()
def gateway(
    port: int = typer.Option(None, "--port", "-p", help="Webhook port (overrides config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    启动 mangabot 网关服务。

    1. 加载配置并初始化消息总线
    2. 创建渠道管理器（Messenger Webhook）
    3. 组装会话引擎、投递序列器和引擎主循环
    4. 启动所有渠道，直到服务退出
    """
    from mangabot.bus.queue import MessageBus
    from mangabot.channels.manager import ChannelManager
    from mangabot.config.loader import load_config

    _configure_logging(verbose)

    config = load_config()
    if port is not None:
        config.channels.messenger.port = port

    bus = MessageBus()
    channels = ChannelManager(config, bus)
    engine_loop = _build_engine_loop(config, bus, channels.send)

    if not channels.enabled_channels:
        console.print("[yellow]Warning: No channels enabled[/yellow]")
        raise typer.Exit(1)

    console.print(f"{__logo__} Starting mangabot gateway...")
    console.print(f"[green]✓[/green] Channels enabled: {', '.join(channels.enabled_channels)}")
    console.print(f"[green]✓[/green] Site: {config.scraper.site_root}")

    async def run():
        loop_task = asyncio.create_task(engine_loop.run())
        try:
            await channels.start_all()
        finally:
            engine_loop.stop()
            await loop_task
            await engine_loop.drain()
            await channels.stop_all()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\nShutting down...")


# ============================================================================
# Local chat
# ============================================================================


async def _read_interactive_input_async(session: PromptSession) -> str:
    """使用 prompt_toolkit 异步读取一行输入。"""
    with patch_stdout():
        return await session.prompt_async(HTML("<b fg='ansiblue'>You:</b> "))


@app.command()
def chat(
    message: str = typer.Option(None, "--message", "-m", help="Single message to send"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show mangabot runtime logs during chat"),
):
    """
    在本地终端与机器人对话。

    1. 单条消息模式：mangabot chat -m "one piece"
    2. 交互模式：mangabot chat → 进入对话循环，输入 exit 退出

    会话在整个交互过程中保留，可以先搜索再发送章节编号。
    """
    from mangabot.bus.queue import MessageBus
    from mangabot.channels.console import ConsoleChannel
    from mangabot.config.loader import load_config

    if logs:
        logger.enable("mangabot")
    else:
        logger.disable("mangabot")

    config = load_config()
    bus = MessageBus()
    channel = ConsoleChannel(bus, console=console)
    engine_loop = _build_engine_loop(config, bus, channel.send)

    if message:
        asyncio.run(engine_loop.process_direct(message))
        return

    history_file = ensure_dir(get_data_path() / "history") / "chat_history"
    prompt_session = PromptSession(history=FileHistory(str(history_file)))

    console.print(f"{__logo__} Interactive mode (type [bold]exit[/bold] or [bold]Ctrl+C[/bold] to quit)\n")
    console.print(config.messages.reset_prompt)

    async def run_interactive():
        while True:
            try:
                user_input = await _read_interactive_input_async(prompt_session)
            except (KeyboardInterrupt, EOFError):
                break
            command = user_input.strip()
            if not command:
                continue
            if command.lower() in EXIT_COMMANDS:
                break
            await engine_loop.process_direct(user_input)
        console.print("\nGoodbye!")

    asyncio.run(run_interactive())


# ============================================================================
# Status
# ============================================================================


@app.command()
def status():
    """显示配置文件、站点和渠道配置状态。"""
    from mangabot.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()
    messenger = config.channels.messenger

    console.print(f"{__logo__} mangabot Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[red]✗[/red]'}")
    console.print(f"Site: {config.scraper.site_root}")
    console.print(f"Image delay: {config.delivery.image_delay_ms}ms")
    console.print(f"Messenger: {'[green]enabled[/green]' if messenger.enabled else '[dim]disabled[/dim]'}")
    console.print(f"  verify token: {'[green]✓[/green]' if messenger.verify_token else '[dim]not set[/dim]'}")
    console.print(f"  page token: {'[green]✓[/green]' if messenger.page_access_token else '[dim]not set[/dim]'}")


if __name__ == "__main__":
    app()
