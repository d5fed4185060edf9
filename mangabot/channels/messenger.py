"""
Facebook Messenger 渠道实现 - 基于 Webhook 接收、Send API 发送。

本模块实现了 Messenger 主页机器人的收发功能：
- 入站：FastAPI 提供 Webhook 端点，uvicorn 运行 HTTP 服务
  - GET：订阅校验握手（hub.mode / hub.verify_token / hub.challenge）
  - POST：事件推送，每条带文本的 messaging 事件发布到消息总线
- 出站：httpx 调用 Graph API 的 /me/messages
  - 文本：{"message": {"text": ...}}
  - 图片：{"message": {"attachment": {"type": "image", "payload": {"url", "is_reusable"}}}}

Webhook 只负责把事件放进总线并立即返回 200，耗时的抓取和图片投递
由引擎循环在后台完成，不会拖住平台的回调请求。

依赖：
- fastapi + uvicorn：Webhook HTTP 服务
- httpx：Send API 调用
"""

from typing import Any

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from loguru import logger

from mangabot.bus.events import OutboundMessage
from mangabot.bus.queue import MessageBus
from mangabot.channels.base import BaseChannel
from mangabot.config.schema import MessengerConfig
from mangabot.delivery.errors import DeliveryError


class MessengerChannel(BaseChannel):
    """
    Messenger 渠道。

    属性:
        app: FastAPI 应用（Webhook 端点）
        _http: 发送消息用的 httpx 异步客户端
        _server: uvicorn 服务实例
    """

    name = "messenger"

    def __init__(
        self,
        config: MessengerConfig,
        bus: MessageBus,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        初始化 Messenger 渠道。

        参数:
            config: Messenger 配置（令牌、Webhook 地址、超时）
            bus: 消息总线
            transport: 可选的 httpx 传输层（测试时注入 MockTransport）
        """
        super().__init__(config, bus)
        self.config: MessengerConfig = config
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._server: uvicorn.Server | None = None
        self.app = self._build_app()

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        启动 Webhook 服务（阻塞直到服务退出）。

        未配置 page_access_token 时仍可接收消息，但所有发送都会失败。
        """
        if not self.config.page_access_token:
            logger.warning("Messenger page_access_token not configured; replies will fail")
        if not self.config.verify_token:
            logger.warning("Messenger verify_token not configured; webhook verification will be rejected")

        self._running = True
        self._http = httpx.AsyncClient(transport=self._transport)

        server_config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
        )
        self._server = uvicorn.Server(server_config)
        logger.info(
            f"Messenger webhook listening on {self.config.host}:{self.config.port}{self.config.webhook_path}"
        )
        await self._server.serve()

    async def stop(self) -> None:
        """停止 Webhook 服务并关闭 HTTP 客户端。"""
        self._running = False
        if self._server:
            self._server.should_exit = True
            self._server = None
        if self._http:
            await self._http.aclose()
            self._http = None

    # ------------------------------------------------------------------
    # 出站：Send API
    # ------------------------------------------------------------------

    async def send(self, msg: OutboundMessage) -> None:
        """
        发送一条文本或图片。

        图片 URL 为空时直接跳过；多张图片按顺序逐张发送。

        参数:
            msg: 出站消息

        异常:
            DeliveryError: 客户端未启动、HTTP 错误或超时
        """
        if msg.media:
            for url in msg.media:
                if not url:
                    continue
                await self._post(
                    msg.chat_id,
                    {"attachment": {"type": "image", "payload": {"url": url, "is_reusable": True}}},
                    timeout=self.config.image_timeout,
                )
        if msg.content:
            await self._post(msg.chat_id, {"text": msg.content}, timeout=self.config.text_timeout)

    async def _post(self, recipient_id: str, message: dict[str, Any], timeout: float) -> None:
        if self._http is None:
            raise DeliveryError("Messenger client not started", self.name, recipient_id)

        try:
            r = await self._http.post(
                f"{self.config.graph_api_url.rstrip('/')}/me/messages",
                json={"recipient": {"id": recipient_id}, "message": message},
                params={"access_token": self.config.page_access_token},
                timeout=timeout,
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"Send API returned {e.response.status_code}: {e.response.text[:200]}",
                self.name, recipient_id,
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Send API request failed: {e!r}", self.name, recipient_id) from e

    # ------------------------------------------------------------------
    # 入站：Webhook
    # ------------------------------------------------------------------

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="mangabot messenger webhook")
        path = self.config.webhook_path

        @app.get(path)
        async def verify(request: Request) -> Response:
            return self.verify_subscription(dict(request.query_params))

        @app.post(path)
        async def receive(request: Request) -> Response:
            try:
                body = await request.json()
            except ValueError:
                return Response(status_code=400)
            status = await self.handle_webhook(body)
            return Response(status_code=status)

        return app

    def verify_subscription(self, params: dict[str, str]) -> Response:
        """
        Webhook 订阅校验握手。

        hub.mode 为 subscribe 且 hub.verify_token 与配置一致时原样返回 hub.challenge，
        否则返回 403。未配置 verify_token 时一律拒绝。
        """
        mode = params.get("hub.mode")
        token = params.get("hub.verify_token")
        challenge = params.get("hub.challenge", "")

        if mode == "subscribe" and self.config.verify_token and token == self.config.verify_token:
            logger.info("Messenger webhook verified")
            return PlainTextResponse(challenge)
        logger.warning("Messenger webhook verification rejected")
        return Response(status_code=403)

    async def handle_webhook(self, body: Any) -> int:
        """
        处理一次事件推送。

        参数:
            body: 已解析的 JSON 请求体

        返回:
            HTTP 状态码：结构不完整（缺少 entry 或 messaging）为 400，否则 200
        """
        entries = body.get("entry") if isinstance(body, dict) else None
        if not isinstance(entries, list) or not entries:
            return 400
        if not isinstance(entries[0], dict) or not entries[0].get("messaging"):
            return 400

        for entry in entries:
            if not isinstance(entry, dict):
                continue
            for event in entry.get("messaging") or []:
                if isinstance(event, dict):
                    await self._handle_event(event)
        return 200

    async def _handle_event(self, event: dict[str, Any]) -> None:
        sender_id = (event.get("sender") or {}).get("id")
        message = event.get("message") or {}

        # 主页自己发出的消息会以 echo 形式回推，忽略
        if message.get("is_echo"):
            return

        text = (message.get("text") or "").strip()
        if not sender_id or not text:
            return

        await self._handle_message(
            sender_id=str(sender_id),
            chat_id=str(sender_id),
            content=text,
            metadata={"mid": message.get("mid"), "timestamp": event.get("timestamp")},
        )
