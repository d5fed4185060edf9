"""
消息渠道模块 - 外部即时通讯平台的接入层。

- base：BaseChannel 抽象基类
- messenger：Facebook Messenger（Webhook + Send API）
- console：本地终端对话
- manager：ChannelManager，统一启动/停止并路由出站消息
"""

from mangabot.channels.base import BaseChannel
from mangabot.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ChannelManager"]
