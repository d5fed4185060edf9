"""
mangabot - 轻量级漫画阅读聊天机器人

模块概述：
    本文件是 mangabot 包的入口文件（__init__.py），定义了包的元信息。
    mangabot 让用户通过即时通讯平台（默认 Facebook Messenger）按标题搜索漫画站点、
    浏览章节列表，并逐张接收章节图片。

    整个框架的核心功能包括：
    - 消息渠道接入（Messenger Webhook、本地控制台）
    - 每用户会话状态机（空闲 / 浏览中）
    - 两阶段内容抽取（标题与章节列表 → 章节图片）
    - 限速的出站投递（图片之间固定间隔发送）
"""

# 版本号，遵循语义化版本规范（主版本.次版本.修订号）
__version__ = "0.1.0"

# 项目 logo 表情符号，用于 CLI 输出等场景的品牌标识
__logo__ = "📚"
