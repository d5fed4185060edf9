"""
配置数据模型定义 (config/schema.py)
=================================
本模块使用 Pydantic 定义 mangabot 的完整配置结构。
所有配置项都有默认值，用户只需在 config.json 中覆盖需要修改的部分。

整体配置结构（树形）：
Config (根配置)
├── channels      - 消息渠道配置（Messenger Webhook）
├── scraper       - 漫画站点抓取配置（站点根地址、User-Agent、超时）
├── delivery      - 出站投递配置（图片间隔）
├── conversation  - 会话状态机配置（重置关键字）
└── messages      - 所有面向用户的文本模板（本地化入口）

对于 Java 开发者：
- Pydantic 的 BaseModel 类似于 Java 的 POJO/Record，但自带字段验证和默认值
- BaseSettings 类似于 Spring 的 @ConfigurationProperties，额外支持从环境变量读取配置
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ==============================================================================
# 渠道配置模型
# ==============================================================================


class MessengerConfig(BaseModel):
    """
    Facebook Messenger 渠道配置。

    入站通过 Webhook（GET 校验握手 + POST 事件推送），
    出站通过 Graph API 的 Send API。
    """
    enabled: bool = False  # 是否启用该渠道
    verify_token: str = ""  # Webhook 校验握手时比对的令牌
    page_access_token: str = ""  # 主页访问令牌，调用 Send API 时作为 access_token 参数
    graph_api_url: str = "https://graph.facebook.com/v19.0"  # Graph API 基础地址
    host: str = "0.0.0.0"  # Webhook 服务监听地址
    port: int = 3000  # Webhook 服务监听端口
    webhook_path: str = "/webhook"  # Webhook 路径
    allow_from: list[str] = Field(default_factory=list)  # 允许的 PSID 白名单（空表示所有人）
    text_timeout: float = 5.0  # 文本消息发送超时（秒）
    image_timeout: float = 10.0  # 图片消息发送超时（秒）


class ChannelsConfig(BaseModel):
    """所有消息渠道的聚合配置。"""
    messenger: MessengerConfig = Field(default_factory=MessengerConfig)


# ==============================================================================
# 核心组件配置
# ==============================================================================


class ScraperConfig(BaseModel):
    """漫画站点抓取配置。每次抓取只尝试一次，超时即视为未找到。"""
    site_root: str = "https://lekmanga.net"  # 站点根地址，列表页为 <site_root>/manga/<slug>/
    user_agent: str = "MangaBot/1.0"  # 请求头 User-Agent
    listing_timeout: float = 10.0  # 列表页抓取超时（秒）
    chapter_timeout: float = 15.0  # 章节页抓取超时（秒）


class DeliveryConfig(BaseModel):
    """出站投递配置。"""
    image_delay_ms: int = 500  # 相邻两张图片之间的最小间隔（毫秒）

    @property
    def image_delay(self) -> float:
        """图片间隔（秒）。"""
        return self.image_delay_ms / 1000


class ConversationConfig(BaseModel):
    """会话状态机配置。"""
    reset_keyword: str = "list"  # 重置关键字（大小写不敏感），清除会话并提示重新搜索


class MessagesConfig(BaseModel):
    """
    面向用户的文本模板。

    占位符：
    - search_summary: {title} {count} {cover}
    - progress: {number}
    """
    reset_prompt: str = "🔍 Type a manga title to search"
    not_found: str = "⚠️ I couldn't find that manga"
    search_summary: str = (
        "📖 {title}\n"
        "📚 Chapters: {count}\n"
        "🖼️ {cover}\n\n"
        "Send a chapter number (e.g. 1) to get its images\n"
        "or 'list' to start over"
    )
    cover_found: str = "Cover fetched"
    cover_missing: str = "No cover available"
    invalid_chapter: str = "⚠️ That chapter number isn't available!"
    progress: str = "📂 Sending images for chapter {number}..."
    no_images: str = "❌ I couldn't find any images for this chapter"
    chapter_error: str = "❌ Something went wrong while fetching the images"


# ==============================================================================
# 根配置类 —— 整个 mangabot 的配置入口
# ==============================================================================


class Config(BaseSettings):
    """
    mangabot 根配置类。

    继承自 Pydantic 的 BaseSettings，除了支持从 JSON 文件加载外，
    还支持从环境变量读取配置：
    - 环境变量前缀: MANGABOT_
    - 嵌套分隔符: __ (双下划线)
    - 示例: MANGABOT_CHANNELS__MESSENGER__PAGE_ACCESS_TOKEN=xxx
    """
    channels: ChannelsConfig = Field(default_factory=ChannelsConfig)  # 消息渠道配置
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)  # 站点抓取配置
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)  # 出站投递配置
    conversation: ConversationConfig = Field(default_factory=ConversationConfig)  # 状态机配置
    messages: MessagesConfig = Field(default_factory=MessagesConfig)  # 文本模板

    model_config = SettingsConfigDict(
        env_prefix="MANGABOT_",  # 环境变量前缀
        env_nested_delimiter="__"  # 嵌套配置的分隔符
    )
