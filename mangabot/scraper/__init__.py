"""
内容抽取模块 - 从漫画站点页面中抽取结构化数据。

两阶段抽取流水线：
1. 列表页：标题 + 可选封面 + 章节列表（MangaInfo）
2. 章节页：阅读区内的全部图片 URL

抽取器没有状态，也从不向外抛出异常：网络失败、超时、HTTP 错误和解析异常
都会被记录日志并折叠为 None / 空列表。
"""

from mangabot.scraper.extractor import MangaExtractor, build_listing_url, slugify
from mangabot.scraper.types import Chapter, MangaInfo

__all__ = ["MangaExtractor", "MangaInfo", "Chapter", "build_listing_url", "slugify"]
