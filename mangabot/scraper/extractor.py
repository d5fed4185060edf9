"""
漫画站点抽取器 (scraper/extractor.py)

模块职责：
    实现两阶段内容抽取：
      - fetch_listing_info: 抓取漫画列表页，抽取标题、封面和章节列表
      - fetch_chapter_images: 抓取章节页，抽取阅读区内的全部图片地址

在架构中的位置：
    抽取器是会话引擎的叶子依赖，只负责"给定 URL，返回结构化数据"。
    它不保存任何状态，也不会把异常抛给调用方。

技术选型：
    - HTTP 客户端：httpx（异步 HTTP 库）
    - HTML 解析：BeautifulSoup（CSS 选择器定位 Madara 主题站点的固定结构）

页面结构约定（WordPress Madara 主题）：
    - 标题：.post-title h1
    - 封面：.summary_image img
    - 章节链接：.wp-manga-chapter a（文档中通常最新章节在前）
    - 章节图片：.reading-content img
"""

from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag
from loguru import logger

from mangabot.config.schema import ScraperConfig
from mangabot.scraper.types import Chapter, MangaInfo

TITLE_SELECTOR = ".post-title h1"
COVER_SELECTOR = ".summary_image img"
CHAPTER_LINK_SELECTOR = ".wp-manga-chapter a"
CHAPTER_IMAGE_SELECTOR = ".reading-content img"

# 懒加载主题会把真实地址放在 data-* 属性里，src 为空时依次尝试
IMAGE_SOURCE_ATTRS = ("src", "data-src", "data-lazy-src")


def slugify(query: str) -> str:
    """
    将用户输入的搜索文本转换为 URL 路径片段。

    规则只有两条：全部小写，每个空格替换为连字符（连续空格产生连续连字符）。

    参数:
        query: 用户原始搜索文本

    返回:
        str: slug，如 "One Piece" → "one-piece"
    """
    return query.lower().replace(" ", "-")


def build_listing_url(site_root: str, query: str) -> str:
    """
    根据站点根地址和搜索文本拼出列表页地址：<site-root>/manga/<slug>/

    参数:
        site_root: 站点根地址，如 "https://lekmanga.net"
        query: 用户原始搜索文本

    返回:
        str: 列表页完整 URL
    """
    return f"{site_root.rstrip('/')}/manga/{slugify(query)}/"


def _image_source(img: Tag) -> str:
    """取图片标签的地址，去除首尾空白；所有候选属性都为空时返回空字符串。"""
    for attr in IMAGE_SOURCE_ATTRS:
        value = img.get(attr)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def parse_listing(html: str, page_url: str) -> MangaInfo | None:
    """
    解析列表页 HTML。

    章节链接按文档顺序收集，然后整体逆序，编号为逆序后的 1 起始位置。
    即文档顺序 [c1, c2, c3] 得到 {1: c3, 2: c2, 3: c1}。

    参数:
        html: 页面 HTML
        page_url: 页面地址，用于把相对链接补全为绝对地址

    返回:
        MangaInfo；页面既没有标题也没有章节时视为"未找到"，返回 None
    """
    soup = BeautifulSoup(html, "html.parser")

    title_el = soup.select_one(TITLE_SELECTOR)
    title = title_el.get_text().strip() if title_el else ""

    cover_el = soup.select_one(COVER_SELECTOR)
    cover = _image_source(cover_el) if cover_el else ""

    links: list[str] = []
    for a in soup.select(CHAPTER_LINK_SELECTOR):
        href = a.get("href")
        href = href.strip() if isinstance(href, str) else ""
        links.append(urljoin(page_url, href) if href else "")

    if not title and not links:
        return None

    links.reverse()
    chapters = [Chapter(number=i, url=url) for i, url in enumerate(links, 1)]
    return MangaInfo(title=title, cover_image=cover or None, chapters=chapters)


def parse_chapter_images(html: str) -> list[str]:
    """
    解析章节页 HTML，按文档顺序返回阅读区内所有非空图片地址。

    参数:
        html: 章节页 HTML

    返回:
        list[str]: 图片 URL 列表（可能为空）
    """
    soup = BeautifulSoup(html, "html.parser")
    images = []
    for img in soup.select(CHAPTER_IMAGE_SELECTOR):
        src = _image_source(img)
        if src:
            images.append(src)
    return images


class MangaExtractor:
    """
    漫画站点抽取器。

    每次调用只发起一次带超时的 GET 请求，不做重试。
    任何失败都折叠为哨兵值：列表页返回 None，章节页返回空列表，
    调用方无法也无需区分"站点宕机"和"没有匹配"。

    类比 Java: 类似于 Jsoup.connect(url).timeout(...).get() 外面包一层 try/catch。
    """

    def __init__(
        self,
        config: ScraperConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        初始化抽取器。

        参数:
            config: 抽取配置（站点根地址、User-Agent、超时），None 时使用默认值
            transport: 可选的 httpx 传输层（测试时注入 MockTransport）
        """
        self.config = config or ScraperConfig()
        self._transport = transport

    def listing_url(self, query: str) -> str:
        """把用户搜索文本转换为本站点的列表页地址。"""
        return build_listing_url(self.config.site_root, query)

    async def _get(self, url: str, timeout: float) -> str:
        async with httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=True,
            timeout=timeout,
        ) as client:
            r = await client.get(url, headers={"User-Agent": self.config.user_agent})
            r.raise_for_status()
        return r.text

    async def fetch_listing_info(self, url: str) -> MangaInfo | None:
        """
        抓取并解析列表页。

        参数:
            url: 列表页地址（通常由 listing_url() 生成）

        返回:
            MangaInfo 或 None（抓取失败、非 2xx、解析失败、页面为空）
        """
        try:
            html = await self._get(url, self.config.listing_timeout)
            info = parse_listing(html, url)
        except Exception as e:
            logger.error(f"Listing fetch failed for {url}: {e}")
            return None

        if info is None:
            logger.info(f"No manga found at {url}")
        else:
            logger.debug(f"Parsed '{info.title}' with {len(info.chapters)} chapters from {url}")
        return info

    async def fetch_chapter_images(self, url: str) -> list[str]:
        """
        抓取并解析章节页。

        参数:
            url: 章节页地址

        返回:
            list[str]: 图片 URL 列表；任何失败都返回空列表
        """
        if not url:
            logger.warning("Chapter has no URL, skipping fetch")
            return []

        try:
            html = await self._get(url, self.config.chapter_timeout)
            images = parse_chapter_images(html)
        except Exception as e:
            logger.error(f"Chapter images fetch failed for {url}: {e}")
            return []

        logger.debug(f"Found {len(images)} images at {url}")
        return images
