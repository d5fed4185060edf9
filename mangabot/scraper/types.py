"""
抽取结果数据类型定义。

- Chapter：章节在会话中的编号与页面地址
- MangaInfo：列表页抽取结果（标题、封面、章节列表）
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chapter:
    """
    单个章节。

    属性:
        number: 在会话章节序列中的 1 起始位置（抽取时分配，与页面上印的章节号无关）
        url: 章节页面地址，用于第二阶段抓取图片
    """
    number: int
    url: str


@dataclass
class MangaInfo:
    """
    列表页抽取结果。

    属性:
        title: 页面标题文本（已去除首尾空白）
        cover_image: 封面图片地址，页面没有封面时为 None
        chapters: 章节列表，顺序为文档顺序的逆序
    """
    title: str
    cover_image: str | None = None
    chapters: list[Chapter] = field(default_factory=list)

    @property
    def has_cover(self) -> bool:
        return bool(self.cover_image)
