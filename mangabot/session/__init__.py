"""
会话管理模块 - 每个用户的浏览状态。

会话只在一次成功搜索之后存在，保存已解析的标题和章节列表；
用户发送重置关键字时删除，新的成功搜索无条件覆盖。
会话不落盘、不过期，进程重启即丢失。
"""

from mangabot.session.manager import Session, SessionManager

__all__ = ["SessionManager", "Session"]
