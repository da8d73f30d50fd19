"""
会话级错误。

元素找不到、点击失败、登录失败等"预期内"的负面结果一律以结构化结果返回；
只有浏览器会话本身不可用（页面已关闭）才抛异常，由上层流程统一收尾。
"""

from __future__ import annotations


class SessionUnavailableError(RuntimeError):
    """页面 / 浏览器会话已关闭，无法继续任何交互。"""


def ensure_session(page) -> None:
    """页面已关闭时抛出 SessionUnavailableError。"""
    try:
        closed = bool(page.is_closed())
    except AttributeError:
        return
    if closed:
        raise SessionUnavailableError("browser page is closed")


class InvalidTransitionError(RuntimeError):
    """登录状态机出现不允许的状态跳转（程序错误，不是页面状况）。"""
