"""
浏览器管理模块：统一管理 Playwright 浏览器启动、profile、反自动化特征与事件日志。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from playwright.sync_api import BrowserContext, Page, sync_playwright

from ..config import BrowserSettings

LogFn = Callable[[str, str], None]

STEALTH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--start-maximized",
    "--disable-extensions",
    "--disable-popup-blocking",
    "--disable-infobars",
]

# 去掉 navigator.webdriver 标记
WEBDRIVER_PATCH = (
    "Object.defineProperty(navigator, 'webdriver', { get: () => undefined });"
)


@dataclass
class BrowserSession:
    playwright: Any
    context: BrowserContext
    page: Page
    _closed: bool = field(default=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """关闭浏览器；重复调用无副作用。"""
        if self._closed:
            return
        self._closed = True
        try:
            self.context.close()
        finally:
            try:
                self.playwright.stop()
            except Exception:
                pass


class BrowserManager:
    """
    管理浏览器生命周期与配置，避免业务流程中重复拼装启动参数。
    """

    def __init__(
        self,
        settings: Optional[BrowserSettings] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self._log = log_fn or (lambda msg, level="info": None)
        self._settings = settings or BrowserSettings()

    def launch_args(self) -> dict:
        """持久化上下文的启动参数。"""
        cfg = self._settings
        raw_profile_dir = cfg.user_data_dir or "~/.cache/easyapplyagent/chrome-profile"
        launch_args = {
            "headless": cfg.headless,
            "slow_mo": cfg.slow_mo if cfg.slow_mo > 0 else None,
            "user_data_dir": str(Path(raw_profile_dir).expanduser()),
            "args": list(STEALTH_ARGS),
            "ignore_default_args": ["--enable-automation"],
            "user_agent": cfg.user_agent or None,
            "no_viewport": True,
        }
        if cfg.executable_path:
            launch_args["executable_path"] = cfg.executable_path
        # 清理 None 参数
        return {k: v for k, v in launch_args.items() if v is not None}

    def launch(self) -> BrowserSession:
        """启动持久化浏览器并返回会话。"""
        launch_args = self.launch_args()
        playwright = sync_playwright().start()
        try:
            context = playwright.chromium.launch_persistent_context(**launch_args)
        except Exception:
            playwright.stop()
            raise
        context.add_init_script(WEBDRIVER_PATCH)
        page = context.pages[0] if context.pages else context.new_page()

        self._attach_basic_listeners(page)
        self._attach_context_listeners(context)
        self._log(f"✓ 浏览器已启动 (headless={self._settings.headless})")

        return BrowserSession(playwright=playwright, context=context, page=page)

    def _attach_basic_listeners(self, page: Page) -> None:
        """采集页面基础错误信息，写入日志便于排查。"""
        try:
            page.on(
                "console",
                lambda msg: self._log(f"[console:{msg.type}] {msg.text}", "warn")
                if msg.type in ("error", "warning")
                else None,
            )
            page.on(
                "pageerror",
                lambda exc: self._log(f"[pageerror] {exc}", "error"),
            )
        except Exception:
            pass

    def _attach_context_listeners(self, context: BrowserContext) -> None:
        try:
            context.on(
                "requestfailed",
                lambda req: self._log(
                    f"[requestfailed] {req.method} {req.url}", "warn"
                ),
            )
        except Exception:
            pass
