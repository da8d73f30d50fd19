"""
职位页导航

职责：
- 从首页进入 Jobs（找不到导航入口时直接跳转 /jobs/）
- 点击 "Show all"、输入职位 / 地点并提交搜索
- 用 URL 参数应用过滤条件
- 打开第一个职位并点击 Easy Apply
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..config import FilterConfig
from .diagnostics import DiagnosticCapture
from .errors import ensure_session
from .executor import InteractionExecutor
from .filter_url import build_filtered_url
from .targets import (
    EASY_APPLY,
    FIRST_JOB,
    JOBS_NAV,
    SEARCH_BUTTON,
    SEARCH_LOCATION,
    SEARCH_ROLE,
    SHOW_ALL,
)
from .timing import TimingModel

LogFn = Callable[[str, str], None]

StepStatus = Literal["success", "fallback", "skipped", "failed"]

FORM_SUBMIT_SCRIPT = """
() => {
  const form = document.querySelector('form.jobs-search-box')
    || document.querySelector('form[role="search"]');
  if (!form) return false;
  if (typeof form.requestSubmit === 'function') form.requestSubmit();
  else form.submit();
  return true;
}
"""


@dataclass
class StepResult:
    status: StepStatus
    step: str
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in ("success", "fallback", "skipped")


class JobsNavigator:
    def __init__(
        self,
        executor: InteractionExecutor,
        timing: TimingModel,
        *,
        jobs_url: str = "https://www.linkedin.com/jobs/",
        diagnostics: Optional[DiagnosticCapture] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self.executor = executor
        self.timing = timing
        self.jobs_url = jobs_url
        self.diagnostics = diagnostics
        self._log = log_fn or (lambda msg, level="info": None)

    def open_jobs(self, page) -> StepResult:
        ensure_session(page)
        # 先在首页"看一会儿"
        page.wait_for_timeout(self.timing.between(3000, 7000))

        result = self.executor.click(JOBS_NAV, page)
        if result.ok:
            page.wait_for_timeout(self.timing.between(2000, 5000))
            self._log("✓ 已进入 Jobs 页")
            return StepResult(status="success", step="open_jobs")

        self._log("⚠ 找不到 Jobs 入口，改为直接跳转", "warn")
        self.human_scroll_down(page)
        page.wait_for_timeout(self.timing.between(1000, 3000))
        if not self._goto(page, self.jobs_url):
            return StepResult(status="failed", step="open_jobs", detail="navigation timeout")
        page.wait_for_timeout(self.timing.between(2000, 4000))
        return StepResult(status="fallback", step="open_jobs", detail=self.jobs_url)

    def show_all(self, page) -> StepResult:
        self.human_scroll_down(page)
        page.wait_for_timeout(self.timing.between(1000, 2000))
        result = self.executor.click(SHOW_ALL, page)
        if result.ok:
            page.wait_for_timeout(self.timing.pause("after_click"))
            self._log("✓ 已点击 Show all")
            return StepResult(status="success", step="show_all")
        self._log("⚠ 未找到 Show all，继续使用当前列表", "warn")
        return StepResult(status="skipped", step="show_all", detail=result.status)

    def search(self, page, role: str, location: str) -> StepResult:
        self._log(f"🔎 搜索职位: {role} @ {location}")
        role_result = self.executor.type_text(SEARCH_ROLE, role, page)
        if not role_result.ok:
            self._log(f"❌ 职位输入失败 ({role_result.status})", "error")
            return StepResult(status="failed", step="search", detail="role field")
        page.wait_for_timeout(self.timing.pause("between_fields"))

        location_result = self.executor.type_text(SEARCH_LOCATION, location, page)
        if not location_result.ok:
            self._log(f"⚠ 地点输入失败 ({location_result.status})", "warn")
        page.wait_for_timeout(self.timing.between(500, 1200))

        if self.executor.click(SEARCH_BUTTON, page).ok:
            method = "button"
        elif self._submit_form(page):
            method = "form_submit"
        elif self._press_enter(page):
            method = "enter"
        else:
            self._log("❌ 无法提交搜索", "error")
            return StepResult(status="failed", step="search", detail="submit")

        self._log(f"✓ 已提交搜索 ({method})")
        page.wait_for_timeout(self.timing.between(3000, 5000))
        return StepResult(
            status="success" if method == "button" else "fallback",
            step="search",
            detail=method,
        )

    def apply_filters(self, page, filters: FilterConfig) -> StepResult:
        current_url = page.url or ""
        if "linkedin.com/jobs/" not in current_url:
            self._log(f"⚠ 当前不在职位搜索页，跳过过滤: {current_url}", "warn")
            return StepResult(status="skipped", step="apply_filters", detail=current_url)
        if filters.is_empty:
            return StepResult(status="skipped", step="apply_filters", detail="no filters")

        filtered_url = build_filtered_url(current_url, filters)
        self._log(f"   过滤 URL: {filtered_url}")
        self._capture(page, "before_filters")
        if not self._goto(page, filtered_url):
            return StepResult(status="failed", step="apply_filters", detail="navigation timeout")
        page.wait_for_timeout(self.timing.between(3000, 5000))
        self._capture(page, "after_filters")
        return StepResult(status="success", step="apply_filters", detail=filtered_url)

    def open_first_job(self, page) -> StepResult:
        result = self.executor.click(FIRST_JOB, page)
        if not result.ok:
            self._log("❌ 搜索结果中没有可点击的职位", "error")
            return StepResult(status="failed", step="open_first_job", detail=result.status)
        page.wait_for_timeout(self.timing.between(2000, 4000))
        return StepResult(status="success", step="open_first_job")

    def start_easy_apply(self, page) -> StepResult:
        result = self.executor.click(EASY_APPLY, page)
        if not result.ok:
            self._log("❌ 找不到 Easy Apply 按钮", "error")
            return StepResult(status="failed", step="start_easy_apply", detail=result.status)
        page.wait_for_timeout(self.timing.between(2000, 4000))
        self._log("✓ 已打开 Easy Apply")
        return StepResult(status="success", step="start_easy_apply")

    def human_scroll_down(self, page) -> int:
        """分 2~5 次往下滚，每次约 1/3 到 2/3 屏。返回实际滚动次数。"""
        steps = self.timing.rng.randint(2, 5)
        try:
            height = int(page.evaluate("() => window.innerHeight") or 800)
        except Exception:
            height = 800
        done = 0
        for _ in range(steps):
            dy = height // 3 + self.timing.rng.randrange(max(1, height // 3))
            try:
                page.evaluate("(dy) => window.scrollBy(0, dy)", dy)
            except Exception as e:
                self._log(f"   滚动失败: {e}", "warn")
                break
            done += 1
            page.wait_for_timeout(self.timing.between(800, 1500))
        return done

    def _submit_form(self, page) -> bool:
        try:
            return bool(page.evaluate(FORM_SUBMIT_SCRIPT))
        except Exception as e:
            self._log(f"   表单提交失败: {e}", "warn")
            return False

    def _press_enter(self, page) -> bool:
        candidate = self.executor.engine.resolve(SEARCH_LOCATION, page)
        if candidate is None:
            return False
        try:
            candidate.handle.press("Enter")
            return True
        except Exception as e:
            self._log(f"   回车提交失败: {e}", "warn")
            return False

    def _goto(self, page, url: str) -> bool:
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=30000)
            return True
        except PlaywrightTimeoutError:
            self._log(f"❌ 页面加载超时: {url}", "error")
            self._capture(page, "navigation_timeout", failure=True)
            return False

    def _capture(self, page, label: str, *, failure: bool = False) -> None:
        if self.diagnostics is not None:
            self.diagnostics.capture(page, label, failure=failure)
