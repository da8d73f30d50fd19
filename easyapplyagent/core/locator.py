"""
元素定位引擎

职责：
- 四类探针（结构选择器 / 属性 / 文本 / 脚本）统一 query(page) 接口
- 按探针顺序取第一个可见（需要时可用）的候选，立即返回
- 全部落空时按策略增量滚动并整体重试，最后做一次通用文本扫描兜底

单个探针报错视为"没有候选"，不影响后续探针；只有页面已关闭才抛异常。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .errors import ensure_session
from .timing import TimingModel

LogFn = Callable[[str, str], None]

# 单个探针最多检查的候选数量
MAX_CANDIDATES = 10

SCAN_SCRIPT = """
({needles}) => {
  const isVisible = (el) => {
    const st = window.getComputedStyle(el);
    if (!st || st.display === "none" || st.visibility === "hidden") return false;
    const r = el.getBoundingClientRect();
    return r.width > 0 && r.height > 0;
  };
  const nodes = document.querySelectorAll(
    "button, a, [role='button'], label, input, select, textarea"
  );
  for (const el of nodes) {
    if (!isVisible(el)) continue;
    const hay = [
      el.innerText || el.textContent || "",
      el.getAttribute("aria-label") || "",
      el.getAttribute("placeholder") || "",
    ].join(" ").toLowerCase();
    if (needles.some((n) => hay.includes(n))) return el;
  }
  return null;
}
"""


def _expand(locator) -> list:
    count = min(locator.count(), MAX_CANDIDATES)
    return [locator.nth(i) for i in range(count)]


@dataclass(frozen=True)
class StructuralProbe:
    """CSS 或 XPath（以 // 或 xpath= 开头）路径。"""

    selector: str

    def query(self, page) -> list:
        return _expand(page.locator(self.selector))

    def describe(self) -> str:
        return f"structural:{self.selector}"


@dataclass(frozen=True)
class AttributeProbe:
    attribute: str
    value: str
    tag: str = "*"
    mode: str = "contains"  # contains | equals | prefix
    ignore_case: bool = False

    def css(self) -> str:
        op = {"contains": "*=", "equals": "=", "prefix": "^="}[self.mode]
        flag = " i" if self.ignore_case else ""
        escaped = self.value.replace('"', '\\"')
        return f'{self.tag}[{self.attribute}{op}"{escaped}"{flag}]'

    def query(self, page) -> list:
        return _expand(page.locator(self.css()))

    def describe(self) -> str:
        return f"attribute:{self.css()}"


@dataclass(frozen=True)
class TextProbe:
    """按可见文本匹配：默认大小写不敏感的子串匹配。"""

    text: str
    tag: str = "button"
    exact: bool = False

    def query(self, page) -> list:
        if self.exact:
            pattern = re.compile(rf"^\s*{re.escape(self.text)}\s*$")
            return _expand(page.locator(self.tag, has_text=pattern))
        return _expand(page.locator(self.tag, has_text=self.text))

    def describe(self) -> str:
        return f"text:{self.tag}~{self.text!r}"


@dataclass(frozen=True)
class ScriptProbe:
    """页面内脚本返回单个元素（或 null）。"""

    script: str
    arg: Any = None

    def query(self, page) -> list:
        handle = page.evaluate_handle(self.script, self.arg)
        element = handle.as_element() if handle is not None else None
        return [element] if element is not None else []

    def describe(self) -> str:
        return "script"


Probe = Union[StructuralProbe, AttributeProbe, TextProbe, ScriptProbe]


@dataclass(frozen=True)
class Target:
    name: str
    probes: tuple[Probe, ...]
    require_enabled: bool = False
    scroll_retries: int = 0
    text_hints: tuple[str, ...] = ()
    fallback_scan: bool = True

    def needles(self) -> list[str]:
        hints = self.text_hints or (self.name,)
        return [h.strip().lower() for h in hints if h and h.strip()]


@dataclass
class Candidate:
    """活的元素句柄；可见 / 可用状态每次访问都实时读取。"""

    handle: Any
    probe: Probe

    @property
    def visible(self) -> bool:
        try:
            return bool(self.handle.is_visible())
        except Exception:
            return False

    @property
    def enabled(self) -> bool:
        try:
            return bool(self.handle.is_enabled())
        except Exception:
            return False

    @property
    def interactable(self) -> bool:
        return self.visible and self.enabled


@dataclass(frozen=True)
class ResolvePolicy:
    max_scroll_retries: int = 5
    step_min_px: int = 300
    step_max_px: int = 500
    settle_min_ms: int = 800
    settle_max_ms: int = 1500


@dataclass
class LocatorEngine:
    timing: TimingModel
    policy: ResolvePolicy = field(default_factory=ResolvePolicy)
    log_fn: Optional[LogFn] = None

    def _log(self, msg: str, level: str = "info") -> None:
        if self.log_fn:
            self.log_fn(msg, level)

    def attempt(self, target: Target, page) -> Candidate | None:
        """单轮探针检查：不滚动、不等待。"""
        for probe in target.probes:
            try:
                handles = probe.query(page)
            except Exception as e:
                self._log(f"   探针失败 {probe.describe()}: {e}", "warn")
                continue
            for handle in handles:
                candidate = Candidate(handle=handle, probe=probe)
                ok = candidate.interactable if target.require_enabled else candidate.visible
                if ok:
                    return candidate
        return None

    def resolve(self, target: Target, page) -> Candidate | None:
        """
        定位目标元素。

        顺序：探针列表 → 增量滚动重试 → 文本扫描兜底；全部失败返回 None。
        """
        ensure_session(page)
        candidate = self.attempt(target, page)
        if candidate is not None:
            return candidate

        retries = min(max(target.scroll_retries, 0), self.policy.max_scroll_retries)
        for i in range(retries):
            self._scroll_step(page)
            ensure_session(page)
            candidate = self.attempt(target, page)
            if candidate is not None:
                self._log(f"✓ 滚动 {i + 1}/{retries} 后找到 {target.name}")
                return candidate

        if target.fallback_scan:
            candidate = self.scan(target, page)
            if candidate is not None:
                self._log(f"✓ 文本扫描兜底找到 {target.name}")
                return candidate

        self._log(f"⚠ 未找到元素: {target.name}", "warn")
        return None

    def scan(self, target: Target, page) -> Candidate | None:
        needles = target.needles()
        if not needles:
            return None
        probe = ScriptProbe(SCAN_SCRIPT, {"needles": needles})
        try:
            handles = probe.query(page)
        except Exception as e:
            self._log(f"   文本扫描失败: {e}", "warn")
            return None
        if not handles:
            return None
        candidate = Candidate(handle=handles[0], probe=probe)
        if target.require_enabled and not candidate.interactable:
            self._log(f"   文本扫描命中的 {target.name} 不可用，忽略", "warn")
            return None
        return candidate

    def _scroll_step(self, page) -> None:
        dy = self.timing.between(self.policy.step_min_px, self.policy.step_max_px)
        try:
            page.evaluate("(dy) => window.scrollBy(0, dy)", dy)
        except Exception as e:
            self._log(f"   滚动失败: {e}", "warn")
        page.wait_for_timeout(
            self.timing.between(self.policy.settle_min_ms, self.policy.settle_max_ms)
        )
