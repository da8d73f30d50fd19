"""
测试用的 Playwright 页面 / 元素替身。

只实现业务代码实际调用到的方法；脚本调用按脚本内容里的关键片段分派。
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Callable, Optional

from easyapplyagent.core.executor import InteractionExecutor
from easyapplyagent.core.locator import LocatorEngine, ResolvePolicy
from easyapplyagent.core.pointer import PointerSimulator
from easyapplyagent.core.timing import TimingModel


class FakeElement:
    def __init__(
        self,
        text: str = "",
        *,
        value: str = "",
        visible: bool = True,
        enabled: bool = True,
        box: Optional[tuple[float, float, float, float]] = (100, 200, 80, 30),
        options: Optional[list[str]] = None,
        selected: int = 0,
        fail_native_click: bool = False,
        fail_script_click: bool = False,
        fail_synthetic_click: bool = False,
        fail_fill: bool = False,
        fill_transform: Optional[Callable[[str], str]] = None,
        reject_keys: bool = False,
    ):
        self.text = text
        self.value = value
        self.visible = visible
        self.enabled = enabled
        self.box = box
        self.options = list(options or [])
        self.selected = selected
        self.fail_native_click = fail_native_click
        self.fail_script_click = fail_script_click
        self.fail_synthetic_click = fail_synthetic_click
        self.fail_fill = fail_fill
        self.fill_transform = fill_transform
        self.reject_keys = reject_keys
        self.page: Optional["FakePage"] = None
        self.clicks: list[str] = []
        self.pressed: list[str] = []
        self.fills: list[str] = []
        self.scrolled_into_view = 0
        self.visibility_checks = 0

    def is_visible(self) -> bool:
        self.visibility_checks += 1
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    def bounding_box(self):
        if self.box is None:
            return None
        x, y, w, h = self.box
        return {"x": x, "y": y, "width": w, "height": h}

    def click(self, timeout: Optional[int] = None) -> None:
        if self.fail_native_click:
            raise RuntimeError("element click intercepted")
        self.clicks.append("native")

    def evaluate(self, script: str, arg: Any = None):
        if "scrollIntoView" in script:
            self.scrolled_into_view += 1
            return None
        if "el.value = ''" in script:
            self.value = ""
            return None
        if "pointerdown" in script:
            if self.fail_synthetic_click:
                raise RuntimeError("synthetic events blocked")
            self.clicks.append("synthetic")
            return None
        if "el.click()" in script:
            if self.fail_script_click:
                raise RuntimeError("script click failed")
            self.clicks.append("script")
            return None
        if "selectedIndex" in script:
            if not self.options:
                return ""
            return self.options[self.selected]
        if "el.options" in script:
            return list(self.options)
        if "el.value ||" in script:
            return self.value
        raise AssertionError(f"unexpected element script: {script}")

    def focus(self) -> None:
        if self.page is not None:
            self.page.focused = self

    def fill(self, value: str, timeout: Optional[int] = None) -> None:
        if self.fail_fill:
            raise RuntimeError("fill not supported")
        self.fills.append(value)
        self.value = self.fill_transform(value) if self.fill_transform else value

    def input_value(self, timeout: Optional[int] = None) -> str:
        return self.value

    def select_option(self, label: Optional[str] = None, index: Optional[int] = None):
        if label is not None:
            if label not in self.options:
                raise RuntimeError(f"no option {label!r}")
            self.selected = self.options.index(label)
        elif index is not None:
            if not 0 <= index < len(self.options):
                raise RuntimeError(f"no option #{index}")
            self.selected = index
        return [self.options[self.selected]]

    def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeLocator:
    def __init__(self, elements: list[FakeElement]):
        self._elements = elements

    def count(self) -> int:
        return len(self._elements)

    def nth(self, index: int) -> FakeElement:
        return self._elements[index]


class FakeJSHandle:
    def __init__(self, value: Any):
        self._value = value

    def as_element(self):
        return self._value if isinstance(self._value, FakeElement) else None


class FakeMouse:
    def __init__(self):
        self.moves: list[tuple[float, float]] = []
        self.fail = False

    def move(self, x: float, y: float) -> None:
        if self.fail:
            raise RuntimeError("mouse unavailable")
        self.moves.append((x, y))


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.typed: list[str] = []

    def type(self, text: str) -> None:
        self.typed.append(text)
        el = self.page.focused
        if el is not None and not el.reject_keys:
            el.value += text

    def press(self, key: str) -> None:
        self.typed.append(f"<{key}>")


class FakePage:
    def __init__(
        self,
        url: str = "https://www.linkedin.com/feed/",
        body_text: str = "",
        inner_height: int = 900,
    ):
        self.url = url
        self.body_text = body_text
        self.inner_height = inner_height
        self.selectors: dict[str, list[FakeElement]] = {}
        # 脚本片段 -> 返回值（可调用对象会收到 arg）
        self.scripts: dict[str, Any] = {}
        self.failing_selectors: set[str] = set()
        self.queries: list[str] = []
        self.waits: list[int] = []
        self.scrolls: list[Any] = []
        self.gotos: list[str] = []
        self.screenshots: list[str] = []
        self.closed = False
        self.focused: Optional[FakeElement] = None
        self.mouse = FakeMouse()
        self.keyboard = FakeKeyboard(self)
        self.on_scroll: Optional[Callable[["FakePage", int], None]] = None
        self.on_wait: Optional[Callable[["FakePage", int], None]] = None
        self.on_goto: Optional[Callable[["FakePage", str], None]] = None

    def add(self, selector: str, *elements: FakeElement) -> FakeElement:
        for el in elements:
            el.page = self
        self.selectors.setdefault(selector, []).extend(elements)
        return elements[0]

    def locator(self, selector: str, has_text: Any = None) -> FakeLocator:
        self.queries.append(selector)
        if selector in self.failing_selectors:
            raise RuntimeError(f"invalid selector {selector}")
        elements = list(self.selectors.get(selector, []))
        if has_text is not None:
            if isinstance(has_text, str):
                elements = [e for e in elements if has_text.lower() in e.text.lower()]
            else:
                elements = [e for e in elements if has_text.search(e.text)]
        return FakeLocator(elements)

    def evaluate(self, script: str, arg: Any = None):
        if "scrollBy" in script:
            self.scrolls.append(arg)
            if self.on_scroll:
                self.on_scroll(self, len(self.scrolls))
            return None
        if "innerHeight" in script:
            return self.inner_height
        for key, value in self.scripts.items():
            if key in script:
                return value(arg) if callable(value) else value
        return None

    def evaluate_handle(self, script: str, arg: Any = None) -> FakeJSHandle:
        return FakeJSHandle(self.evaluate(script, arg))

    def inner_text(self, selector: str, timeout: Optional[int] = None) -> str:
        return self.body_text

    def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)
        if self.on_wait:
            self.on_wait(self, ms)

    def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.gotos.append(url)
        self.url = url
        if self.on_goto:
            self.on_goto(self, url)

    def screenshot(self, path: str, full_page: bool = False) -> None:
        Path(path).write_bytes(b"\x89PNG")
        self.screenshots.append(path)

    def is_closed(self) -> bool:
        return self.closed


class ScriptedOperator:
    """按顺序返回预设答案的操作员替身。"""

    def __init__(self, answers: Optional[list[str]] = None, choices: Optional[list[Any]] = None):
        self.answers = list(answers or [])
        self.choices = list(choices or [])
        self.asked: list[str] = []
        self.offered: list[tuple[str, list[str]]] = []

    def ask(self, label: str) -> str:
        self.asked.append(label)
        return self.answers.pop(0) if self.answers else ""

    def choose(self, label: str, options: list[str]):
        self.offered.append((label, list(options)))
        return self.choices.pop(0) if self.choices else None


def make_executor(
    seed: int = 7,
    *,
    policy: Optional[ResolvePolicy] = None,
    diagnostics=None,
    log: Optional[list[tuple[str, str]]] = None,
) -> InteractionExecutor:
    log_fn = (lambda msg, level="info": log.append((msg, level))) if log is not None else None
    timing = TimingModel(rng=random.Random(seed))
    engine = LocatorEngine(timing=timing, policy=policy or ResolvePolicy(), log_fn=log_fn)
    pointer = PointerSimulator(timing=timing, log_fn=log_fn)
    return InteractionExecutor(engine, pointer, timing, diagnostics, log_fn)
