"""
交互执行模块

职责：
- click：定位 → 鼠标轨迹 → 原生点击 / 脚本点击 / 合成事件序列，逐级升级
- type_text：聚焦 → 清空 → 整段填入 + 模拟打字耗时 → 校验；不一致再逐字输入
- 失败路径统一截图，结果以 InteractionResult 返回，不抛异常
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .diagnostics import DiagnosticCapture
from .locator import Candidate, LocatorEngine, Target
from .pointer import PointerSimulator
from .timing import TimingModel
from .verifier import get_input_value

LogFn = Callable[[str, str], None]

InteractionStatus = Literal[
    "success",
    "not_found",
    "click_failed",
    "type_failed",
]

CLEAR_SCRIPT = """
(el) => {
  el.value = '';
  el.dispatchEvent(new Event('input', { bubbles: true }));
  el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""

SYNTHETIC_CLICK_SCRIPT = """
(el) => {
  const r = el.getBoundingClientRect();
  const opts = {
    bubbles: true,
    cancelable: true,
    view: window,
    clientX: r.left + r.width / 2,
    clientY: r.top + r.height / 2,
  };
  for (const type of ["pointerdown", "mousedown", "pointerup", "mouseup", "click"]) {
    const Ctor = type.startsWith("pointer") && window.PointerEvent ? PointerEvent : MouseEvent;
    el.dispatchEvent(new Ctor(type, opts));
  }
}
"""

CLICK_TIMEOUT_MS = 3000


@dataclass
class InteractionResult:
    status: InteractionStatus
    target: str
    method: Optional[str] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class InteractionExecutor:
    def __init__(
        self,
        engine: LocatorEngine,
        pointer: PointerSimulator,
        timing: TimingModel,
        diagnostics: Optional[DiagnosticCapture] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self.engine = engine
        self.pointer = pointer
        self.timing = timing
        self.diagnostics = diagnostics
        self._log = log_fn or (lambda msg, level="info": None)

    # ---- click ----

    def click(self, target: Target, page) -> InteractionResult:
        candidate = self.engine.resolve(target, page)
        if candidate is None:
            self._capture(page, f"not_found_{target.name}", failure=True)
            return InteractionResult(status="not_found", target=target.name)
        return self.click_candidate(candidate, page, name=target.name)

    def click_candidate(
        self, candidate: Candidate, page, *, name: str = "element"
    ) -> InteractionResult:
        self._capture(page, f"before_click_{name}")
        self.pointer.move_to(candidate.handle, page)

        errors: list[str] = []
        for method, action in (
            ("native", lambda: candidate.handle.click(timeout=CLICK_TIMEOUT_MS)),
            ("script", lambda: candidate.handle.evaluate("(el) => el.click()")),
            ("synthetic", lambda: candidate.handle.evaluate(SYNTHETIC_CLICK_SCRIPT)),
        ):
            try:
                action()
            except Exception as e:
                errors.append(f"{method}: {e}")
                continue
            if errors:
                self._log(f"   {name}: 点击降级为 {method}", "warn")
            self._capture(page, f"after_click_{name}")
            return InteractionResult(status="success", target=name, method=method)

        self._log(f"❌ 点击失败 {name}: {'; '.join(errors)}", "error")
        self._capture(page, f"click_failed_{name}", failure=True)
        return InteractionResult(
            status="click_failed", target=name, detail="; ".join(errors)
        )

    # ---- type ----

    def type_text(
        self, target: Target, value: str, page, *, per_char: bool = False
    ) -> InteractionResult:
        """
        向目标输入框写入文本。

        per_char=True 时跳过整段填入，直接逐字输入（登录表单使用）。
        """
        candidate = self.engine.resolve(target, page)
        if candidate is None:
            self._capture(page, f"not_found_{target.name}", failure=True)
            return InteractionResult(status="not_found", target=target.name)
        return self.type_into(candidate, value, page, name=target.name, per_char=per_char)

    def type_into(
        self,
        candidate: Candidate,
        value: str,
        page,
        *,
        name: str = "field",
        per_char: bool = False,
    ) -> InteractionResult:
        handle = candidate.handle
        self._capture(page, f"before_type_{name}")
        try:
            handle.focus()
        except Exception as e:
            self._log(f"   {name}: focus 失败 {e}", "warn")

        if not per_char:
            try:
                self._clear(handle)
                handle.fill(value)
                page.wait_for_timeout(self.timing.bulk_typing_estimate(value))
                if get_input_value(handle) == value:
                    self._capture(page, f"after_type_{name}")
                    return InteractionResult(status="success", target=name, method="bulk")
                self._log(f"   {name}: 整段输入内容不一致，改为逐字输入", "warn")
            except Exception as e:
                self._log(f"   {name}: 整段输入失败 {e}，改为逐字输入", "warn")

        try:
            self._clear(handle)
            handle.focus()
            self._type_keystrokes(value, page)
        except Exception as e:
            self._log(f"❌ 逐字输入失败 {name}: {e}", "error")

        if get_input_value(handle) == value:
            self._capture(page, f"after_type_{name}")
            return InteractionResult(status="success", target=name, method="keystrokes")

        self._capture(page, f"type_failed_{name}", failure=True)
        return InteractionResult(
            status="type_failed", target=name, detail="field content mismatch"
        )

    def _type_keystrokes(self, value: str, page) -> None:
        for char, wait in zip(value, self.timing.keystroke_schedule(value)):
            page.keyboard.type(char)
            page.wait_for_timeout(wait)

    def _clear(self, handle) -> None:
        try:
            handle.evaluate(CLEAR_SCRIPT)
        except Exception:
            handle.fill("")

    def _capture(self, page, label: str, *, failure: bool = False) -> None:
        if self.diagnostics is not None:
            self.diagnostics.capture(page, label, failure=failure)
