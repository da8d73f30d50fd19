"""
表单字段填写：已填的不动；空字段先用缓存值，没有缓存再问操作员并写回缓存。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .diagnostics import DiagnosticCapture
from .executor import InteractionExecutor
from .locator import Candidate, LocatorEngine, Target
from .operator import Operator
from .value_store import PropertiesValueStore
from .verifier import (
    get_input_value,
    get_option_texts,
    get_selected_option_text,
    is_placeholder_option,
)

LogFn = Callable[[str, str], None]

FieldStatus = Literal[
    "already_set",
    "filled",
    "not_found",
    "no_value",
    "invalid_choice",
    "type_failed",
    "select_failed",
]
ValueSource = Literal["page", "cache", "operator"]


@dataclass
class FieldOutcome:
    status: FieldStatus
    key: str
    value: Optional[str] = None
    source: Optional[ValueSource] = None

    @property
    def ok(self) -> bool:
        return self.status in ("already_set", "filled")


class FieldResolver:
    def __init__(
        self,
        executor: InteractionExecutor,
        engine: LocatorEngine,
        store: PropertiesValueStore,
        operator: Operator,
        log_fn: Optional[LogFn] = None,
        *,
        diagnostics: Optional[DiagnosticCapture] = None,
    ) -> None:
        self.executor = executor
        self.engine = engine
        self.store = store
        self.operator = operator
        self.diagnostics = diagnostics
        self._log = log_fn or (lambda msg, level="info": None)

    def fill_if_empty(
        self, field_target: Target, property_key: str, prompt_label: str, page
    ) -> FieldOutcome:
        candidate = self.engine.resolve(field_target, page)
        if candidate is None:
            self._log(f"⚠ 找不到字段: {prompt_label}", "warn")
            self._capture(page, f"field_not_found_{property_key}")
            return FieldOutcome(status="not_found", key=property_key)

        current = get_input_value(candidate.handle)
        if current.strip():
            self._log(f"   {prompt_label} 已填写: {current}")
            return FieldOutcome(
                status="already_set", key=property_key, value=current, source="page"
            )

        source: ValueSource = "cache"
        value = (self.store.get(property_key) or "").strip()
        if value:
            self._log(f"   使用已保存的 {prompt_label}: {value}")
        else:
            source = "operator"
            value = self.operator.ask(prompt_label)
            if not value:
                self._log(f"⚠ 操作员未提供 {prompt_label}", "warn")
                self._capture(page, f"field_no_value_{property_key}")
                return FieldOutcome(status="no_value", key=property_key)

        result = self.executor.type_into(candidate, value, page, name=prompt_label)
        if source == "operator":
            # 输入校验失败也保留操作员给的值，下次直接复用
            self.store.set(property_key, value)
        status: FieldStatus = "filled" if result.ok else "type_failed"
        return FieldOutcome(status=status, key=property_key, value=value, source=source)

    def select_if_unset(
        self, select_target: Target, property_key: str, prompt_label: str, page
    ) -> FieldOutcome:
        candidate = self.engine.resolve(select_target, page)
        if candidate is None:
            self._log(f"   未发现下拉框: {prompt_label}")
            self._capture(page, f"select_not_found_{property_key}")
            return FieldOutcome(status="not_found", key=property_key)

        current = get_selected_option_text(candidate.handle)
        if not is_placeholder_option(current):
            self._log(f"   {prompt_label} 已选择: {current}")
            return FieldOutcome(
                status="already_set", key=property_key, value=current, source="page"
            )

        options = get_option_texts(candidate.handle)
        cached = (self.store.get(property_key) or "").strip()
        if cached:
            if cached in options and self._select(candidate, page, label=cached):
                self._log(f"   使用已保存的 {prompt_label}: {cached}")
                return FieldOutcome(
                    status="filled", key=property_key, value=cached, source="cache"
                )
            self._log(f"⚠ 已保存的 {prompt_label} 不在选项中，重新询问", "warn")

        index = self.operator.choose(prompt_label, options)
        if index is None or not (0 <= index < len(options)):
            self._log(f"⚠ 无效选择，{prompt_label} 保持不变", "warn")
            self._capture(page, f"invalid_choice_{property_key}")
            return FieldOutcome(status="invalid_choice", key=property_key)

        chosen = options[index]
        if not self._select(candidate, page, label=chosen):
            self._capture(page, f"select_failed_{property_key}")
            return FieldOutcome(
                status="select_failed", key=property_key, value=chosen, source="operator"
            )
        self.store.set(property_key, chosen)
        self._log(f"✓ 已选择 {prompt_label}: {chosen}")
        return FieldOutcome(
            status="filled", key=property_key, value=chosen, source="operator"
        )

    def select_first_real_option(self, select_target: Target, page) -> FieldOutcome:
        """选第一个非占位选项（邮箱下拉：默认用账号主邮箱）。"""
        candidate = self.engine.resolve(select_target, page)
        if candidate is None:
            return FieldOutcome(status="not_found", key=select_target.name)
        options = get_option_texts(candidate.handle)
        if not options:
            self._capture(page, f"select_no_options_{select_target.name}")
            return FieldOutcome(status="no_value", key=select_target.name)
        index = 0
        if len(options) > 1 and ("Select" in options[0] or options[0] == "--"):
            index = 1
        if not self._select(candidate, page, index=index):
            self._capture(page, f"select_failed_{select_target.name}")
            return FieldOutcome(status="select_failed", key=select_target.name)
        self._log(f"✓ 已选择邮箱: {options[index]}")
        return FieldOutcome(
            status="filled", key=select_target.name, value=options[index], source="page"
        )

    def _select(
        self,
        candidate: Candidate,
        page,
        *,
        label: Optional[str] = None,
        index: Optional[int] = None,
    ) -> bool:
        self.executor.pointer.move_to(candidate.handle, page)
        try:
            if label is not None:
                candidate.handle.select_option(label=label)
            else:
                candidate.handle.select_option(index=index)
        except Exception as e:
            self._log(f"❌ 下拉选择失败: {e}", "error")
            return False
        page.wait_for_timeout(self.executor.timing.between(300, 700))
        return True

    def _capture(self, page, label: str) -> None:
        if self.diagnostics is not None:
            self.diagnostics.capture(page, label, failure=True)
