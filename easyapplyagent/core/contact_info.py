"""
Easy Apply 弹窗第一步：联系方式。

姓名 / 所在地 / 电话区号 / 邮箱：页面已有的值保持不变，空字段用缓存或询问操作员，
最后点击 Next。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from .diagnostics import DiagnosticCapture
from .errors import ensure_session
from .executor import InteractionExecutor
from .field_resolver import FieldOutcome, FieldResolver
from .locator import LocatorEngine
from .targets import CONTACT_MODAL, EMAIL_SELECT, NEXT_BUTTON, PHONE_COUNTRY, labeled_input
from .timing import TimingModel

LogFn = Callable[[str, str], None]

ContactStatus = Literal["completed", "modal_not_found", "next_not_found"]

# (property key, 页面标签)
TEXT_FIELDS = (
    ("firstName", "First name"),
    ("lastName", "Last name"),
    ("location", "Location"),
)


@dataclass
class ContactInfoResult:
    status: ContactStatus
    fields: dict[str, FieldOutcome] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "completed"


class ContactInfoStep:
    def __init__(
        self,
        resolver: FieldResolver,
        engine: LocatorEngine,
        executor: InteractionExecutor,
        timing: TimingModel,
        log_fn: Optional[LogFn] = None,
        *,
        diagnostics: Optional[DiagnosticCapture] = None,
    ) -> None:
        self.resolver = resolver
        self.engine = engine
        self.executor = executor
        self.timing = timing
        self.diagnostics = diagnostics
        self._log = log_fn or (lambda msg, level="info": None)

    def handle(self, page) -> ContactInfoResult:
        ensure_session(page)
        if self.engine.resolve(CONTACT_MODAL, page) is None:
            self._log("❌ 未检测到 Easy Apply 联系方式弹窗", "error")
            if self.diagnostics is not None:
                self.diagnostics.capture(page, "contact_modal_not_found", failure=True)
            return ContactInfoResult(status="modal_not_found")

        self._log("\n--- 联系方式 ---")
        outcomes: dict[str, FieldOutcome] = {}
        for key, label in TEXT_FIELDS:
            outcomes[key] = self.resolver.fill_if_empty(labeled_input(label), key, label, page)
            page.wait_for_timeout(self.timing.pause("between_fields"))

        outcomes["phoneCountryCode"] = self.resolver.select_if_unset(
            PHONE_COUNTRY, "phoneCountryCode", "phone country code", page
        )

        email = self.resolver.select_first_real_option(EMAIL_SELECT, page)
        if email.status == "not_found":
            self._log("   没有邮箱下拉框，尝试邮箱输入框")
            email = self.resolver.fill_if_empty(
                labeled_input("Email"), "email", "Email address", page
            )
        outcomes["email"] = email

        page.wait_for_timeout(self.timing.between(500, 1200))
        if not self.executor.click(NEXT_BUTTON, page).ok:
            self._log("❌ 找不到 Next 按钮", "error")
            return ContactInfoResult(status="next_not_found", fields=outcomes)

        page.wait_for_timeout(self.timing.pause("after_click"))
        self._log("✓ 联系方式已提交，进入下一步")
        return ContactInfoResult(status="completed", fields=outcomes)
