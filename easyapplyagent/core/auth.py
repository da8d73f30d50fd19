"""
LinkedIn 登录状态机

职责：
- 像人一样填写账号密码并提交
- 提交后判定：密码错误（立即失败，不轮询）/ 二次验证（有上限的轮询）/ 已登录 / 不确定
- 未配置账号时打开首页，等待人工在浏览器里登录

状态：NOT_STARTED → CREDENTIALS_SUBMITTED → AWAITING_VERIFICATION → LOGGED_IN | FAILED
所有跳转都经过校验并记录在 history 中；终态互斥。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Literal, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..config import AuthSettings, LinkedInSettings
from .diagnostics import DiagnosticCapture
from .errors import InvalidTransitionError, ensure_session
from .executor import InteractionExecutor
from .heuristics import (
    ERROR_STYLE_SELECTOR,
    LOGGED_IN_LANDMARK_SELECTOR,
    assess_credentials,
    detect_verification_prompt,
    is_logged_in,
)
from .targets import LOGIN_EMAIL, LOGIN_PASSWORD, LOGIN_SUBMIT
from .timing import TimingModel

LogFn = Callable[[str, str], None]

VerificationKind = Literal["manual", "second_factor"]
FailureReason = Literal[
    "invalid_credentials",
    "timeout",
    "missing_credentials",
    "login_form_unavailable",
]


class AuthState(str, Enum):
    NOT_STARTED = "not_started"
    CREDENTIALS_SUBMITTED = "credentials_submitted"
    AWAITING_VERIFICATION = "awaiting_verification"
    LOGGED_IN = "logged_in"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[AuthState, frozenset[AuthState]] = {
    AuthState.NOT_STARTED: frozenset(
        {
            AuthState.CREDENTIALS_SUBMITTED,
            AuthState.AWAITING_VERIFICATION,
            AuthState.FAILED,
        }
    ),
    AuthState.CREDENTIALS_SUBMITTED: frozenset(
        {
            AuthState.AWAITING_VERIFICATION,
            AuthState.LOGGED_IN,
            AuthState.FAILED,
        }
    ),
    AuthState.AWAITING_VERIFICATION: frozenset({AuthState.LOGGED_IN, AuthState.FAILED}),
    AuthState.LOGGED_IN: frozenset(),
    AuthState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class Credentials:
    email: str = ""
    password: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.email.strip()) and bool(self.password)

    @classmethod
    def from_settings(cls, linkedin: LinkedInSettings) -> "Credentials":
        return cls(email=linkedin.email, password=linkedin.password)


@dataclass
class AuthResult:
    state: AuthState = AuthState.NOT_STARTED
    verification: Optional[VerificationKind] = None
    failure: Optional[FailureReason] = None
    timed_out: bool = False
    uncertain: bool = False
    polls: int = 0
    history: list[AuthState] = field(default_factory=lambda: [AuthState.NOT_STARTED])

    @property
    def logged_in(self) -> bool:
        return self.state == AuthState.LOGGED_IN

    @property
    def terminal(self) -> bool:
        return self.state in (AuthState.LOGGED_IN, AuthState.FAILED)

    def advance(
        self,
        new_state: AuthState,
        *,
        verification: Optional[VerificationKind] = None,
        failure: Optional[FailureReason] = None,
    ) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"{self.state.value} -> {new_state.value}")
        if new_state == AuthState.FAILED and failure is None:
            raise InvalidTransitionError("FAILED requires a failure reason")
        if new_state == AuthState.AWAITING_VERIFICATION and verification is None:
            raise InvalidTransitionError("AWAITING_VERIFICATION requires a kind")
        self.state = new_state
        self.history.append(new_state)
        if verification is not None:
            self.verification = verification
        if failure is not None:
            self.failure = failure

    def should_continue(self, settings: AuthSettings) -> bool:
        """登录之后的流程是否继续（二次验证超时 / 状态不确定按配置放行）。"""
        if self.logged_in:
            return True
        if self.state == AuthState.FAILED:
            return False
        if self.timed_out and self.state == AuthState.AWAITING_VERIFICATION:
            return settings.continue_after_verification_timeout
        if self.uncertain:
            return settings.continue_when_uncertain
        return False


class Authenticator:
    def __init__(
        self,
        executor: InteractionExecutor,
        timing: TimingModel,
        *,
        auth_settings: Optional[AuthSettings] = None,
        linkedin: Optional[LinkedInSettings] = None,
        diagnostics: Optional[DiagnosticCapture] = None,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self.executor = executor
        self.timing = timing
        self.settings = auth_settings or AuthSettings()
        self.linkedin = linkedin or LinkedInSettings()
        self.diagnostics = diagnostics
        self._log = log_fn or (lambda msg, level="info": None)

    def authenticate(self, credentials: Credentials, page) -> AuthResult:
        result = AuthResult()
        ensure_session(page)

        if not credentials.complete:
            if not self.linkedin.wait_manual_login:
                self._log("❌ 未配置 LinkedIn 账号，且未开启人工登录", "error")
                result.advance(AuthState.FAILED, failure="missing_credentials")
                return result
            return self._manual_login(page, result)

        self._log("🔐 打开登录页")
        try:
            page.goto(self.linkedin.login_url, wait_until="domcontentloaded", timeout=30000)
        except PlaywrightTimeoutError:
            self._log("❌ 登录页加载超时", "error")
            self._capture(page, "login_page_timeout", failure=True)
            result.advance(AuthState.FAILED, failure="login_form_unavailable")
            return result
        page.wait_for_timeout(2000)

        if not self._fill_form(credentials, page):
            result.advance(AuthState.FAILED, failure="login_form_unavailable")
            return result

        result.advance(AuthState.CREDENTIALS_SUBMITTED)
        self._log("✓ 已提交账号密码")
        page.wait_for_timeout(self.settings.post_submit_wait_ms)
        ensure_session(page)
        self._capture(page, "credentials_check")

        body = self._body_text(page)
        assessment = assess_credentials(
            body,
            page.url,
            error_element_count=self._count(page, ERROR_STYLE_SELECTOR),
        )
        if assessment.invalid:
            self._log(f"❌ 账号或密码错误 ({assessment.reason})", "error")
            self._capture(page, "invalid_credentials", failure=True)
            result.advance(AuthState.FAILED, failure="invalid_credentials")
            return result

        if detect_verification_prompt(body):
            self._log("📱 需要二次验证，请在手机 / 邮箱上确认")
            result.advance(AuthState.AWAITING_VERIFICATION, verification="second_factor")
            self._poll(
                page,
                result,
                total_seconds=self.settings.verification_wait_seconds,
            )
            if result.timed_out:
                self._log("⚠ 二次验证等待超时", "warn")
            return result

        page.wait_for_timeout(self.settings.final_wait_ms)
        if self._logged_in(page):
            self._log("✓ 登录成功")
            result.advance(AuthState.LOGGED_IN)
        else:
            self._log("⚠ 登录状态不确定，请检查浏览器", "warn")
            self._capture(page, "login_uncertain", failure=True)
            result.uncertain = True
        return result

    def _fill_form(self, credentials: Credentials, page) -> bool:
        email = self.executor.type_text(LOGIN_EMAIL, credentials.email, page, per_char=True)
        if email.status == "not_found":
            self._log("❌ 找不到账号输入框", "error")
            return False
        if not email.ok:
            self._log("⚠ 账号输入校验不一致，继续提交", "warn")
        page.wait_for_timeout(self.timing.pause("between_fields"))

        password = self.executor.type_text(
            LOGIN_PASSWORD, credentials.password, page, per_char=True
        )
        if password.status == "not_found":
            self._log("❌ 找不到密码输入框", "error")
            return False
        if not password.ok:
            self._log("⚠ 密码输入校验不一致，继续提交", "warn")
        page.wait_for_timeout(self.timing.pause("between_fields"))

        submit = self.executor.click(LOGIN_SUBMIT, page)
        if not submit.ok:
            self._log(f"❌ 无法点击登录按钮 ({submit.status})", "error")
            return False
        return True

    def _manual_login(self, page, result: AuthResult) -> AuthResult:
        self._log(
            f"🙋 未配置账号，请在 {self.linkedin.manual_login_wait_seconds} 秒内手动登录"
        )
        try:
            page.goto(self.linkedin.home_url, wait_until="domcontentloaded", timeout=30000)
        except PlaywrightTimeoutError:
            self._log("⚠ 首页加载超时，继续等待人工登录", "warn")
        result.advance(AuthState.AWAITING_VERIFICATION, verification="manual")
        if self._logged_in(page):
            self._log("✓ 浏览器已处于登录状态")
            result.advance(AuthState.LOGGED_IN)
            return result
        self._poll(page, result, total_seconds=self.linkedin.manual_login_wait_seconds)
        if result.timed_out:
            self._log("❌ 人工登录等待超时", "error")
            self._capture(page, "manual_login_timeout", failure=True)
            result.advance(AuthState.FAILED, failure="timeout")
        return result

    def _poll(self, page, result: AuthResult, *, total_seconds: int) -> None:
        """固定间隔轮询登录信号；到上限仍未登录则 timed_out=True，不抛异常。"""
        interval = max(1, self.settings.poll_interval_seconds)
        max_polls = max(1, total_seconds // interval)
        for i in range(max_polls):
            page.wait_for_timeout(interval * 1000)
            ensure_session(page)
            result.polls += 1
            self._log(f"   检查登录状态...（已等待 {(i + 1) * interval} 秒）")
            self._capture(page, f"auth_progress_{(i + 1) * interval}s")
            if self._logged_in(page):
                self._log("✓ 验证完成，已登录")
                result.advance(AuthState.LOGGED_IN)
                return
        result.timed_out = True

    def _logged_in(self, page) -> bool:
        return is_logged_in(
            page.url, landmark_count=self._count(page, LOGGED_IN_LANDMARK_SELECTOR)
        )

    def _body_text(self, page) -> str:
        try:
            return page.inner_text("body", timeout=3000)
        except Exception:
            return ""

    def _count(self, page, selector: str) -> int:
        try:
            return page.locator(selector).count()
        except Exception:
            return 0

    def _capture(self, page, label: str, *, failure: bool = False) -> None:
        if self.diagnostics is not None:
            self.diagnostics.capture(page, label, failure=failure)
