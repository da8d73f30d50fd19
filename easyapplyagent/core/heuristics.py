"""
登录相关启发式规则：密码错误 / 二次验证 / 已登录 信号判定。

这里只做纯文本 / URL 判断，DOM 计数由调用方传入，便于单测。
"""

from __future__ import annotations

from dataclasses import dataclass

INVALID_CREDENTIAL_MARKERS = (
    "incorrect email or password",
    "wrong password",
    "password you provided is incorrect",
)

SIGN_IN_REDIRECT_MARKERS = (
    "checkpoint/lg/sign-in",
    "checkpoint/rm/sign-in",
)

ERROR_STYLE_SELECTOR = "[class*='alert'], [class*='error']"

VERIFICATION_MARKERS = (
    "authentication",
    "verification",
    "confirm",
    "verify",
    "device",
    "phone",
)

LOGGED_IN_URL_MARKERS = (
    "feed",
    "mynetwork",
    "messaging",
    "notifications",
    "jobs",
)

LOGGED_IN_LANDMARK_SELECTOR = (
    "[class*='feed-identity-module'], [id*='global-nav'], [data-test-id*='nav-settings']"
)


@dataclass
class CredentialAssessment:
    """提交账号密码后的判定结果。"""

    invalid: bool
    reason: str
    evidence: dict[str, int | bool]


def assess_credentials(
    visible_text: str,
    url: str,
    *,
    error_element_count: int = 0,
) -> CredentialAssessment:
    """
    判断提交后是否为"账号或密码错误"。

    两条规则任一命中即判定无效：
    - 页面出现明确的错误文案
    - 被重定向回登录页，且页面上存在错误样式元素
    """
    text = (visible_text or "").lower()
    current_url = (url or "").lower()
    has_marker = any(m in text for m in INVALID_CREDENTIAL_MARKERS)
    redirected = any(m in current_url for m in SIGN_IN_REDIRECT_MARKERS)
    evidence: dict[str, int | bool] = {
        "text_marker": has_marker,
        "sign_in_redirect": redirected,
        "error_element_count": max(error_element_count, 0),
    }
    if has_marker:
        return CredentialAssessment(True, "invalid_text_marker", evidence)
    if redirected and error_element_count > 0:
        return CredentialAssessment(True, "sign_in_redirect_with_error", evidence)
    return CredentialAssessment(False, "no_invalid_signal", evidence)


def detect_verification_prompt(visible_text: str) -> bool:
    """页面是否在要求二次验证（短信 / 设备确认等）。"""
    text = (visible_text or "").lower()
    return any(m in text for m in VERIFICATION_MARKERS)


def url_indicates_logged_in(url: str) -> bool:
    current_url = (url or "").lower()
    return any(m in current_url for m in LOGGED_IN_URL_MARKERS)


def is_logged_in(url: str, *, landmark_count: int = 0) -> bool:
    return url_indicates_logged_in(url) or landmark_count > 0
