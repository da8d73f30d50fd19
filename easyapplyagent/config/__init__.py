"""
Configuration module for loading run settings.

config.yaml 只放非敏感选项；账号密码优先从环境变量（.env）读取。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


PACKAGE_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = PACKAGE_DIR / "config.yaml"

EMAIL_ENV = "LINKEDIN_EMAIL"
PASSWORD_ENV = "LINKEDIN_PASSWORD"


@dataclass
class LinkedInSettings:
    email: str = ""
    password: str = ""
    login_url: str = "https://www.linkedin.com/checkpoint/lg/sign-in-another-account"
    home_url: str = "https://www.linkedin.com/"
    jobs_url: str = "https://www.linkedin.com/jobs/"
    wait_manual_login: bool = True
    manual_login_wait_seconds: int = 30


@dataclass
class SearchSettings:
    role: str = "Software Engineer"
    location: str = "San Francisco, CA"


@dataclass(frozen=True)
class FilterConfig:
    """
    职位过滤选项（只读）。

    - sort_by: day / week / month（发布时间）
    - job_type: full_time / part_time / contract / temporary / volunteer
    - exp_level: internship / entry_level / associate / mid_senior_level / director
    - remote: remote / onsite / hybrid
    """

    sort_by: str = ""
    job_type: str = ""
    exp_level: str = ""
    easy_apply: bool = False
    remote: str = ""

    @property
    def is_empty(self) -> bool:
        return not (
            self.sort_by or self.job_type or self.exp_level or self.easy_apply or self.remote
        )


@dataclass
class BrowserSettings:
    headless: bool = False
    slow_mo: int = 0
    user_data_dir: str = "~/.cache/easyapplyagent/chrome-profile"
    executable_path: str | None = None
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    )


@dataclass
class AuthSettings:
    post_submit_wait_ms: int = 5000
    verification_wait_seconds: int = 60
    poll_interval_seconds: int = 5
    final_wait_ms: int = 5000
    # 二次验证超时 / 登录状态不确定时是否继续后续流程
    continue_after_verification_timeout: bool = True
    continue_when_uncertain: bool = False


@dataclass
class DiagnosticsSettings:
    enabled: bool = True
    directory: str = "storage/screenshots"
    # False 时只在失败路径截图
    capture_steps: bool = True


@dataclass
class StorageSettings:
    user_info_path: str = "storage/user_info.properties"


@dataclass
class AppSettings:
    linkedin: LinkedInSettings = field(default_factory=LinkedInSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    filters: FilterConfig = field(default_factory=FilterConfig)
    browser: BrowserSettings = field(default_factory=BrowserSettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    diagnostics: DiagnosticsSettings = field(default_factory=DiagnosticsSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)


_settings_cache: Optional[AppSettings] = None


def load_settings(
    path: Optional[Path] = None,
    *,
    force_reload: bool = False,
) -> AppSettings:
    """
    Load run settings from YAML file.
    Caches the result for the lifetime of the process.

    Returns:
        AppSettings: settings with defaults for anything missing
    """
    global _settings_cache

    if _settings_cache is not None and not force_reload and path is None:
        return _settings_cache

    raw = _read_yaml(path or CONFIG_PATH)
    settings = settings_from_dict(raw)
    _apply_env_overrides(settings)

    if path is None:
        _settings_cache = settings
    return settings


def settings_from_dict(raw: dict) -> AppSettings:
    """把 YAML 字典转成 AppSettings；未知键忽略，缺失键走默认值。"""
    raw = raw or {}
    return AppSettings(
        linkedin=_build(LinkedInSettings, raw.get("linkedin")),
        search=_build(SearchSettings, raw.get("search")),
        filters=_build(FilterConfig, raw.get("filters")),
        browser=_build(BrowserSettings, raw.get("browser")),
        auth=_build(AuthSettings, raw.get("auth")),
        diagnostics=_build(DiagnosticsSettings, raw.get("diagnostics")),
        storage=_build(StorageSettings, raw.get("storage")),
    )


def _build(cls, section: Any):
    if not isinstance(section, dict):
        return cls()
    known = set(cls.__dataclass_fields__)
    kwargs = {}
    for key, value in section.items():
        if key not in known:
            continue
        default = cls.__dataclass_fields__[key].default
        kwargs[key] = _coerce(value, default)
    return cls(**kwargs)


def _coerce(value: Any, default: Any) -> Any:
    """按默认值类型做宽松转换，与 properties 风格的 "true"/"30" 写法兼容。"""
    if value is None:
        return default
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
    if isinstance(default, str):
        return str(value).strip()
    return value


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        print(f"⚠️ Config not found: {path}, using defaults")
        return {}
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return {}


def _apply_env_overrides(settings: AppSettings) -> None:
    email = os.getenv(EMAIL_ENV)
    password = os.getenv(PASSWORD_ENV)
    if email:
        settings.linkedin.email = email.strip()
    if password:
        settings.linkedin.password = password
