"""
完整流程编排。

流程：
1. 启动浏览器
2. 登录（账号密码 / 二次验证 / 人工登录）
3. 进入 Jobs → Show all → 搜索职位与地点 → URL 过滤
4. 打开第一个职位 → Easy Apply → 填写联系方式
5. 关闭浏览器，写入运行结果
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import AppSettings, load_settings
from ..db.database import SessionLocal, init_db
from ..models.run_log import RunLog
from ..models.run_record import RunRecord, RunStatus
from .auth import AuthState, Authenticator, Credentials
from .browser_manager import BrowserManager
from .contact_info import ContactInfoStep
from .diagnostics import DiagnosticCapture
from .errors import SessionUnavailableError
from .executor import InteractionExecutor
from .field_resolver import FieldResolver
from .jobs_navigator import JobsNavigator
from .locator import LocatorEngine
from .operator import ConsoleOperator, Operator
from .pointer import PointerSimulator
from .timing import TimingModel
from .value_store import PropertiesValueStore

LogFn = Callable[[str, str], None]


@dataclass
class WorkflowResult:
    success: bool
    status: RunStatus
    run_id: Optional[int] = None
    last_step: Optional[str] = None
    auth_state: Optional[str] = None
    fail_reason: Optional[str] = None


@dataclass
class Toolkit:
    timing: TimingModel
    diagnostics: DiagnosticCapture
    engine: LocatorEngine
    pointer: PointerSimulator
    executor: InteractionExecutor
    authenticator: Authenticator
    navigator: JobsNavigator
    resolver: FieldResolver
    contact: ContactInfoStep


def build_toolkit(
    settings: AppSettings,
    operator: Operator,
    log_fn: LogFn,
    rng: Optional[random.Random] = None,
) -> Toolkit:
    """按配置组装各组件（同一个 TimingModel / 日志函数贯穿整个会话）。"""
    timing = TimingModel(rng=rng)
    diagnostics = DiagnosticCapture(
        settings.diagnostics.directory,
        enabled=settings.diagnostics.enabled,
        capture_steps=settings.diagnostics.capture_steps,
        log_fn=log_fn,
    )
    engine = LocatorEngine(timing=timing, log_fn=log_fn)
    pointer = PointerSimulator(timing=timing, log_fn=log_fn)
    executor = InteractionExecutor(engine, pointer, timing, diagnostics, log_fn)
    store = PropertiesValueStore(settings.storage.user_info_path, log_fn=log_fn)
    resolver = FieldResolver(
        executor, engine, store, operator, log_fn, diagnostics=diagnostics
    )
    return Toolkit(
        timing=timing,
        diagnostics=diagnostics,
        engine=engine,
        pointer=pointer,
        executor=executor,
        authenticator=Authenticator(
            executor,
            timing,
            auth_settings=settings.auth,
            linkedin=settings.linkedin,
            diagnostics=diagnostics,
            log_fn=log_fn,
        ),
        navigator=JobsNavigator(
            executor,
            timing,
            jobs_url=settings.linkedin.jobs_url,
            diagnostics=diagnostics,
            log_fn=log_fn,
        ),
        resolver=resolver,
        contact=ContactInfoStep(
            resolver, engine, executor, timing, log_fn, diagnostics=diagnostics
        ),
    )


@dataclass
class _Progress:
    step: str = "launch"
    auth_state: Optional[str] = None

    def fail(self, status: RunStatus, reason: Optional[str]) -> WorkflowResult:
        return WorkflowResult(
            success=False,
            status=status,
            last_step=self.step,
            auth_state=self.auth_state,
            fail_reason=reason,
        )


def run_workflow(
    settings: Optional[AppSettings] = None,
    operator: Optional[Operator] = None,
    *,
    rng: Optional[random.Random] = None,
) -> WorkflowResult:
    """
    登录 → 搜索 → Easy Apply 联系方式 的单次执行流程。

    浏览器会话只在这里创建和关闭；各组件只在调用期间借用 page。
    """
    settings = settings or load_settings()
    operator = operator or ConsoleOperator()
    init_db()
    run_id = _create_run(settings)

    def log(msg: str, level: str = "info") -> None:
        _log(run_id, msg, level)

    log("=" * 50)
    log("🚀 开始 Easy Apply 流程")
    log(f"   职位: {settings.search.role}")
    log(f"   地点: {settings.search.location}")
    log("=" * 50)

    progress = _Progress()
    session = None
    final_url: Optional[str] = None
    try:
        manager = BrowserManager(settings.browser, log_fn=log)
        session = manager.launch()
        kit = build_toolkit(settings, operator, log, rng)
        result = _run_steps(session.page, settings, kit, progress, log)
    except SessionUnavailableError as e:
        log(f"❌ 浏览器会话已关闭: {e}", "error")
        result = progress.fail(RunStatus.FAILED, "session_unavailable")
    except Exception as e:
        log(f"❌ 流程异常: {e}", "error")
        result = progress.fail(RunStatus.FAILED, str(e)[:300])
    finally:
        if session:
            try:
                final_url = session.page.url
            except Exception:
                final_url = None
            try:
                session.close()
            except Exception as e:
                log(f"⚠ 关闭浏览器失败: {e}", "warn")

    result.run_id = run_id
    _finish_run(run_id, result, final_url)
    log(f"结果: {result.status.value} (step={result.last_step})")
    return result


def _run_steps(
    page,
    settings: AppSettings,
    kit: Toolkit,
    progress: _Progress,
    log: LogFn,
) -> WorkflowResult:
    # 1. 登录
    progress.step = "authenticate"
    log("\n--- 步骤 1: 登录 ---")
    auth = kit.authenticator.authenticate(Credentials.from_settings(settings.linkedin), page)
    progress.auth_state = auth.state.value
    if not auth.should_continue(settings.auth):
        manual = auth.state == AuthState.AWAITING_VERIFICATION or auth.uncertain
        reason = auth.failure or (
            "verification_timeout" if auth.timed_out else "login_uncertain"
        )
        log(f"❌ 登录未完成: {reason}", "error")
        return progress.fail(
            RunStatus.MANUAL_REQUIRED if manual else RunStatus.FAILED, reason
        )

    # 2. 职位搜索
    log("\n--- 步骤 2: 职位搜索 ---")
    nav = kit.navigator
    steps = (
        ("open_jobs", lambda: nav.open_jobs(page)),
        ("show_all", lambda: nav.show_all(page)),
        ("search", lambda: nav.search(page, settings.search.role, settings.search.location)),
        ("apply_filters", lambda: nav.apply_filters(page, settings.filters)),
        ("open_first_job", lambda: nav.open_first_job(page)),
        ("start_easy_apply", lambda: nav.start_easy_apply(page)),
    )
    for name, action in steps:
        progress.step = name
        outcome = action()
        if not outcome.ok:
            return progress.fail(RunStatus.FAILED, outcome.detail or outcome.status)

    # 3. 联系方式
    progress.step = "contact_info"
    log("\n--- 步骤 3: Easy Apply 联系方式 ---")
    contact = kit.contact.handle(page)
    if not contact.ok:
        return progress.fail(RunStatus.MANUAL_REQUIRED, contact.status)

    log("✓ 流程完成，后续申请步骤请人工确认")
    log("等待 5 秒后关闭页面...")
    page.wait_for_timeout(5000)
    return WorkflowResult(
        success=True,
        status=RunStatus.COMPLETED,
        last_step=progress.step,
        auth_state=progress.auth_state,
    )


def _create_run(settings: AppSettings) -> int:
    with SessionLocal() as session:
        record = RunRecord(
            role=settings.search.role,
            location=settings.search.location,
            status=RunStatus.IN_PROGRESS,
        )
        session.add(record)
        session.commit()
        return record.id


def _finish_run(run_id: int, result: WorkflowResult, final_url: Optional[str]) -> None:
    with SessionLocal() as session:
        record = session.get(RunRecord, run_id)
        if not record:
            return
        record.status = result.status
        record.auth_state = result.auth_state
        record.last_step = result.last_step
        record.fail_reason = result.fail_reason
        record.final_url = final_url
        record.finish_time = datetime.now(timezone.utc)
        session.add(record)
        session.commit()


def _log(run_id: int, message: str, level: str = "info") -> None:
    """写入日志"""
    with SessionLocal() as session:
        session.add(RunLog(run_id=run_id, level=level, message=message))
        session.commit()
    print(f"[run={run_id}] [{level.upper()}] {message}")
