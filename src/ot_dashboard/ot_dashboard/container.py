from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .api.client import ApiClient, ApiConfig
from .core.constants import (
    AUTO_LOGOUT_BEFORE_SECONDS,
    DEFAULT_API_TIMEOUT,
    POLL_INTERVAL_SECONDS,
    TOKEN_KEY,
    WARN_BEFORE_SECONDS,
)
from .employees.repository import EmployeeRepository
from .employees.rest_employee_repository import RestEmployeeRepository
from .employees.service import EmployeeService
from .overtime.audit_repository import OvertimeAuditRepository
from .overtime.calculator import ShiftRules
from .overtime.repository import OvertimeRepository
from .overtime.rest_audit_repository import RestOvertimeAuditRepository
from .overtime.rest_overtime_repository import RestOvertimeRepository
from .overtime.service import OvertimeAuditService, OvertimeService
from .reports.repository import DownloadLogRepository
from .reports.rest_download_log_repository import RestDownloadLogRepository
from .reports.service import OvertimeReportService
from .session.manager import SessionManager
from .session.runtime import SessionRuntime
from .session.scheduler import Scheduler
from .session.sources import PollingSource, StorageEventSource, WriteInterceptSource
from .session.store import JsonFileSessionStore, MemorySessionStore, SessionStore
from .session.watcher import SessionFileWatcher
from .settings.repository import SettingsRepository
from .settings.rest_settings_repository import RestSettingsRepository
from .settings.service import SettingsService
from .tripleot.repository import TripleOTRepository
from .tripleot.rest_tripleot_repository import RestTripleOTRepository
from .tripleot.service import TripleOTService
from .users.repository import AuthGateway, UserRepository
from .users.rest_user_repository import RestAuthGateway, RestUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Repositories:
    overtime: OvertimeRepository
    employees: EmployeeRepository
    tripleot: TripleOTRepository
    users: UserRepository
    auth: AuthGateway
    settings: SettingsRepository
    download_logs: DownloadLogRepository
    audit_logs: OvertimeAuditRepository


def rest_repositories(api: ApiClient) -> Repositories:
    return Repositories(
        overtime=RestOvertimeRepository(api),
        employees=RestEmployeeRepository(api),
        tripleot=RestTripleOTRepository(api),
        users=RestUserRepository(api),
        auth=RestAuthGateway(api),
        settings=RestSettingsRepository(api),
        download_logs=RestDownloadLogRepository(api),
        audit_logs=RestOvertimeAuditRepository(api),
    )


@dataclass(frozen=True)
class Container:
    store: WriteInterceptSource
    api: ApiClient
    repositories: Repositories

    runtime: SessionRuntime
    session_manager: SessionManager
    storage_events: StorageEventSource
    polling: PollingSource
    file_watcher: Optional[SessionFileWatcher]

    auth_service: AuthService
    user_service: UserService
    employee_service: EmployeeService
    tripleot_service: TripleOTService
    settings_service: SettingsService
    overtime_service: OvertimeService
    overtime_audit_service: OvertimeAuditService
    report_service: OvertimeReportService


def build_container(
    *,
    settings: Any,
    repositories: Optional[Repositories] = None,
    store: Optional[SessionStore] = None,
    scheduler: Optional[Scheduler] = None,
) -> Container:
    """Wire the services from a settings module.

    ``repositories``, ``store`` and ``scheduler`` replace the REST backend,
    the session file and the event-loop timers respectively.
    """
    if store is None:
        path = getattr(settings, "SESSION_STORE_PATH", "")
        store = JsonFileSessionStore(path) if path else MemorySessionStore()
    intercepted = WriteInterceptSource(store)

    api = ApiClient(
        ApiConfig(
            base_url=str(getattr(settings, "API_BASE_URL")),
            timeout=float(getattr(settings, "API_TIMEOUT", DEFAULT_API_TIMEOUT)),
        ),
        token_provider=lambda: intercepted.get(TOKEN_KEY),
    )
    repos = repositories or rest_repositories(api)

    runtime = SessionRuntime()
    scheduler = scheduler or runtime.scheduler

    auth_service = AuthService(repos.auth, intercepted, background=runtime.offload)
    session_manager = SessionManager(
        intercepted,
        scheduler,
        on_logout=auth_service.logout,
        warn_before=float(getattr(settings, "SESSION_WARN_BEFORE_SECONDS", WARN_BEFORE_SECONDS)),
        auto_logout_before=float(getattr(settings, "SESSION_AUTO_LOGOUT_BEFORE_SECONDS", AUTO_LOGOUT_BEFORE_SECONDS)),
    )
    auth_service.attach_session(session_manager)

    # request threads hop onto the loop; the poll already runs there
    storage_events = StorageEventSource()
    for source in (intercepted, storage_events):
        source.on_change(lambda: runtime.submit(session_manager.sync))
    polling = PollingSource(scheduler, interval=float(getattr(settings, "SESSION_POLL_SECONDS", POLL_INTERVAL_SECONDS)))
    session_manager.watch(polling)
    # other processes sharing the session file
    file_watcher = SessionFileWatcher(store, storage_events) if isinstance(store, JsonFileSessionStore) else None

    base_rules = ShiftRules.default().with_overrides(
        weekday_ot_start=getattr(settings, "WEEKDAY_OT_START", None),
        saturday_shift_hours=getattr(settings, "SATURDAY_SHIFT_HOURS", None),
    )

    employee_service = EmployeeService(repos.employees)
    tripleot_service = TripleOTService(repos.tripleot)
    settings_service = SettingsService(repos.settings, base_rules=base_rules)

    return Container(
        store=intercepted,
        api=api,
        repositories=repos,
        runtime=runtime,
        session_manager=session_manager,
        storage_events=storage_events,
        polling=polling,
        file_watcher=file_watcher,
        auth_service=auth_service,
        user_service=UserService(repos.users),
        employee_service=employee_service,
        tripleot_service=tripleot_service,
        settings_service=settings_service,
        overtime_service=OvertimeService(repos.overtime, employee_service, tripleot_service, settings_service),
        overtime_audit_service=OvertimeAuditService(repos.audit_logs),
        report_service=OvertimeReportService(repos.overtime, repos.download_logs, employee_service),
    )
