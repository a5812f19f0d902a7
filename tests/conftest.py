from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from src.ot_dashboard.ot_dashboard.container import Repositories
from src.ot_dashboard.ot_dashboard.core.enums import OvertimeStatus
from src.ot_dashboard.ot_dashboard.core.exceptions import ApiError, AuthenticationError
from src.ot_dashboard.ot_dashboard.employees.model import Employee
from src.ot_dashboard.ot_dashboard.overtime.audit_model import OvertimeAuditLog
from src.ot_dashboard.ot_dashboard.overtime.model import OvertimeEntry
from src.ot_dashboard.ot_dashboard.settings.model import OvertimeReason
from src.ot_dashboard.ot_dashboard.users.model import LoginResult, User


class _Timer:
    def __init__(self, due, callback, interval=None):
        self.due = due
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock: nothing fires until ``advance`` moves time forward."""

    def __init__(self, start: datetime):
        self._now = start
        self.timers: list[_Timer] = []

    def now(self):
        return self._now

    def call_later(self, delay, callback):
        timer = _Timer(self._now + timedelta(seconds=max(0.0, delay)), callback)
        self.timers.append(timer)
        return timer

    def call_every(self, interval, callback):
        timer = _Timer(self._now + timedelta(seconds=interval), callback, interval)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def set_now(self, value: datetime):
        self._now = value

    def advance(self, seconds: float):
        target = self._now + timedelta(seconds=seconds)
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._now = max(self._now, timer.due)
            if timer.interval is None:
                self.timers.remove(timer)
            else:
                timer.due += timedelta(seconds=timer.interval)
            timer.callback()
        self._now = target


class FakeOvertimeRepo:
    def __init__(self, entries=()):
        self._next_id = 1
        self.entries: dict[str, OvertimeEntry] = {}
        self.no_ot_calls = []
        self.export_calls = []
        self.approvals = []
        self.rejections = []
        self.performed_by = []
        for e in entries:
            self._store(e)

    def _store(self, entry):
        entry_id = entry.entry_id or f"ot-{self._next_id}"
        self._next_id += 1
        self.entries[entry_id] = replace(entry, entry_id=entry_id, auto=True, no_ot=False)
        return entry_id

    def list_all(self):
        return list(self.entries.values())

    def create(self, entry, *, performed_by):
        self.performed_by.append(performed_by)
        return self._store(replace(entry, entry_id=None))

    def create_no_ot(self, *, employee_number, work_date, performed_by):
        self.no_ot_calls.append((employee_number, work_date, performed_by))

    def update(self, entry_id, changes, *, performed_by):
        self.performed_by.append(performed_by)
        merged = {**self.entries[entry_id].to_payload(), **changes}
        self.entries[entry_id] = replace(OvertimeEntry.from_payload(merged), entry_id=entry_id)

    def approve(self, entry_id, *, approvedot, reason, performed_by):
        self.approvals.append((entry_id, approvedot, reason, performed_by))
        self.entries[entry_id] = replace(
            self.entries[entry_id], status=OvertimeStatus.APPROVED, approvedot=approvedot, reason=reason or ""
        )

    def reject(self, entry_id, *, reason, performed_by):
        self.rejections.append((entry_id, reason, performed_by))
        self.entries[entry_id] = replace(self.entries[entry_id], status=OvertimeStatus.REJECTED)

    def delete(self, entry_id, *, performed_by):
        self.entries.pop(entry_id, None)

    def export_excel(self, *, start, end):
        self.export_calls.append((start, end))
        return b"xlsx-bytes"


class FakeEmployeeRepo:
    def __init__(self, employees=()):
        self.employees = {e.record_id or f"emp-{i}": e for i, e in enumerate(employees, start=1)}

    def list_all(self):
        return list(self.employees.values())

    def get_by_id(self, record_id):
        return self.employees.get(record_id)

    def create(self, employee):
        self.employees[f"emp-{len(self.employees) + 1}"] = employee

    def update(self, record_id, employee):
        self.employees[record_id] = replace(employee, record_id=record_id)

    def delete(self, record_id):
        self.employees.pop(record_id, None)


class FakeTripleOTRepo:
    def __init__(self, records=()):
        self.records = list(records)

    def list_all(self):
        return list(self.records)

    def create(self, record):
        self.records.append(record)

    def update(self, record_id, record):
        self.records = [replace(record, record_id=record_id) if r.record_id == record_id else r for r in self.records]

    def delete(self, record_id):
        self.records = [r for r in self.records if r.record_id != record_id]


class FakeSettingsRepo:
    def __init__(self, reasons=(), config=None, fail=False):
        self.reasons = [OvertimeReason(option=o, record_id=f"r-{i}") for i, o in enumerate(reasons, start=1)]
        self.config = config
        self.fail = fail
        self.saved = []

    def list_reasons(self):
        return list(self.reasons)

    def add_reason(self, option):
        self.reasons.append(OvertimeReason(option=option, record_id=f"r-{len(self.reasons) + 1}"))

    def delete_reason(self, record_id):
        self.reasons = [r for r in self.reasons if r.record_id != record_id]

    def get_shift_rules(self):
        if self.fail:
            raise ApiError("backend down", status=503)
        return self.config

    def save_shift_rules(self, config, *, exists):
        self.saved.append((config, exists))
        self.config = config

    def delete_shift_rules(self):
        self.config = None


class FakeUserRepo:
    def __init__(self, users=()):
        self.users = {u.record_id: u for u in users}
        self.registered = []

    def list_all(self):
        return list(self.users.values())

    def get_by_id(self, record_id):
        return self.users.get(record_id)

    def register(self, **kwargs):
        self.registered.append(kwargs)

    def update(self, record_id, user):
        self.users[record_id] = user

    def delete(self, record_id):
        self.users.pop(record_id, None)


class FakeAuthGateway:
    def __init__(self, user: User, *, session_expires="2025-03-03T10:00:00Z"):
        self.user = user
        self.session_expires = session_expires
        self.logout_calls = 0
        self.logout_tokens = []
        self.logout_gate: threading.Event | None = None
        self.logout_done = threading.Event()
        self.fail_logout = False
        self.reject_profile = False

    def login(self, username, password):
        if password != "secret":
            raise AuthenticationError("Invalid credentials")
        return LoginResult(token="tok-1", session_expires=self.session_expires, user=self.user)

    def logout(self, token=None):
        if self.logout_gate is not None:
            self.logout_gate.wait(timeout=10)
        self.logout_calls += 1
        self.logout_tokens.append(token)
        self.logout_done.set()
        if self.fail_logout:
            raise ApiError("backend down", status=503)

    def profile(self):
        if self.reject_profile:
            raise AuthenticationError("Session is no longer valid")
        return self.user


class FakeAuditLogRepo:
    def __init__(self, logs=()):
        self.logs: list[OvertimeAuditLog] = list(logs)

    def list_all(self):
        return list(self.logs)


class FakeDownloadLogRepo:
    def __init__(self, logs=()):
        self.logs = list(logs)

    def list_all(self):
        return list(self.logs)

    def create(self, log):
        self.logs.append(log)


@pytest.fixture
def fixed_now():
    # a Monday
    return datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def scheduler(fixed_now):
    return FakeScheduler(fixed_now)


@pytest.fixture
def admin():
    return User(username="admin", is_admin=True, record_id="u-admin")


@pytest.fixture
def approver():
    return User(username="approver", can_approve=True, record_id="u-approver")


@pytest.fixture
def clerk():
    return User(username="clerk", record_id="u-clerk")


@pytest.fixture
def employees():
    return [
        Employee(employee_number="E001", name="Alice", record_id="emp-1"),
        Employee(employee_number="E002", name="Bob", record_id="emp-2"),
    ]


@pytest.fixture
def repos(employees, admin, approver, clerk):
    return Repositories(
        overtime=FakeOvertimeRepo(),
        employees=FakeEmployeeRepo(employees),
        tripleot=FakeTripleOTRepo(),
        users=FakeUserRepo([admin, approver, clerk]),
        auth=FakeAuthGateway(admin),
        settings=FakeSettingsRepo(reasons=["Urgent order"]),
        download_logs=FakeDownloadLogRepo(),
        audit_logs=FakeAuditLogRepo(),
    )
