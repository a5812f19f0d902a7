from __future__ import annotations

from datetime import date

import pytest

from src.ot_dashboard.ot_dashboard.core.enums import NightFlag, OvertimeStatus
from src.ot_dashboard.ot_dashboard.core.exceptions import AuthorizationError, ValidationError
from src.ot_dashboard.ot_dashboard.employees.service import EmployeeService
from src.ot_dashboard.ot_dashboard.overtime.model import OvertimeEntry
from src.ot_dashboard.ot_dashboard.overtime.service import OvertimeService
from src.ot_dashboard.ot_dashboard.settings.service import SettingsService
from src.ot_dashboard.ot_dashboard.tripleot.model import TripleOTDate
from src.ot_dashboard.ot_dashboard.tripleot.service import TripleOTService

MONDAY = date(2025, 3, 3)


@pytest.fixture
def service(repos):
    return OvertimeService(
        repos.overtime,
        EmployeeService(repos.employees),
        TripleOTService(repos.tripleot),
        SettingsService(repos.settings),
    )


def _row(**kw):
    base = dict(employee_number="E001", name="Alice", shift="8:30am", intime="08:30", outtime="19:30", reason="Urgent order")
    base.update(kw)
    return OvertimeEntry(**base)


def test_employee_number_resolves_name(service):
    row = service.apply_change(OvertimeEntry(employee_number=""), "employee_number", "E002", work_date=MONDAY)
    assert row.name == "Bob"


def test_time_change_recalculates_when_auto(service):
    row = _row(outtime="")
    row = service.apply_change(row, "outtime", "19:30", work_date=MONDAY)

    assert row.normalot == 2.0
    assert row.night == NightFlag.NO


def test_night_flag_refreshed_even_when_auto_off(service):
    row = _row(auto=False, normalot=1.0)
    row = service.apply_change(row, "outtime", "22:00", work_date=MONDAY)

    assert row.night == NightFlag.YES
    assert row.normalot == 1.0


def test_triple_date_is_applied(service, repos):
    repos.tripleot.records.append(TripleOTDate(date=MONDAY, record_id="t-1"))
    row = service.apply_change(_row(intime=""), "intime", "08:00", work_date=MONDAY)

    assert (row.normalot, row.tripleot) == (0.0, 11.5)


def test_no_ot_toggle_clears_row(service):
    row = service.apply_change(_row(normalot=2.0), "no_ot", True, work_date=MONDAY)

    assert row.no_ot
    assert row.normalot == 0.0 and row.shift == ""


def test_unticking_no_ot_leaves_row_as_is(service):
    cleared = service.apply_change(_row(normalot=2.0), "no_ot", True, work_date=MONDAY)

    row = service.apply_change(cleared, "no_ot", False, work_date=MONDAY)

    assert not row.no_ot
    assert row.reason == cleared.reason
    assert row.auto == cleared.auto
    assert row.normalot == 0.0


def test_unknown_backend_values_fall_back(caplog):
    entry = OvertimeEntry.from_payload({"employeeNumber": "E001", "night": "Maybe", "status": "Archived"})

    assert entry.night == NightFlag.NO
    assert entry.status == OvertimeStatus.PENDING
    assert "Archived" in caplog.text


def test_unknown_field_rejected(service):
    with pytest.raises(ValidationError):
        service.apply_change(_row(), "status", "Approved", work_date=MONDAY)


def test_row_errors_skip_times_for_no_ot(service):
    errors = service.validate_rows([OvertimeEntry(employee_number="E001", no_ot=True), OvertimeEntry(employee_number="")])

    assert not any(errors[0].values())
    assert errors[1]["employee_number"] and errors[1]["intime"]


def test_save_day_creates_pending_entries(service, repos):
    outcome = service.save_day([_row(), _row(employee_number="E002", name="")], work_date=MONDAY, performed_by="admin")

    assert outcome.created == ["E001", "E002"]
    saved = repos.overtime.list_all()
    assert {e.status for e in saved} == {OvertimeStatus.PENDING}
    assert {e.name for e in saved} == {"Alice", "Bob"}
    assert all(e.work_date == MONDAY for e in saved)


def test_save_day_skips_duplicates_unless_overwrite(service, repos):
    service.save_day([_row()], work_date=MONDAY, performed_by="admin")

    skipped = service.save_day([_row(outtime="20:30")], work_date=MONDAY, performed_by="admin")
    assert skipped.skipped == ["E001"]

    updated = service.save_day([_row(outtime="20:30", normalot=3.0)], work_date=MONDAY, performed_by="admin", overwrite=True)
    assert updated.updated == ["E001"]
    assert len(repos.overtime.list_all()) == 1
    assert repos.overtime.list_all()[0].outtime == "20:30"


def test_save_day_posts_no_ot_rows(service, repos):
    outcome = service.save_day([OvertimeEntry(employee_number="E001", no_ot=True)], work_date=MONDAY, performed_by="admin")

    assert outcome.no_ot == ["E001"]
    assert repos.overtime.no_ot_calls == [("E001", MONDAY, "admin")]


def test_save_day_validates(service):
    with pytest.raises(ValidationError):
        service.save_day([_row()], work_date=None, performed_by="admin")
    with pytest.raises(ValidationError) as exc:
        service.save_day([_row(reason="")], work_date=MONDAY, performed_by="admin")
    assert "reason" in str(exc.value)
    with pytest.raises(ValidationError):
        service.save_day([_row(employee_number="E999", name="")], work_date=MONDAY, performed_by="admin")


def test_week_groups_from_monday(service, repos):
    repos.overtime.create(_row(work_date=date(2025, 3, 5)), performed_by="admin")
    repos.overtime.create(_row(work_date=date(2025, 3, 10)), performed_by="admin")

    week = service.entries_for_week(date(2025, 3, 7))

    assert list(week)[0] == MONDAY
    assert len(week) == 7
    assert len(week[date(2025, 3, 5)]) == 1
    assert sum(len(v) for v in week.values()) == 1


def test_approve_requires_privilege(service, repos, clerk, approver):
    entry_id = repos.overtime.create(_row(work_date=MONDAY, normalot=2.0), performed_by="admin")

    with pytest.raises(AuthorizationError):
        service.approve(current_user=clerk, entry_id=entry_id)

    service.approve(current_user=approver, entry_id=entry_id, approvedot="1.5", reason="ok")
    assert repos.overtime.approvals == [(entry_id, 1.5, "ok", "approver")]


def test_approve_defaults_to_computed_total(service, repos, approver):
    entry_id = repos.overtime.create(_row(work_date=MONDAY, normalot=2.0, doubleot=0.5), performed_by="admin")

    service.approve(current_user=approver, entry_id=entry_id)

    assert repos.overtime.approvals[0][1] == 2.5


def test_reject(service, repos, approver):
    entry_id = repos.overtime.create(_row(work_date=MONDAY), performed_by="admin")

    service.reject(current_user=approver, entry_id=entry_id, reason="  ")

    assert repos.overtime.rejections == [(entry_id, None, "approver")]
    assert repos.overtime.entries[entry_id].status == OvertimeStatus.REJECTED


def test_edit_is_admin_only_and_recomputes(service, repos, admin, approver):
    entry_id = repos.overtime.create(_row(work_date=MONDAY, normalot=2.0), performed_by="admin")

    with pytest.raises(AuthorizationError):
        service.edit(current_user=approver, entry_id=entry_id, changes={"outtime": "20:30"})

    edited = service.edit(current_user=admin, entry_id=entry_id, changes={"outtime": "20:30"})

    assert edited.normalot == 3.0
    assert repos.overtime.entries[entry_id].normalot == 3.0


def test_approved_entry_is_locked(service, repos, admin):
    entry_id = repos.overtime.create(_row(work_date=MONDAY), performed_by="admin")
    repos.overtime.approve(entry_id, approvedot=2.0, reason=None, performed_by="admin")

    with pytest.raises(ValidationError):
        service.edit(current_user=admin, entry_id=entry_id, changes={"outtime": "20:30"})


def test_delete_is_admin_only(service, repos, admin, approver):
    entry_id = repos.overtime.create(_row(work_date=MONDAY), performed_by="admin")

    with pytest.raises(AuthorizationError):
        service.delete(current_user=approver, entry_id=entry_id)
    service.delete(current_user=admin, entry_id=entry_id)

    assert repos.overtime.list_all() == []


def test_pending_entries_oldest_first(service, repos, approver, clerk):
    later = repos.overtime.create(_row(work_date=date(2025, 3, 5)), performed_by="admin")
    earlier = repos.overtime.create(_row(employee_number="E002", work_date=MONDAY), performed_by="admin")
    rejected = repos.overtime.create(_row(work_date=MONDAY), performed_by="admin")
    repos.overtime.reject(rejected, reason=None, performed_by="admin")

    pending = service.pending_entries(current_user=approver)

    assert [e.entry_id for e in pending] == [earlier, later]
    with pytest.raises(AuthorizationError):
        service.pending_entries(current_user=clerk)
