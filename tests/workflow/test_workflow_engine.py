import pytest

from src.timesheet_system.timesheet_system.core.enums import HistoryAction, Role, TimesheetStatus
from src.timesheet_system.timesheet_system.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ReadOnlyStateError,
    ValidationError,
)
from src.timesheet_system.timesheet_system.users.model import User
from src.timesheet_system.timesheet_system.workflow.commands import (
    ApproveCommand,
    FinishCommand,
    ModifyEntryHoursCommand,
    RejectCommand,
    SubmitCommand,
    SubmitToAdminCommand,
)
from src.timesheet_system.timesheet_system.workflow.transitions import LEGAL_EDGES
from tests.fakes import ADMIN, ADMIN_2, EMPLOYEE, LEAD, ORPHAN, World

S = TimesheetStatus


def assert_ledger_is_legal(world):
    rows = world.history.rows
    for row in rows:
        if row.action != HistoryAction.MODIFIED:
            assert (row.from_status, row.to_status) in LEGAL_EDGES
    stamps = [r.timestamp for r in rows]
    assert stamps == sorted(stamps)


def test_full_two_tier_lifecycle():
    w = World()
    w.timesheet()
    w.entry()

    ts = w.engine.submit(actor=EMPLOYEE, command=SubmitCommand("ts-1"))
    assert ts.status == S.SUBMITTED
    assert ts.current_approver_id == "lead"
    assert ts.submit_date is not None

    ts = w.engine.approve(actor=LEAD, command=ApproveCommand("ts-1"))
    assert ts.status == S.APPROVED_BY_TEAM_LEAD
    assert ts.current_approver_id == "lead"

    # Any admin may take the escalated tier.
    ts = w.engine.approve(actor=ADMIN_2, command=ApproveCommand("ts-1", comment="ok"))
    assert ts.status == S.APPROVED
    assert ts.approve_date is not None
    assert ts.current_approver_id is None

    ts = w.engine.finish(actor=ADMIN, command=FinishCommand("ts-1"))
    assert ts.status == S.FINISHED
    assert ts.finished_date is not None

    actions = [r.action for r in w.history.rows]
    assert actions == [HistoryAction.SUBMITTED, HistoryAction.APPROVED, HistoryAction.APPROVED, HistoryAction.FINISHED]
    assert [r.actor_id for r in w.history.rows] == ["emp", "lead", "admin2", "admin"]
    assert_ledger_is_legal(w)


def test_submit_to_admin_then_admin_approves_and_finishes():
    w = World()
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")
    w.entry()

    ts = w.engine.submit_to_admin(actor=LEAD, command=SubmitToAdminCommand("ts-1", admin_id="admin"))
    assert ts.status == S.SUBMITTED
    assert ts.current_approver_id == "admin"

    assert w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1")).status == S.APPROVED
    assert w.engine.finish(actor=ADMIN, command=FinishCommand("ts-1")).status == S.FINISHED

    with pytest.raises(ReadOnlyStateError):
        w.engine.modify_entry_hours(actor=ADMIN, command=ModifyEntryHoursCommand("E1", 4))

    assert w.history.rows[0].action == HistoryAction.SUBMITTED_TO_ADMIN
    assert_ledger_is_legal(w)


def test_escalated_sheet_is_approvable_without_direct_approval():
    w = World(ALLOW_ADMIN_DIRECT_APPROVAL=False)
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")

    w.engine.submit_to_admin(actor=LEAD, command=SubmitToAdminCommand("ts-1", admin_id="admin"))
    assert w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1")).status == S.APPROVED


def test_admin_direct_approval_can_be_disabled():
    w = World(ALLOW_ADMIN_DIRECT_APPROVAL=False)
    w.timesheet(status=S.SUBMITTED, approver_id="admin")

    with pytest.raises(InvalidTransitionError):
        w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1"))
    assert w.status() == S.SUBMITTED
    assert w.history.rows == []


def test_admin_direct_approval_when_routed_to_admin():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="admin")

    assert w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1")).status == S.APPROVED


def test_team_lead_cannot_finish():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="lead")
    w.entry()

    w.engine.approve(actor=LEAD, command=ApproveCommand("ts-1"))
    with pytest.raises(InvalidTransitionError):
        w.engine.finish(actor=LEAD, command=FinishCommand("ts-1"))
    assert w.status() == S.APPROVED_BY_TEAM_LEAD


def test_finish_requires_admin():
    w = World()
    w.timesheet(status=S.APPROVED)

    with pytest.raises(AuthorizationError):
        w.engine.finish(actor=LEAD, command=FinishCommand("ts-1"))


def test_finished_sheet_refuses_everything():
    w = World()
    w.timesheet(status=S.FINISHED)

    with pytest.raises(InvalidTransitionError):
        w.engine.submit(actor=EMPLOYEE, command=SubmitCommand("ts-1"))
    with pytest.raises(InvalidTransitionError):
        w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1"))
    with pytest.raises(InvalidTransitionError):
        w.engine.reject(actor=ADMIN, command=RejectCommand("ts-1", comment="late"))
    with pytest.raises(InvalidTransitionError):
        w.engine.finish(actor=ADMIN, command=FinishCommand("ts-1"))
    assert w.history.rows == []


def test_submit_empty_timesheet_fails():
    w = World()
    w.timesheet()

    with pytest.raises(ValidationError):
        w.engine.submit(actor=EMPLOYEE, command=SubmitCommand("ts-1"))
    assert w.status() == S.DRAFT


def test_submit_by_someone_else_fails():
    w = World()
    w.timesheet()
    w.entry()

    with pytest.raises(AuthorizationError):
        w.engine.submit(actor=LEAD, command=SubmitCommand("ts-1"))


def test_submit_needs_an_approver():
    w = World()
    w.timesheet(owner=ORPHAN)
    w.entry()

    with pytest.raises(ValidationError):
        w.engine.submit(actor=ORPHAN, command=SubmitCommand("ts-1"))

    # Explicit approver must hold an approver role.
    with pytest.raises(ValidationError):
        w.engine.submit(actor=ORPHAN, command=SubmitCommand("ts-1", approver_id="emp"))

    ts = w.engine.submit(actor=ORPHAN, command=SubmitCommand("ts-1", approver_id="admin"))
    assert ts.current_approver_id == "admin"


def test_unknown_timesheet():
    w = World()
    with pytest.raises(NotFoundError):
        w.engine.approve(actor=LEAD, command=ApproveCommand("missing"))


def test_reject_without_comment_fails_and_writes_nothing():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="lead")

    with pytest.raises(ValidationError):
        w.engine.reject(actor=LEAD, command=RejectCommand("ts-1", comment=" "))
    assert w.status() == S.SUBMITTED
    assert w.history.rows == []


def test_reject_then_resubmit():
    w = World()
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")
    w.entry()

    ts = w.engine.reject(actor=LEAD, command=RejectCommand("ts-1", comment="Wrong project on the 2nd"))
    assert ts.status == S.REJECTED
    assert ts.comment == "Wrong project on the 2nd"
    assert ts.current_approver_id is None
    assert w.history.rows[0].comment == "Wrong project on the 2nd"

    ts = w.engine.submit(actor=EMPLOYEE, command=SubmitCommand("ts-1"))
    assert ts.status == S.SUBMITTED
    assert ts.current_approver_id == "lead"
    assert_ledger_is_legal(w)


def test_only_current_approver_decides():
    w = World()
    other_lead = w.users.add(User(user_id="lead2", email="lead2@example.com", role=Role.TEAM_LEAD))
    w.timesheet(status=S.SUBMITTED, approver_id="lead")

    for actor in (EMPLOYEE, other_lead, ADMIN):
        with pytest.raises(AuthorizationError):
            w.engine.approve(actor=actor, command=ApproveCommand("ts-1"))
    assert w.history.rows == []


def test_submit_to_admin_rules():
    w = World()
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")

    with pytest.raises(AuthorizationError):
        w.engine.submit_to_admin(actor=ADMIN, command=SubmitToAdminCommand("ts-1", admin_id="admin"))
    with pytest.raises(ValidationError):
        w.engine.submit_to_admin(actor=LEAD, command=SubmitToAdminCommand("ts-1", admin_id="emp"))

    w2 = World()
    w2.timesheet(status=S.SUBMITTED, approver_id="lead")
    with pytest.raises(InvalidTransitionError):
        w2.engine.submit_to_admin(actor=LEAD, command=SubmitToAdminCommand("ts-1", admin_id="admin"))


def test_expected_status_mismatch_is_conflict():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="lead")

    with pytest.raises(ConflictError) as exc:
        w.engine.approve(actor=LEAD, command=ApproveCommand("ts-1", expected_status=S.DRAFT))
    assert exc.value.retryable
    assert w.status() == S.SUBMITTED

    ts = w.engine.approve(actor=LEAD, command=ApproveCommand("ts-1", expected_status=S.SUBMITTED))
    assert ts.status == S.APPROVED_BY_TEAM_LEAD


def test_modify_entry_hours_records_override():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="lead")
    w.entry(hours=8)

    assert w.engine.modify_entry_hours(actor=LEAD, command=ModifyEntryHoursCommand("E1", 6)) == "E1"

    entry = w.entries.get_by_id("E1")
    assert entry.logged_hours == 8
    assert entry.approved_hours == 6
    assert entry.effective_hours == 6
    assert entry.hours_modified_by == "lead"
    assert entry.hours_modified_at is not None
    assert w.status() == S.SUBMITTED

    (row,) = w.history.rows
    assert row.action == HistoryAction.MODIFIED
    assert row.from_status == row.to_status == S.SUBMITTED
    assert row.comment == "entry E1 on 2026-02-02: 8h -> 6h"


def test_modify_entry_hours_note_goes_to_the_ledger():
    w = World()
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")
    w.entry(hours=8)

    w.engine.modify_entry_hours(actor=ADMIN, command=ModifyEntryHoursCommand("E1", 7.5, note="lunch break"))
    assert w.history.rows[0].comment == "entry E1 on 2026-02-02: 8h -> 7.5h (lunch break)"


@pytest.mark.parametrize("status", [S.DRAFT, S.REJECTED, S.APPROVED, S.FINISHED])
def test_modify_entry_hours_outside_review_is_read_only(status):
    w = World()
    w.timesheet(status=status, approver_id="lead")
    w.entry()

    with pytest.raises(ReadOnlyStateError):
        w.engine.modify_entry_hours(actor=LEAD, command=ModifyEntryHoursCommand("E1", 4))
    assert w.entries.get_by_id("E1").approved_hours is None


def test_modify_entry_hours_unknown_entry_and_wrong_actor():
    w = World()
    w.timesheet(status=S.SUBMITTED, approver_id="lead")
    w.entry()

    with pytest.raises(NotFoundError):
        w.engine.modify_entry_hours(actor=LEAD, command=ModifyEntryHoursCommand("nope", 4))
    with pytest.raises(AuthorizationError):
        w.engine.modify_entry_hours(actor=EMPLOYEE, command=ModifyEntryHoursCommand("E1", 4))


def test_escalated_sheet_stays_approvable_after_hours_override():
    w = World(ALLOW_ADMIN_DIRECT_APPROVAL=False)
    w.timesheet(status=S.APPROVED_BY_TEAM_LEAD, approver_id="lead")
    w.entry(hours=8)

    w.engine.submit_to_admin(actor=LEAD, command=SubmitToAdminCommand("ts-1", admin_id="admin"))
    w.engine.modify_entry_hours(actor=ADMIN, command=ModifyEntryHoursCommand("E1", 6))

    assert w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1")).status == S.APPROVED


def test_admin_cannot_decide_own_timesheet():
    w = World()
    boss = w.users.add(User(user_id="boss", email="boss@example.com", role=Role.ADMIN, manager_id="lead"))
    w.timesheet(owner=boss)
    w.entry(hours=8)

    w.engine.submit(actor=boss, command=SubmitCommand("ts-1"))
    w.engine.approve(actor=LEAD, command=ApproveCommand("ts-1"))

    with pytest.raises(AuthorizationError):
        w.engine.approve(actor=boss, command=ApproveCommand("ts-1"))
    with pytest.raises(AuthorizationError):
        w.engine.reject(actor=boss, command=RejectCommand("ts-1", comment="mine"))
    with pytest.raises(AuthorizationError):
        w.engine.modify_entry_hours(actor=boss, command=ModifyEntryHoursCommand("E1", 12))
    assert w.status() == S.APPROVED_BY_TEAM_LEAD

    assert "ts-1" not in {s.timesheet.timesheet_id for s in w.engine.get_approvable_timesheets(actor=boss)}
    assert w.engine.approve(actor=ADMIN, command=ApproveCommand("ts-1")).status == S.APPROVED
