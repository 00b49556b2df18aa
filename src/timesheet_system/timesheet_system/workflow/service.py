from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import format_date
from ..core.constants import DEFAULT_APPROVABLE_LIMIT
from ..core.enums import HistoryAction, Role, TimesheetStatus, WorkflowAction
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ReadOnlyStateError,
    ValidationError,
)
from ..entries.model import TimesheetEntry
from ..entries.repository import EntryRepository
from ..history.service import ApprovalLedger
from ..timesheets.model import Timesheet, TimesheetSummary
from ..timesheets.repository import TimesheetRepository
from ..users.model import User
from ..users.repository import UserRepository
from .commands import (
    ApproveCommand,
    BulkDecisionCommand,
    BulkEscalationCommand,
    FinishCommand,
    ModifyEntryHoursCommand,
    RejectCommand,
    SubmitCommand,
    SubmitToAdminCommand,
)
from .model import BulkDecisionReport, BulkItemResult
from .transitions import approve_target, require_allowed

logger = logging.getLogger(__name__)


def _hours_change_comment(entry: TimesheetEntry, command: ModifyEntryHoursCommand) -> str:
    text = (
        f"entry {entry.entry_id} on {format_date(entry.work_date)}: "
        f"{entry.effective_hours:g}h -> {command.approved_hours:g}h"
    )
    return f"{text} ({command.note})" if command.note else text


class WorkflowEngine:
    """Timesheet lifecycle: status transitions, approver routing, audit trail.

    Each call reads the current header, checks legality and authorization,
    then hands the new header and its ledger row to the repository as one
    conditional write (optimistic concurrency on the status). A caller that
    loses the race gets ``ConflictError`` and nothing is written.

    The acting user is always an explicit argument.
    """

    def __init__(
        self,
        timesheets: TimesheetRepository,
        entries: EntryRepository,
        users: UserRepository,
        ledger: ApprovalLedger,
        *,
        allow_admin_direct_approval: bool = True,
    ):
        self._timesheets = timesheets
        self._entries = entries
        self._users = users
        self._ledger = ledger
        self._allow_admin_direct_approval = allow_admin_direct_approval

    # -------- helpers --------
    def _load(self, timesheet_id: str, expected_status: Optional[TimesheetStatus] = None) -> Timesheet:
        ts = self._timesheets.get_by_id(timesheet_id)
        if not ts:
            raise NotFoundError("Timesheet not found")
        if expected_status is not None and ts.status != expected_status:
            raise ConflictError(
                f'Timesheet status changed: expected "{expected_status.value}", found "{ts.status.value}"'
            )
        return ts

    @staticmethod
    def _can_decide(actor: User, ts: Timesheet) -> bool:
        if not actor.role.is_approver:
            return False
        if ts.user_id == actor.user_id:
            return False
        if ts.current_approver_id == actor.user_id:
            return True
        # The escalated tier is open to every Admin.
        return actor.role == Role.ADMIN and ts.status == TimesheetStatus.APPROVED_BY_TEAM_LEAD

    def _require_decider(self, actor: User, ts: Timesheet) -> None:
        if not self._can_decide(actor, ts):
            raise AuthorizationError("You are not the designated approver for this timesheet")

    def _was_escalated(self, ts: Timesheet) -> bool:
        last = self._ledger.last_transition(ts.timesheet_id)
        return last is not None and last.action == HistoryAction.SUBMITTED_TO_ADMIN

    def _resolve_approver(self, approver_id: str) -> User:
        approver = self._users.get_by_id(approver_id)
        if not approver or not approver.is_active or not approver.role.is_approver:
            raise ValidationError("Approver must be an active Team Lead or Admin")
        return approver

    def _commit(
        self,
        *,
        actor: User,
        current: Timesheet,
        updated: Timesheet,
        action: HistoryAction,
        now: datetime,
        comment: Optional[str] = None,
    ) -> Timesheet:
        history = self._ledger.record(
            timesheet_id=current.timesheet_id,
            action=action,
            actor_id=actor.user_id,
            from_status=current.status,
            to_status=updated.status,
            comment=comment,
            at=now,
        )
        result = self._timesheets.apply_transition(
            expected_status=current.status,
            updated=updated,
            history=history,
        )
        if result is None:
            logger.warning(
                "timesheet=%s action=%s conflict (expected %s) actor=%s",
                current.timesheet_id, action.value, current.status.value, actor.user_id,
            )
            raise ConflictError("Timesheet was changed by another request; reload and retry")

        logger.info(
            "timesheet=%s action=%s %s->%s actor=%s",
            current.timesheet_id, action.value, current.status.value, result.status.value, actor.user_id,
        )
        return result

    # -------- transitions --------
    def submit(self, *, actor: User, command: SubmitCommand) -> Timesheet:
        ts = self._load(command.timesheet_id, command.expected_status)
        require_allowed(WorkflowAction.SUBMIT, ts.status)
        if ts.user_id != actor.user_id:
            raise AuthorizationError("Only the owner can submit a timesheet")

        if self._entries.count_for_timesheet(ts.timesheet_id) < 1:
            raise ValidationError("Cannot submit an empty timesheet")

        approver_id = command.approver_id or actor.manager_id
        if not approver_id:
            raise ValidationError("No approver given and the owner has no manager")
        approver = self._resolve_approver(approver_id)
        if approver.user_id == actor.user_id:
            raise ValidationError("A timesheet cannot be routed to its owner")

        now = self._ledger.now()
        updated = replace(
            ts,
            status=TimesheetStatus.SUBMITTED,
            submit_date=now,
            approve_date=None,
            current_approver_id=approver.user_id,
        )
        return self._commit(actor=actor, current=ts, updated=updated, action=HistoryAction.SUBMITTED, now=now)

    def approve(self, *, actor: User, command: ApproveCommand) -> Timesheet:
        ts = self._load(command.timesheet_id, command.expected_status)
        require_allowed(WorkflowAction.APPROVE, ts.status)
        self._require_decider(actor, ts)

        allow_direct = self._allow_admin_direct_approval or self._was_escalated(ts)
        target = approve_target(actor.role, ts.status, allow_admin_direct=allow_direct)
        now = self._ledger.now()
        if target == TimesheetStatus.APPROVED:
            updated = replace(
                ts,
                status=target,
                approve_date=now,
                current_approver_id=None,
                comment=command.comment or ts.comment,
            )
        else:
            # Team lead stays the current approver until escalating with submit_to_admin.
            updated = replace(ts, status=target, comment=command.comment or ts.comment)

        return self._commit(
            actor=actor, current=ts, updated=updated, action=HistoryAction.APPROVED, now=now, comment=command.comment
        )

    def reject(self, *, actor: User, command: RejectCommand) -> Timesheet:
        if not command.comment or not command.comment.strip():
            raise ValidationError("A comment is required to reject a timesheet")

        ts = self._load(command.timesheet_id, command.expected_status)
        require_allowed(WorkflowAction.REJECT, ts.status)
        self._require_decider(actor, ts)

        now = self._ledger.now()
        updated = replace(ts, status=TimesheetStatus.REJECTED, current_approver_id=None, comment=command.comment)
        return self._commit(
            actor=actor, current=ts, updated=updated, action=HistoryAction.REJECTED, now=now, comment=command.comment
        )

    def submit_to_admin(self, *, actor: User, command: SubmitToAdminCommand) -> Timesheet:
        ts = self._load(command.timesheet_id, command.expected_status)
        require_allowed(WorkflowAction.SUBMIT_TO_ADMIN, ts.status)
        if actor.role != Role.TEAM_LEAD or ts.current_approver_id != actor.user_id:
            raise AuthorizationError("Only the approving Team Lead can escalate this timesheet")

        admin = self._users.get_by_id(command.admin_id)
        if not admin or not admin.is_active or admin.role != Role.ADMIN:
            raise ValidationError("Selected user is not an Admin")

        now = self._ledger.now()
        updated = replace(ts, status=TimesheetStatus.SUBMITTED, current_approver_id=admin.user_id)
        return self._commit(
            actor=actor, current=ts, updated=updated, action=HistoryAction.SUBMITTED_TO_ADMIN, now=now
        )

    def modify_entry_hours(self, *, actor: User, command: ModifyEntryHoursCommand) -> str:
        entry = self._entries.get_by_id(command.entry_id)
        if not entry:
            raise NotFoundError("Entry not found")
        ts = self._load(entry.timesheet_id, command.expected_status)
        if not ts.is_reviewable:
            raise ReadOnlyStateError(f'Cannot modify hours: timesheet is "{ts.status.value}"')
        self._require_decider(actor, ts)

        now = self._ledger.now()
        history = self._ledger.record(
            timesheet_id=ts.timesheet_id,
            action=HistoryAction.MODIFIED,
            actor_id=actor.user_id,
            from_status=ts.status,
            to_status=ts.status,
            comment=_hours_change_comment(entry, command),
            at=now,
        )
        ok = self._entries.apply_approved_hours(
            entry_id=entry.entry_id,
            expected_status=ts.status,
            approved_hours=command.approved_hours,
            modified_by=actor.user_id,
            modified_at=now,
            history=history,
        )
        if not ok:
            logger.warning("entry=%s modify hours conflict actor=%s", entry.entry_id, actor.user_id)
            raise ConflictError("Timesheet was changed by another request; reload and retry")

        logger.info(
            "timesheet=%s action=%s entry=%s hours=%s actor=%s",
            ts.timesheet_id, HistoryAction.MODIFIED.value, entry.entry_id, command.approved_hours, actor.user_id,
        )
        return entry.entry_id

    def finish(self, *, actor: User, command: FinishCommand) -> Timesheet:
        ts = self._load(command.timesheet_id, command.expected_status)
        require_allowed(WorkflowAction.FINISH, ts.status)
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can finish a timesheet")

        now = self._ledger.now()
        updated = replace(ts, status=TimesheetStatus.FINISHED, finished_date=now, current_approver_id=None)
        return self._commit(actor=actor, current=ts, updated=updated, action=HistoryAction.FINISHED, now=now)

    # -------- batch --------
    def _bulk(self, ids: Sequence[str], decide: Callable[[str], Timesheet]) -> BulkDecisionReport:
        results: list[BulkItemResult] = []
        for timesheet_id in ids:
            try:
                ts = decide(timesheet_id)
                results.append(BulkItemResult(timesheet_id=timesheet_id, status=ts.status))
            except DomainError as e:
                results.append(BulkItemResult.failed(timesheet_id, e))
        return BulkDecisionReport(results=results)

    def bulk_approve(self, *, actor: User, command: BulkDecisionCommand) -> BulkDecisionReport:
        report = self._bulk(
            command.timesheet_ids,
            lambda tid: self.approve(actor=actor, command=ApproveCommand(timesheet_id=tid, comment=command.comment)),
        )
        logger.info("bulk approve actor=%s ok=%d failed=%d", actor.user_id, len(report.succeeded), len(report.failed))
        return report

    def bulk_reject(self, *, actor: User, command: BulkDecisionCommand) -> BulkDecisionReport:
        if not command.comment:
            raise ValidationError("A comment is required to reject timesheets")
        report = self._bulk(
            command.timesheet_ids,
            lambda tid: self.reject(actor=actor, command=RejectCommand(timesheet_id=tid, comment=command.comment)),
        )
        logger.info("bulk reject actor=%s ok=%d failed=%d", actor.user_id, len(report.succeeded), len(report.failed))
        return report

    def bulk_submit_to_admin(self, *, actor: User, command: BulkEscalationCommand) -> BulkDecisionReport:
        report = self._bulk(
            command.timesheet_ids,
            lambda tid: self.submit_to_admin(
                actor=actor, command=SubmitToAdminCommand(timesheet_id=tid, admin_id=command.admin_id)
            ),
        )
        logger.info(
            "bulk submit to admin=%s actor=%s ok=%d failed=%d",
            command.admin_id, actor.user_id, len(report.succeeded), len(report.failed),
        )
        return report

    # -------- queries --------
    def get_approvable_timesheets(self, *, actor: User, limit: int = DEFAULT_APPROVABLE_LIMIT) -> list[TimesheetSummary]:
        if not actor.role.is_approver:
            return []

        include = TimesheetStatus.APPROVED_BY_TEAM_LEAD if actor.role == Role.ADMIN else None
        timesheets = [
            ts
            for ts in self._timesheets.list_for_approver(approver_id=actor.user_id, include_status=include, limit=limit)
            if ts.is_reviewable and self._can_decide(actor, ts)
        ]
        timesheets.sort(key=lambda t: t.submit_date or datetime.min, reverse=True)

        totals = self._entries.totals_for_timesheets([t.timesheet_id for t in timesheets])
        owners: dict[str, Optional[dict]] = {}
        summaries = []
        for ts in timesheets:
            if ts.user_id not in owners:
                owner = self._users.get_by_id(ts.user_id)
                owners[ts.user_id] = owner.to_profile() if owner else None
            logged, approved = totals.get(ts.timesheet_id, (0.0, 0.0))
            summaries.append(
                TimesheetSummary(
                    timesheet=ts,
                    total_hours=logged,
                    total_approved_hours=approved,
                    owner=owners[ts.user_id],
                )
            )
        return summaries
