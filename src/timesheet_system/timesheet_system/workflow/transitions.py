"""The fixed lifecycle graph.

Every status write goes through one of these edges; the ledger can only ever
show ``(from_status, to_status)`` pairs listed in ``LEGAL_EDGES``.
"""

from __future__ import annotations

from ..core.constants import REVIEWABLE_STATUSES
from ..core.enums import Role, TimesheetStatus, WorkflowAction
from ..core.exceptions import InvalidTransitionError

S = TimesheetStatus

ALLOWED_FROM: dict[WorkflowAction, frozenset[TimesheetStatus]] = {
    WorkflowAction.SUBMIT: frozenset({S.DRAFT, S.REJECTED}),
    WorkflowAction.APPROVE: frozenset({S.SUBMITTED, S.APPROVED_BY_TEAM_LEAD}),
    WorkflowAction.REJECT: frozenset({S.SUBMITTED, S.APPROVED_BY_TEAM_LEAD}),
    WorkflowAction.SUBMIT_TO_ADMIN: frozenset({S.APPROVED_BY_TEAM_LEAD}),
    WorkflowAction.MODIFY_ENTRY_HOURS: REVIEWABLE_STATUSES,
    WorkflowAction.FINISH: frozenset({S.APPROVED}),
}

LEGAL_EDGES: frozenset[tuple[TimesheetStatus, TimesheetStatus]] = frozenset(
    {
        (S.DRAFT, S.SUBMITTED),
        (S.REJECTED, S.SUBMITTED),
        (S.SUBMITTED, S.APPROVED_BY_TEAM_LEAD),
        (S.SUBMITTED, S.APPROVED),
        (S.APPROVED_BY_TEAM_LEAD, S.APPROVED),
        (S.SUBMITTED, S.REJECTED),
        (S.APPROVED_BY_TEAM_LEAD, S.REJECTED),
        (S.APPROVED_BY_TEAM_LEAD, S.SUBMITTED),
        (S.APPROVED, S.FINISHED),
    }
)


def require_allowed(action: WorkflowAction, status: TimesheetStatus) -> None:
    if status == S.FINISHED:
        raise InvalidTransitionError(f"Cannot {action.value}: timesheet is Finished")
    if status not in ALLOWED_FROM[action]:
        raise InvalidTransitionError(f'Cannot {action.value}: status is "{status.value}"')


def approve_target(role: Role, status: TimesheetStatus, *, allow_admin_direct: bool) -> TimesheetStatus:
    """Where an ``approve`` by ``role`` leads from ``status``.

    TeamLead approval is the first tier only; Admin approval is final.
    """
    if role == Role.TEAM_LEAD and status == S.SUBMITTED:
        return S.APPROVED_BY_TEAM_LEAD
    if role == Role.ADMIN and status == S.APPROVED_BY_TEAM_LEAD:
        return S.APPROVED
    if role == Role.ADMIN and status == S.SUBMITTED:
        if allow_admin_direct:
            return S.APPROVED
        raise InvalidTransitionError("Admin approval requires a team-lead approval first")
    raise InvalidTransitionError(f'{role.value} cannot approve a timesheet in status "{status.value}"')
