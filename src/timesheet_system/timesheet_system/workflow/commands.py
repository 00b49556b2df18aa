"""Closed request types for each workflow action.

Raw payloads are validated here, at the boundary, so the engine only ever
sees well-formed commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..common.validators import optional_text, require_hours, require_non_empty
from ..core.enums import TimesheetStatus, WorkflowAction
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class SubmitCommand:
    timesheet_id: str
    approver_id: Optional[str] = None
    expected_status: Optional[TimesheetStatus] = None


@dataclass(frozen=True)
class ApproveCommand:
    timesheet_id: str
    comment: Optional[str] = None
    expected_status: Optional[TimesheetStatus] = None


@dataclass(frozen=True)
class RejectCommand:
    timesheet_id: str
    comment: str
    expected_status: Optional[TimesheetStatus] = None


@dataclass(frozen=True)
class SubmitToAdminCommand:
    timesheet_id: str
    admin_id: str
    expected_status: Optional[TimesheetStatus] = None


@dataclass(frozen=True)
class ModifyEntryHoursCommand:
    entry_id: str
    approved_hours: float
    expected_status: Optional[TimesheetStatus] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class FinishCommand:
    timesheet_id: str
    expected_status: Optional[TimesheetStatus] = None


@dataclass(frozen=True)
class BulkDecisionCommand:
    timesheet_ids: tuple[str, ...]
    comment: Optional[str] = None


@dataclass(frozen=True)
class BulkEscalationCommand:
    timesheet_ids: tuple[str, ...]
    admin_id: str


Command = Union[
    SubmitCommand,
    ApproveCommand,
    RejectCommand,
    SubmitToAdminCommand,
    ModifyEntryHoursCommand,
    FinishCommand,
]


def _expected_status(payload: Mapping[str, Any]) -> Optional[TimesheetStatus]:
    raw = payload.get("expectedStatus")
    if raw in (None, ""):
        return None
    try:
        return TimesheetStatus(raw)
    except ValueError:
        raise ValidationError(f"Unknown status: {raw!r}")


def parse_command(action: WorkflowAction | str, payload: Mapping[str, Any]) -> Command:
    try:
        action = WorkflowAction(action)
    except ValueError:
        raise ValidationError(f"Unknown action: {action!r}")
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    expected = _expected_status(payload)

    if action == WorkflowAction.MODIFY_ENTRY_HOURS:
        return ModifyEntryHoursCommand(
            entry_id=require_non_empty(payload.get("entryId"), "entryId"),
            approved_hours=require_hours(payload.get("approvedHours"), "approvedHours"),
            expected_status=expected,
            note=optional_text(payload.get("note")),
        )

    timesheet_id = require_non_empty(payload.get("timesheetId"), "timesheetId")

    if action == WorkflowAction.SUBMIT:
        return SubmitCommand(
            timesheet_id=timesheet_id,
            approver_id=optional_text(payload.get("approverId")),
            expected_status=expected,
        )
    if action == WorkflowAction.APPROVE:
        return ApproveCommand(
            timesheet_id=timesheet_id,
            comment=optional_text(payload.get("comment")),
            expected_status=expected,
        )
    if action == WorkflowAction.REJECT:
        return RejectCommand(
            timesheet_id=timesheet_id,
            comment=require_non_empty(payload.get("comment"), "comment"),
            expected_status=expected,
        )
    if action == WorkflowAction.SUBMIT_TO_ADMIN:
        return SubmitToAdminCommand(
            timesheet_id=timesheet_id,
            admin_id=require_non_empty(payload.get("adminId"), "adminId"),
            expected_status=expected,
        )
    return FinishCommand(timesheet_id=timesheet_id, expected_status=expected)


def parse_bulk_decision(payload: Mapping[str, Any], *, comment_required: bool) -> BulkDecisionCommand:
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    raw_ids = payload.get("timesheetIds")
    if not isinstance(raw_ids, (list, tuple)) or not raw_ids:
        raise ValidationError("timesheetIds must be a non-empty array")
    ids = tuple(require_non_empty(i, "timesheetIds[]") for i in raw_ids)

    if comment_required:
        comment: Optional[str] = require_non_empty(payload.get("comment"), "comment")
    else:
        comment = optional_text(payload.get("comment"))
    return BulkDecisionCommand(timesheet_ids=tuple(dict.fromkeys(ids)), comment=comment)


def parse_bulk_escalation(payload: Mapping[str, Any]) -> BulkEscalationCommand:
    decision = parse_bulk_decision(payload, comment_required=False)
    return BulkEscalationCommand(
        timesheet_ids=decision.timesheet_ids,
        admin_id=require_non_empty(payload.get("adminId"), "adminId"),
    )
