from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role; decides which workflow transitions a user may invoke."""

    EMPLOYEE = "Employee"
    TEAM_LEAD = "TeamLead"
    ADMIN = "Admin"

    @property
    def is_approver(self) -> bool:
        return self in {Role.TEAM_LEAD, Role.ADMIN}


class TimesheetStatus(str, Enum):
    """Lifecycle states of a timesheet period."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    APPROVED_BY_TEAM_LEAD = "Approved_By_TeamLead"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FINISHED = "Finished"


class HistoryAction(str, Enum):
    """Actions recorded in the approval ledger."""

    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    SUBMITTED_TO_ADMIN = "Submitted_To_Admin"
    MODIFIED = "Modified"
    FINISHED = "Finished"


class WorkflowAction(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    SUBMIT_TO_ADMIN = "submitToAdmin"
    MODIFY_ENTRY_HOURS = "modifyEntryHours"
    FINISH = "finish"
