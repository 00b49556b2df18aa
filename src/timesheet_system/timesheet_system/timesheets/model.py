from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_ts
from ..core.constants import EDITABLE_STATUSES, REVIEWABLE_STATUSES
from ..core.enums import TimesheetStatus


@dataclass(frozen=True)
class Timesheet:
    """One ``(user_id, month, year)`` period and its lifecycle state.

    Only the workflow engine changes ``status``; rows are never deleted.
    """

    timesheet_id: str
    user_id: str
    month: int
    year: int
    status: TimesheetStatus = TimesheetStatus.DRAFT
    submit_date: Optional[datetime] = None
    approve_date: Optional[datetime] = None
    finished_date: Optional[datetime] = None
    comment: Optional[str] = None
    current_approver_id: Optional[str] = None

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def is_reviewable(self) -> bool:
        return self.status in REVIEWABLE_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": self.timesheet_id,
            "userId": self.user_id,
            "month": self.month,
            "year": self.year,
            "status": self.status.value,
            "submitDate": format_ts(self.submit_date),
            "approveDate": format_ts(self.approve_date),
            "finishedDate": format_ts(self.finished_date),
            "comment": self.comment,
            "currentApproverId": self.current_approver_id,
        }


@dataclass(frozen=True)
class TimesheetSummary:
    """Row of the approver's work list."""

    timesheet: Timesheet
    total_hours: float
    total_approved_hours: float
    owner: Optional[dict] = None

    def to_dict(self) -> dict:
        data = self.timesheet.to_dict()
        data["totalHours"] = self.total_hours
        data["totalApprovedHours"] = self.total_approved_hours
        data["user"] = self.owner
        return data
