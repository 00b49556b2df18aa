from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_ts


@dataclass(frozen=True)
class TimesheetEntry:
    """One logged block of work.

    ``logged_hours`` is the employee's claim; ``approved_hours`` stays ``None``
    until an approver overrides it.
    """

    entry_id: str
    timesheet_id: str
    work_date: date
    project_id: str
    logged_hours: float
    task_id: Optional[str] = None
    approved_hours: Optional[float] = None
    description: Optional[str] = None
    hours_modified_by: Optional[str] = None
    hours_modified_at: Optional[datetime] = None

    @property
    def effective_hours(self) -> float:
        return self.logged_hours if self.approved_hours is None else self.approved_hours

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "timesheetId": self.timesheet_id,
            "date": format_date(self.work_date),
            "projectId": self.project_id,
            "taskId": self.task_id,
            "loggedHours": self.logged_hours,
            "approvedHours": self.approved_hours,
            "effectiveHours": self.effective_hours,
            "description": self.description,
            "hoursModifiedBy": self.hours_modified_by,
            "hoursModifiedAt": format_ts(self.hours_modified_at),
        }


@dataclass(frozen=True)
class EntryFields:
    """The owner-editable fields of an entry."""

    work_date: date
    project_id: str
    logged_hours: float
    task_id: Optional[str] = None
    description: Optional[str] = None

    def differs_from(self, entry: TimesheetEntry) -> bool:
        return (
            self.work_date != entry.work_date
            or self.project_id != entry.project_id
            or self.task_id != entry.task_id
            or round(float(self.logged_hours), 2) != round(float(entry.logged_hours), 2)
            or self.description != entry.description
        )
