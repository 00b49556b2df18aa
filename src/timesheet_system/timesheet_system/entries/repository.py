from __future__ import annotations

from datetime import datetime
from typing import Collection, Mapping, Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from ..history.model import NewHistoryEntry
from .model import EntryFields, TimesheetEntry


class EntryRepository(Protocol):
    """Entry rows scoped to one timesheet.

    Writes that depend on the parent's status take the allowed statuses and
    check them in the same statement, so a stale read never leaks a write.
    """

    def get_by_id(self, entry_id: str) -> Optional[TimesheetEntry]:
        raise NotImplementedError

    def list_for_timesheet(self, timesheet_id: str) -> Sequence[TimesheetEntry]:
        raise NotImplementedError

    def count_for_timesheet(self, timesheet_id: str) -> int:
        raise NotImplementedError

    def totals_for_timesheets(self, timesheet_ids: Collection[str]) -> Mapping[str, tuple[float, float]]:
        """``{timesheet_id: (logged_total, approved_or_logged_total)}``."""

        raise NotImplementedError

    def create(
        self,
        *,
        timesheet_id: str,
        fields: EntryFields,
        allowed_statuses: Collection[TimesheetStatus],
    ) -> Optional[str]:
        """Return the new durable id, or ``None`` if the parent is not in ``allowed_statuses``."""

        raise NotImplementedError

    def update(
        self,
        *,
        entry_id: str,
        fields: EntryFields,
        allowed_statuses: Collection[TimesheetStatus],
    ) -> bool:
        raise NotImplementedError

    def delete(self, *, entry_id: str, allowed_statuses: Collection[TimesheetStatus]) -> bool:
        raise NotImplementedError

    def apply_approved_hours(
        self,
        *,
        entry_id: str,
        expected_status: TimesheetStatus,
        approved_hours: float,
        modified_by: str,
        modified_at: datetime,
        history: NewHistoryEntry,
    ) -> bool:
        """Set approved hours and append ``history`` atomically, only while the
        parent timesheet's status still equals ``expected_status``."""

        raise NotImplementedError
