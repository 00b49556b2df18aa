from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from ..history.model import NewHistoryEntry
from .model import Timesheet


class TimesheetRepository(Protocol):
    def get_by_id(self, timesheet_id: str) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_by_period(self, *, user_id: str, month: int, year: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_or_create(self, *, user_id: str, month: int, year: int) -> Timesheet:
        """Return the period's timesheet, creating a Draft if none exists.

        Must never create a second row for the same ``(user_id, month, year)``.
        """

        raise NotImplementedError

    def list_visible(self, *, user_id: str) -> Sequence[Timesheet]:
        """Own timesheets plus those awaiting this user's decision."""

        raise NotImplementedError

    def list_for_approver(
        self,
        *,
        approver_id: str,
        include_status: Optional[TimesheetStatus] = None,
        limit: int = 500,
    ) -> Sequence[Timesheet]:
        """Timesheets whose current approver is ``approver_id``, plus (if given)
        every timesheet in ``include_status``; newest submission first."""

        raise NotImplementedError

    def apply_transition(
        self,
        *,
        expected_status: TimesheetStatus,
        updated: Timesheet,
        history: NewHistoryEntry,
    ) -> Optional[Timesheet]:
        """Write ``updated``'s mutable fields and append ``history`` atomically.

        Applies only if the stored status still equals ``expected_status``;
        returns ``None`` (and writes nothing) otherwise.
        """

        raise NotImplementedError
