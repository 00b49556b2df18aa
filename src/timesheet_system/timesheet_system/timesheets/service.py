from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.validators import require_period
from ..core.enums import HistoryAction, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..entries.model import TimesheetEntry
from ..entries.repository import EntryRepository
from ..history.model import HistoryPage
from ..history.service import ApprovalLedger
from ..users.model import User
from .model import Timesheet
from .repository import TimesheetRepository


@dataclass(frozen=True)
class TimesheetDetail:
    timesheet: Timesheet
    entries: Sequence[TimesheetEntry]

    def to_dict(self) -> dict:
        data = self.timesheet.to_dict()
        data["entries"] = [e.to_dict() for e in self.entries]
        data["totalHours"] = sum(e.logged_hours for e in self.entries)
        data["totalApprovedHours"] = sum(e.effective_hours for e in self.entries)
        return data


class TimesheetQueryService:
    """Read paths: own timesheets, those awaiting the user, and their audit trail."""

    def __init__(self, timesheets: TimesheetRepository, entries: EntryRepository, ledger: ApprovalLedger):
        self._timesheets = timesheets
        self._entries = entries
        self._ledger = ledger

    @staticmethod
    def _can_view(actor: User, ts: Timesheet) -> bool:
        return actor.role == Role.ADMIN or actor.user_id in (ts.user_id, ts.current_approver_id)

    def _visible(self, actor: User, timesheet_id: str) -> Timesheet:
        ts = self._timesheets.get_by_id(timesheet_id)
        if not ts:
            raise NotFoundError("Timesheet not found")
        if not self._can_view(actor, ts):
            raise AuthorizationError("You cannot view this timesheet")
        return ts

    def list_visible(self, *, actor: User) -> Sequence[Timesheet]:
        return self._timesheets.list_visible(user_id=actor.user_id)

    def get_timesheet(self, *, actor: User, timesheet_id: str) -> TimesheetDetail:
        ts = self._visible(actor, timesheet_id)
        return TimesheetDetail(timesheet=ts, entries=list(self._entries.list_for_timesheet(ts.timesheet_id)))

    def get_for_period(self, *, actor: User, month, year) -> Optional[TimesheetDetail]:
        m, y = require_period(month, year)
        ts = self._timesheets.get_by_period(user_id=actor.user_id, month=m, year=y)
        if not ts:
            return None
        return TimesheetDetail(timesheet=ts, entries=list(self._entries.list_for_timesheet(ts.timesheet_id)))

    def get_history(
        self,
        *,
        actor: User,
        timesheet_id: str,
        action: Optional[HistoryAction] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> HistoryPage:
        ts = self._visible(actor, timesheet_id)
        return self._ledger.list_for_timesheet(ts.timesheet_id, action=action, limit=limit, offset=offset)
