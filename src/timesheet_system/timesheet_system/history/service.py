from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import not_before, now_local
from ..core.constants import DEFAULT_HISTORY_PAGE_SIZE
from ..core.enums import HistoryAction, TimesheetStatus
from ..core.exceptions import ValidationError
from .model import ApprovalHistoryEntry, HistoryPage, NewHistoryEntry
from .repository import HistoryRepository


class ApprovalLedger:
    """Builds and reads the per-timesheet audit trail.

    Rows are persisted by the repositories that apply the recorded change, in
    the same transaction. This class owns timestamps (non-decreasing within a
    timesheet) and the paginated query surface.
    """

    def __init__(
        self,
        history: HistoryRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        page_size: int = DEFAULT_HISTORY_PAGE_SIZE,
    ):
        self._history = history
        self._clock = clock
        self._page_size = page_size

    def now(self) -> datetime:
        return self._clock()

    def record(
        self,
        *,
        timesheet_id: str,
        action: HistoryAction,
        actor_id: str,
        from_status: Optional[TimesheetStatus] = None,
        to_status: Optional[TimesheetStatus] = None,
        comment: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> NewHistoryEntry:
        stamp = not_before(at or self._clock(), self._history.last_timestamp(timesheet_id))
        return NewHistoryEntry(
            timesheet_id=timesheet_id,
            action=action,
            actor_id=actor_id,
            timestamp=stamp,
            from_status=from_status,
            to_status=to_status,
            comment=comment,
        )

    def last_transition(self, timesheet_id: str) -> Optional[ApprovalHistoryEntry]:
        """Latest row that moved the status; hours overrides are skipped."""
        rows = self._history.list_for_timesheet(timesheet_id)
        return next((r for r in reversed(rows) if r.action != HistoryAction.MODIFIED), None)

    def list_for_timesheet(
        self,
        timesheet_id: str,
        *,
        action: Optional[HistoryAction] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> HistoryPage:
        if offset < 0:
            raise ValidationError("offset must be >= 0")
        if limit is not None and not 1 <= limit <= self._page_size:
            raise ValidationError(f"limit must be between 1 and {self._page_size}")

        items = self._history.list_for_timesheet(timesheet_id, action=action, limit=limit, offset=offset)
        total = self._history.count_for_timesheet(timesheet_id, action=action)
        return HistoryPage(items=list(items), total=total, limit=limit, offset=offset)
