from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import HistoryAction
from .model import ApprovalHistoryEntry, NewHistoryEntry


class HistoryRepository(Protocol):
    """Append-only ledger. No update or delete operations exist by design of the table."""

    def append(self, entry: NewHistoryEntry) -> int:
        raise NotImplementedError

    def list_for_timesheet(
        self,
        timesheet_id: str,
        *,
        action: Optional[HistoryAction] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[ApprovalHistoryEntry]:
        """Ordered by timestamp ascending, then insertion order."""

        raise NotImplementedError

    def count_for_timesheet(self, timesheet_id: str, *, action: Optional[HistoryAction] = None) -> int:
        raise NotImplementedError

    def last_timestamp(self, timesheet_id: str) -> Optional[datetime]:
        raise NotImplementedError
