from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_ts
from ..core.enums import HistoryAction, TimesheetStatus


@dataclass(frozen=True)
class NewHistoryEntry:
    """A ledger row not yet persisted; written together with the change it records."""

    timesheet_id: str
    action: HistoryAction
    actor_id: str
    timestamp: datetime
    from_status: Optional[TimesheetStatus] = None
    to_status: Optional[TimesheetStatus] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class ApprovalHistoryEntry:
    history_id: int
    timesheet_id: str
    action: HistoryAction
    actor_id: str
    timestamp: datetime
    from_status: Optional[TimesheetStatus] = None
    to_status: Optional[TimesheetStatus] = None
    comment: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.history_id,
            "timesheetId": self.timesheet_id,
            "action": self.action.value,
            "fromStatus": self.from_status.value if self.from_status else None,
            "toStatus": self.to_status.value if self.to_status else None,
            "comment": self.comment,
            "timestamp": format_ts(self.timestamp),
            "actorId": self.actor_id,
        }


@dataclass(frozen=True)
class HistoryPage:
    items: Sequence[ApprovalHistoryEntry]
    total: int
    limit: Optional[int]
    offset: int

    def to_dict(self) -> dict:
        return {
            "items": [e.to_dict() for e in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }
