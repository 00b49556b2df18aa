from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.enums import TimesheetStatus
from ..core.exceptions import DomainError


@dataclass(frozen=True)
class BulkItemResult:
    timesheet_id: str
    status: Optional[TimesheetStatus] = None
    error: Optional[str] = None
    message: Optional[str] = None
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, timesheet_id: str, exc: DomainError) -> "BulkItemResult":
        return cls(timesheet_id=timesheet_id, error=exc.code, message=str(exc), retryable=exc.retryable)

    def to_dict(self) -> dict:
        return {
            "timesheetId": self.timesheet_id,
            "ok": self.ok,
            "status": self.status.value if self.status else None,
            "error": self.error,
            "message": self.message,
            "retryable": self.retryable,
        }


@dataclass(frozen=True)
class BulkDecisionReport:
    results: Sequence[BulkItemResult]

    @property
    def succeeded(self) -> list[str]:
        return [r.timesheet_id for r in self.results if r.ok]

    @property
    def failed(self) -> list[BulkItemResult]:
        return [r for r in self.results if not r.ok]

    def to_dict(self) -> dict:
        return {
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "results": [r.to_dict() for r in self.results],
        }
