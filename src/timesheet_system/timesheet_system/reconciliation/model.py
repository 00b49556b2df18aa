from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, require_hours, require_non_empty
from ..core.exceptions import DomainError, ValidationError
from ..entries.model import EntryFields
from ..timesheets.model import Timesheet

# Client-side ids the browser invents before the first save.
LOCAL_ID_PREFIX = "local-"

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"
FAILED = "failed"


@dataclass(frozen=True)
class EntryDraft:
    """One client-held entry.

    ``temp_key`` is a client-scoped key used only to match results back to
    the client's rows; it is never persisted. ``entry_id`` is the durable id
    and is ``None`` for entries not saved yet.
    ``position`` is the index in the client payload.
    """

    temp_key: str
    fields: EntryFields
    entry_id: Optional[str] = None
    position: int = 0

    @property
    def is_new(self) -> bool:
        return self.entry_id is None


@dataclass(frozen=True)
class EntrySaveResult:
    temp_key: str
    outcome: str
    entry_id: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    position: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome != FAILED

    @classmethod
    def failed(
        cls, temp_key: str, exc: DomainError, entry_id: Optional[str] = None, *, position: int = 0
    ) -> "EntrySaveResult":
        return cls(
            temp_key=temp_key,
            outcome=FAILED,
            entry_id=entry_id,
            error=exc.code,
            message=str(exc),
            position=position,
        )

    def to_dict(self) -> dict:
        return {
            "tempKey": self.temp_key,
            "id": self.entry_id,
            "outcome": self.outcome,
            "error": self.error,
            "message": self.message,
        }


@dataclass(frozen=True)
class BulkSaveReport:
    timesheet: Timesheet
    results: Sequence[EntrySaveResult]

    @property
    def failed(self) -> list[EntrySaveResult]:
        return [r for r in self.results if not r.ok]

    def id_map(self) -> dict[str, str]:
        """temp_key -> durable id for every entry that now exists."""
        return {r.temp_key: r.entry_id for r in self.results if r.ok and r.entry_id}

    def to_dict(self) -> dict:
        return {
            "timesheet": self.timesheet.to_dict(),
            "saved": len(self.results) - len(self.failed),
            "failed": len(self.failed),
            "results": [r.to_dict() for r in self.results],
        }


def parse_draft(raw: Mapping[str, Any], *, position: int) -> EntryDraft:
    if not isinstance(raw, Mapping):
        raise ValidationError("entry must be a JSON object")

    raw_id = optional_text(raw.get("id"))
    temp_key = optional_text(raw.get("tempKey"))
    entry_id: Optional[str] = raw_id
    if raw_id and raw_id.startswith(LOCAL_ID_PREFIX):
        temp_key = temp_key or raw_id
        entry_id = None
    temp_key = temp_key or entry_id or f"#{position}"

    try:
        work_date = parse_iso_date(require_non_empty(raw.get("date"), "date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")

    fields = EntryFields(
        work_date=work_date,
        project_id=require_non_empty(raw.get("projectId"), "projectId"),
        task_id=optional_text(raw.get("taskId")),
        logged_hours=require_hours(raw.get("loggedHours"), "loggedHours", allow_zero=False),
        description=optional_text(raw.get("description")),
    )
    return EntryDraft(temp_key=temp_key, fields=fields, entry_id=entry_id, position=position)


def parse_drafts(raw_entries: Any) -> tuple[list[EntryDraft], list[EntrySaveResult]]:
    """Split a raw payload into valid drafts and per-entry validation failures."""
    if not isinstance(raw_entries, (list, tuple)):
        raise ValidationError("entries must be an array")

    drafts: list[EntryDraft] = []
    rejected: list[EntrySaveResult] = []
    for position, raw in enumerate(raw_entries):
        try:
            drafts.append(parse_draft(raw, position=position))
        except ValidationError as e:
            key = f"#{position}"
            if isinstance(raw, Mapping):
                key = optional_text(raw.get("tempKey")) or optional_text(raw.get("id")) or key
            rejected.append(EntrySaveResult.failed(key, e, position=position))
    return drafts, rejected
