from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_period
from ..core.constants import EDITABLE_STATUSES
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    ReadOnlyStateError,
    ValidationError,
)
from ..entries.repository import EntryRepository
from ..projects.repository import ProjectRepository
from ..timesheets.model import Timesheet
from ..timesheets.repository import TimesheetRepository
from ..users.model import User
from .model import CREATED, UNCHANGED, UPDATED, BulkSaveReport, EntryDraft, EntrySaveResult

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Merges a client draft entry set into the stored entries of one timesheet.

    Creates new entries and updates changed ones. Entries missing from the
    draft set are left alone. Each entry succeeds or fails on its own; the
    whole call is refused only when the timesheet is not editable. Bulk save
    is not an audited action and writes no ledger rows.
    """

    def __init__(self, timesheets: TimesheetRepository, entries: EntryRepository, projects: ProjectRepository):
        self._timesheets = timesheets
        self._entries = entries
        self._projects = projects

    def bulk_save_for_period(
        self,
        *,
        actor: User,
        month,
        year,
        drafts: Sequence[EntryDraft],
        rejected: Sequence[EntrySaveResult] = (),
    ) -> BulkSaveReport:
        m, y = require_period(month, year)
        ts = self._timesheets.get_or_create(user_id=actor.user_id, month=m, year=y)
        return self._save(actor, ts, drafts, rejected)

    def bulk_save(
        self,
        *,
        actor: User,
        timesheet_id: str,
        drafts: Sequence[EntryDraft],
        rejected: Sequence[EntrySaveResult] = (),
    ) -> BulkSaveReport:
        ts = self._timesheets.get_by_id(timesheet_id)
        if not ts:
            raise NotFoundError("Timesheet not found")
        return self._save(actor, ts, drafts, rejected)

    def delete_entry(self, *, actor: User, entry_id: str) -> None:
        entry = self._entries.get_by_id(entry_id)
        if not entry:
            raise NotFoundError("Entry not found")
        ts = self._timesheets.get_by_id(entry.timesheet_id)
        if not ts:
            raise NotFoundError("Timesheet not found")
        self._require_editable(actor, ts)

        if not self._entries.delete(entry_id=entry.entry_id, allowed_statuses=EDITABLE_STATUSES):
            raise ReadOnlyStateError("Timesheet is no longer editable")
        logger.info("timesheet=%s entry=%s deleted actor=%s", ts.timesheet_id, entry.entry_id, actor.user_id)

    @staticmethod
    def _require_editable(actor: User, ts: Timesheet) -> None:
        if ts.user_id != actor.user_id:
            raise AuthorizationError("Only the owner can edit timesheet entries")
        if not ts.is_editable:
            raise ReadOnlyStateError(
                f'Cannot modify entries: timesheet is "{ts.status.value}". Only Draft or Rejected timesheets can be edited.'
            )

    def _save(
        self,
        actor: User,
        ts: Timesheet,
        drafts: Sequence[EntryDraft],
        rejected: Sequence[EntrySaveResult],
    ) -> BulkSaveReport:
        self._require_editable(actor, ts)

        results: list[EntrySaveResult] = list(rejected)
        for draft in drafts:
            try:
                results.append(self._save_one(ts, draft))
            except DomainError as e:
                results.append(
                    EntrySaveResult.failed(draft.temp_key, e, entry_id=draft.entry_id, position=draft.position)
                )
        results.sort(key=lambda r: r.position)

        report = BulkSaveReport(timesheet=ts, results=results)
        logger.info(
            "timesheet=%s bulk save actor=%s saved=%d failed=%d",
            ts.timesheet_id, actor.user_id, len(results) - len(report.failed), len(report.failed),
        )
        return report

    def _save_one(self, ts: Timesheet, draft: EntryDraft) -> EntrySaveResult:
        fields = draft.fields
        if (fields.work_date.month, fields.work_date.year) != (ts.month, ts.year):
            raise ValidationError(f"date {fields.work_date.isoformat()} is outside {ts.year}-{ts.month:02d}")
        if not self._projects.get_by_id(fields.project_id):
            raise ValidationError(f"Unknown project {fields.project_id}")

        if draft.is_new:
            entry_id = self._entries.create(
                timesheet_id=ts.timesheet_id,
                fields=fields,
                allowed_statuses=EDITABLE_STATUSES,
            )
            if entry_id is None:
                raise ReadOnlyStateError("Timesheet is no longer editable")
            return EntrySaveResult(
                temp_key=draft.temp_key, outcome=CREATED, entry_id=entry_id, position=draft.position
            )

        existing = self._entries.get_by_id(draft.entry_id)
        if not existing or existing.timesheet_id != ts.timesheet_id:
            raise NotFoundError("Entry not found in this timesheet")
        if not fields.differs_from(existing):
            return EntrySaveResult(
                temp_key=draft.temp_key, outcome=UNCHANGED, entry_id=existing.entry_id, position=draft.position
            )

        if not self._entries.update(entry_id=existing.entry_id, fields=fields, allowed_statuses=EDITABLE_STATUSES):
            raise ReadOnlyStateError("Timesheet is no longer editable")
        return EntrySaveResult(
            temp_key=draft.temp_key, outcome=UPDATED, entry_id=existing.entry_id, position=draft.position
        )
