from __future__ import annotations

import uuid
from datetime import datetime
from typing import Collection, Mapping, Optional, Sequence

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from ..history.model import NewHistoryEntry
from ..history.mysql_history_repository import insert_history
from .model import EntryFields, TimesheetEntry
from .repository import EntryRepository

_COLUMNS = """
    e.entry_id, e.timesheet_id, e.work_date, e.project_id, e.task_id,
    e.logged_hours, e.approved_hours, e.description,
    e.hours_modified_by, e.hours_modified_at
"""


def _row_to_entry(row: dict) -> TimesheetEntry:
    return TimesheetEntry(
        entry_id=str(row["entry_id"]),
        timesheet_id=str(row["timesheet_id"]),
        work_date=row["work_date"],
        project_id=str(row["project_id"]),
        task_id=row.get("task_id"),
        logged_hours=as_float(row["logged_hours"]) or 0.0,
        approved_hours=as_float(row.get("approved_hours")),
        description=row.get("description"),
        hours_modified_by=row.get("hours_modified_by"),
        hours_modified_at=row.get("hours_modified_at"),
    )


def _status_placeholders(statuses: Collection[TimesheetStatus]) -> tuple[str, tuple]:
    values = tuple(s.value for s in statuses)
    if not values:
        raise ValueError("allowed_statuses must not be empty")
    return ",".join(["%s"] * len(values)), values


class MySQLEntryRepository(EntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: str) -> Optional[TimesheetEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheet_entries e WHERE e.entry_id=%s", (str(entry_id),))
            row = fetchone(cur)
            return _row_to_entry(row) if row else None

    def list_for_timesheet(self, timesheet_id: str) -> Sequence[TimesheetEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM timesheet_entries e
                WHERE e.timesheet_id=%s
                ORDER BY e.work_date, e.entry_id
                """,
                (str(timesheet_id),),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def count_for_timesheet(self, timesheet_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM timesheet_entries WHERE timesheet_id=%s", (str(timesheet_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def totals_for_timesheets(self, timesheet_ids: Collection[str]) -> Mapping[str, tuple[float, float]]:
        ids = [str(i) for i in timesheet_ids]
        if not ids:
            return {}
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT timesheet_id,
                       COALESCE(SUM(logged_hours), 0) AS logged,
                       COALESCE(SUM(COALESCE(approved_hours, logged_hours)), 0) AS approved
                FROM timesheet_entries
                WHERE timesheet_id IN ({placeholders})
                GROUP BY timesheet_id
                """,
                tuple(ids),
            )
            return {str(r["timesheet_id"]): (as_float(r["logged"]), as_float(r["approved"])) for r in fetchall(cur)}

    def create(
        self,
        *,
        timesheet_id: str,
        fields: EntryFields,
        allowed_statuses: Collection[TimesheetStatus],
    ) -> Optional[str]:
        placeholders, statuses = _status_placeholders(allowed_statuses)
        entry_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO timesheet_entries
                    (entry_id, timesheet_id, work_date, project_id, task_id, logged_hours, description)
                SELECT %s, t.timesheet_id, %s, %s, %s, %s, %s
                FROM timesheets t
                WHERE t.timesheet_id=%s AND t.status IN ({placeholders})
                """,
                (
                    entry_id,
                    fields.work_date,
                    fields.project_id,
                    fields.task_id,
                    fields.logged_hours,
                    fields.description,
                    str(timesheet_id),
                )
                + statuses,
            )
            if cur.rowcount != 1:
                return None
        return entry_id

    def update(
        self,
        *,
        entry_id: str,
        fields: EntryFields,
        allowed_statuses: Collection[TimesheetStatus],
    ) -> bool:
        placeholders, statuses = _status_placeholders(allowed_statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE timesheet_entries e
                JOIN timesheets t ON t.timesheet_id = e.timesheet_id
                SET e.work_date=%s, e.project_id=%s, e.task_id=%s, e.logged_hours=%s, e.description=%s
                WHERE e.entry_id=%s AND t.status IN ({placeholders})
                """,
                (
                    fields.work_date,
                    fields.project_id,
                    fields.task_id,
                    fields.logged_hours,
                    fields.description,
                    str(entry_id),
                )
                + statuses,
            )
            # MySQL reports 0 affected rows for a no-op update; the caller skips unchanged rows.
            return cur.rowcount == 1

    def delete(self, *, entry_id: str, allowed_statuses: Collection[TimesheetStatus]) -> bool:
        placeholders, statuses = _status_placeholders(allowed_statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                DELETE e FROM timesheet_entries e
                JOIN timesheets t ON t.timesheet_id = e.timesheet_id
                WHERE e.entry_id=%s AND t.status IN ({placeholders})
                """,
                (str(entry_id),) + statuses,
            )
            return cur.rowcount == 1

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
        with db_cursor(self._conn_factory) as (conn, cur):
            # Row lock on the parent serialises this against a concurrent transition.
            cur.execute(
                "SELECT status FROM timesheets WHERE timesheet_id=%s FOR UPDATE",
                (history.timesheet_id,),
            )
            row = fetchone(cur)
            if not row or row["status"] != expected_status.value:
                conn.rollback()
                return False

            cur.execute(
                """
                UPDATE timesheet_entries
                SET approved_hours=%s, hours_modified_by=%s, hours_modified_at=%s
                WHERE entry_id=%s AND timesheet_id=%s
                """,
                (approved_hours, modified_by, modified_at, str(entry_id), history.timesheet_id),
            )
            if cur.rowcount != 1:
                conn.rollback()
                return False
            insert_history(cur, history)
        return True
