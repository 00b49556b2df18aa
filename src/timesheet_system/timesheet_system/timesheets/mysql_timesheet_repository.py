from __future__ import annotations

import uuid
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..history.model import NewHistoryEntry
from ..history.mysql_history_repository import insert_history
from .model import Timesheet
from .repository import TimesheetRepository

_COLUMNS = """
    timesheet_id, user_id, month, year, status,
    submit_date, approve_date, finished_date, comment, current_approver_id
"""


def _row_to_timesheet(row: dict) -> Timesheet:
    return Timesheet(
        timesheet_id=str(row["timesheet_id"]),
        user_id=str(row["user_id"]),
        month=int(row["month"]),
        year=int(row["year"]),
        status=TimesheetStatus(row["status"]),
        submit_date=row.get("submit_date"),
        approve_date=row.get("approve_date"),
        finished_date=row.get("finished_date"),
        comment=row.get("comment"),
        current_approver_id=row.get("current_approver_id"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, timesheet_id: str) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE timesheet_id=%s", (str(timesheet_id),))
            row = fetchone(cur)
            return _row_to_timesheet(row) if row else None

    def get_by_period(self, *, user_id: str, month: int, year: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM timesheets WHERE user_id=%s AND month=%s AND year=%s",
                (user_id, int(month), int(year)),
            )
            row = fetchone(cur)
            return _row_to_timesheet(row) if row else None

    def get_or_create(self, *, user_id: str, month: int, year: int) -> Timesheet:
        existing = self.get_by_period(user_id=user_id, month=month, year=year)
        if existing:
            return existing

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO timesheets (timesheet_id, user_id, month, year, status)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (str(uuid.uuid4()), user_id, int(month), int(year), TimesheetStatus.DRAFT.value),
                )
        except mysql_errors.IntegrityError:
            # Lost the race on uq_timesheets_period; the winner's row is the one.
            pass

        created = self.get_by_period(user_id=user_id, month=month, year=year)
        if created is None:
            raise RuntimeError("Timesheet insert did not persist")
        return created

    def list_visible(self, *, user_id: str) -> Sequence[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM timesheets
                WHERE user_id=%s OR current_approver_id=%s
                ORDER BY year DESC, month DESC
                """,
                (user_id, user_id),
            )
            return [_row_to_timesheet(r) for r in fetchall(cur)]

    def list_for_approver(
        self,
        *,
        approver_id: str,
        include_status: Optional[TimesheetStatus] = None,
        limit: int = 500,
    ) -> Sequence[Timesheet]:
        where = "current_approver_id=%s"
        params: list[object] = [approver_id]
        if include_status is not None:
            where = f"({where} OR status=%s)"
            params.append(include_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM timesheets
                WHERE {where}
                ORDER BY submit_date DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_timesheet(r) for r in fetchall(cur)]

    def apply_transition(
        self,
        *,
        expected_status: TimesheetStatus,
        updated: Timesheet,
        history: NewHistoryEntry,
    ) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (conn, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, submit_date=%s, approve_date=%s, finished_date=%s,
                    comment=%s, current_approver_id=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (
                    updated.status.value,
                    updated.submit_date,
                    updated.approve_date,
                    updated.finished_date,
                    updated.comment,
                    updated.current_approver_id,
                    updated.timesheet_id,
                    expected_status.value,
                ),
            )
            if cur.rowcount != 1:
                conn.rollback()
                return None
            insert_history(cur, history)
        return updated
