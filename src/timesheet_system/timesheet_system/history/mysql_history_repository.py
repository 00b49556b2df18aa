from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import HistoryAction, TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ApprovalHistoryEntry, NewHistoryEntry
from .repository import HistoryRepository


def insert_history(cur, entry: NewHistoryEntry) -> int:
    """Insert a ledger row on an already-open cursor (caller owns the transaction)."""
    cur.execute(
        """
        INSERT INTO approval_history
            (timesheet_id, action, from_status, to_status, comment, actor_id, timestamp)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        """,
        (
            entry.timesheet_id,
            entry.action.value,
            entry.from_status.value if entry.from_status else None,
            entry.to_status.value if entry.to_status else None,
            entry.comment,
            entry.actor_id,
            entry.timestamp,
        ),
    )
    return int(cur.lastrowid)


def _row_to_entry(row: dict) -> ApprovalHistoryEntry:
    return ApprovalHistoryEntry(
        history_id=int(row["history_id"]),
        timesheet_id=str(row["timesheet_id"]),
        action=HistoryAction(row["action"]),
        actor_id=str(row["actor_id"]),
        timestamp=row["timestamp"],
        from_status=TimesheetStatus(row["from_status"]) if row.get("from_status") else None,
        to_status=TimesheetStatus(row["to_status"]) if row.get("to_status") else None,
        comment=row.get("comment"),
    )


class MySQLHistoryRepository(HistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: NewHistoryEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_history(cur, entry)

    def list_for_timesheet(
        self,
        timesheet_id: str,
        *,
        action: Optional[HistoryAction] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[ApprovalHistoryEntry]:
        clauses = ["timesheet_id=%s"]
        params: list[object] = [timesheet_id]
        if action is not None:
            clauses.append("action=%s")
            params.append(action.value)

        sql = f"""
            SELECT history_id, timesheet_id, action, from_status, to_status, comment, actor_id, timestamp
            FROM approval_history
            WHERE {" AND ".join(clauses)}
            ORDER BY timestamp ASC, history_id ASC
        """
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_entry(r) for r in fetchall(cur)]

    def count_for_timesheet(self, timesheet_id: str, *, action: Optional[HistoryAction] = None) -> int:
        sql = "SELECT COUNT(*) AS n FROM approval_history WHERE timesheet_id=%s"
        params: list[object] = [timesheet_id]
        if action is not None:
            sql += " AND action=%s"
            params.append(action.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def last_timestamp(self, timesheet_id: str) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT MAX(timestamp) AS ts FROM approval_history WHERE timesheet_id=%s",
                (timesheet_id,),
            )
            row = fetchone(cur)
            return row["ts"] if row else None
