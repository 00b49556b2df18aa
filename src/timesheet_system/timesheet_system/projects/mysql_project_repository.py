from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Project
from .repository import ProjectRepository


def _row_to_project(row: dict) -> Project:
    return Project(
        project_id=str(row["project_id"]),
        name=row["name"],
        owner_id=str(row["owner_id"]),
        code=row.get("code"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id, name, code, owner_id, is_active FROM projects WHERE project_id=%s",
                (str(project_id),),
            )
            row = fetchone(cur)
            return _row_to_project(row) if row else None

    def create(self, *, name: str, owner_id: str, code: Optional[str] = None) -> str:
        project_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO projects (project_id, name, code, owner_id) VALUES (%s, %s, %s, %s)",
                (project_id, name, code, owner_id),
            )
        return project_id

    def list_for_owner(self, owner_id: str) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT project_id, name, code, owner_id, is_active
                FROM projects
                WHERE owner_id=%s
                ORDER BY name
                """,
                (owner_id,),
            )
            return [_row_to_project(r) for r in fetchall(cur)]
