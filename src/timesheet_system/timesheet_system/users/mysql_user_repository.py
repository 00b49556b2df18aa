from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, email, first_name, last_name, role, manager_id, is_active"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        email=row["email"],
        role=Role(row["role"]),
        manager_id=row.get("manager_id"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (str(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        email: str,
        role: Role,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> str:
        user_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users (user_id, email, first_name, last_name, role, manager_id)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (user_id, email, first_name, last_name, role.value, manager_id),
            )
        return user_id

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE role=%s AND is_active=1 ORDER BY email",
                (role.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]
