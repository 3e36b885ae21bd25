from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, username, password_hash, full_name, role"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        full_name=row["full_name"],
        role=Role(row["role"]),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def exists_by_username(self, username: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM users WHERE username=%s LIMIT 1", (username,))
            return fetchone(cur) is not None

    def save(self, user: User) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            if user.user_id is None:
                cur.execute(
                    """
                    INSERT INTO users(username, password_hash, full_name, role)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (user.username, user.password_hash, user.full_name, user.role.value),
                )
                return replace(user, user_id=int(cur.lastrowid))

            # username is immutable once created
            cur.execute(
                """
                UPDATE users
                SET password_hash=%s, full_name=%s, role=%s
                WHERE user_id=%s
                """,
                (user.password_hash, user.full_name, user.role.value, int(user.user_id)),
            )
            return user

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id")
            return [_to_user(r) for r in fetchall(cur)]
