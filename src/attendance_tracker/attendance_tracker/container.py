from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, ContextManager, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TOKEN_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .security.token_service import TokenService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import Authenticator, AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    attendance_repo: AttendanceRepository

    token_service: TokenService
    authenticator: Authenticator
    auth_service: AuthService
    attendance_service: AttendanceService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    token_service: TokenService,
    transaction: Optional[Callable[[], ContextManager]] = None,
    clock: Optional[Callable[[], datetime]] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    authenticator = Authenticator(users_repo)
    return Container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        token_service=token_service,
        authenticator=authenticator,
        auth_service=AuthService(users_repo, authenticator, token_service),
        attendance_service=AttendanceService(attendance_repo, users_repo, transaction=transaction, clock=clock),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: Optional[str],
    jwt_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        token_service=TokenService(jwt_secret, ttl_seconds=jwt_ttl_seconds),
        transaction=conn.transaction,
        conn=conn,
    )
