from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_tracker.attendance_tracker.attendance.model import AttendanceRecord
from src.attendance_tracker.attendance_tracker.container import assemble
from src.attendance_tracker.attendance_tracker.core.enums import Role
from src.attendance_tracker.attendance_tracker.core.exceptions import ConflictError
from src.attendance_tracker.attendance_tracker.main import create_app
from src.attendance_tracker.attendance_tracker.security.token_service import TokenService
from src.attendance_tracker.attendance_tracker.users.model import User

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"


class InMemoryUsers:
    def __init__(self):
        self._by_id: dict[int, User] = {}
        self._next_id = 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.username == username), None)

    def exists_by_username(self, username: str) -> bool:
        return self.get_by_username(username) is not None

    def save(self, user: User) -> User:
        if user.user_id is None:
            if self.exists_by_username(user.username):
                raise ConflictError("Record already exists")
            user = replace(user, user_id=self._next_id)
            self._next_id += 1
        self._by_id[user.user_id] = user
        return user

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: u.user_id)


class InMemoryAttendance:
    """Enforces one record per (user_id, work_date) like the UNIQUE constraint."""

    def __init__(self):
        self._by_id: dict[int, AttendanceRecord] = {}
        self._next_id = 1
        self.saves = 0

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next((r for r in self._by_id.values() if r.user_id == user_id and r.work_date == work_date), None)

    def exists_for_user_and_date(self, user_id: int, work_date: date) -> bool:
        return self.get_for_user_and_date(user_id, work_date) is not None

    def list_for_user(self, user_id: int):
        return sorted((r for r in self._by_id.values() if r.user_id == user_id), key=lambda r: r.work_date, reverse=True)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda r: (r.work_date, -r.user_id), reverse=True)

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        self.saves += 1
        if record.attendance_id is None:
            if self.exists_for_user_and_date(record.user_id, record.work_date):
                raise ConflictError("Record already exists")
            record = replace(record, attendance_id=self._next_id)
            self._next_id += 1
        self._by_id[record.attendance_id] = record
        return record

    def all(self) -> list[AttendanceRecord]:
        return sorted(self._by_id.values(), key=lambda r: r.attendance_id)


class RecordingTransaction:
    """Transaction factory that counts scopes and rollbacks."""

    def __init__(self):
        self.opened = 0
        self.closed = 0
        self.rolled_back = 0

    @contextmanager
    def __call__(self):
        self.opened += 1
        try:
            yield self
        except Exception:
            self.rolled_back += 1
            raise
        finally:
            self.closed += 1


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 30, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def transaction() -> RecordingTransaction:
    return RecordingTransaction()


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def add_user(users_repo):
    def _add(username: str, *, password: str = "secret1", role: Role = Role.EMPLOYEE, full_name: Optional[str] = None) -> User:
        return users_repo.save(
            User(
                user_id=None,
                username=username,
                password_hash=generate_password_hash(password),
                full_name=full_name or username.title(),
                role=role,
            )
        )

    return _add


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(JWT_SECRET, ttl_seconds=3600)


@pytest.fixture
def container(users_repo, attendance_repo, token_service, transaction, clock):
    return assemble(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        token_service=token_service,
        transaction=transaction,
        clock=clock,
    )


@pytest.fixture
def app(container):
    return create_app(settings_module="config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()
