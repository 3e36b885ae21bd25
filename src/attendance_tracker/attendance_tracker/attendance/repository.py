from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store. Implementations must enforce one row per (user_id, work_date)
    and raise ``ConflictError`` when an insert violates it."""

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def exists_for_user_and_date(self, user_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        """All records of one user, newest date first."""

        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """All records, newest date first."""

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError
