from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Optional

from ..common.datetime_utils import format_duration
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance on one date.

    ``attendance_id`` is None until saved. An ABSENT record never carries
    check-in or check-out times.
    """

    attendance_id: Optional[int]
    user_id: int
    work_date: date
    check_in_time: Optional[time]
    check_out_time: Optional[time]
    status: AttendanceStatus
    worked: timedelta = timedelta(0)


@dataclass(frozen=True)
class AttendanceRecordView:
    """Read model returned to API callers."""

    attendance_id: int
    work_date: date
    check_in_time: Optional[time]
    check_out_time: Optional[time]
    worked_hours: str
    status: AttendanceStatus
    user_id: Optional[int] = None
    username: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def includes_identity(self) -> bool:
        return self.username is not None

    def to_dict(self) -> dict:
        out = {
            "id": self.attendance_id,
            "date": self.work_date.isoformat(),
            "checkInTime": self.check_in_time.strftime("%H:%M:%S") if self.check_in_time else None,
            "checkOutTime": self.check_out_time.strftime("%H:%M:%S") if self.check_out_time else None,
            "workedHours": self.worked_hours,
            "status": self.status.value,
        }
        if self.includes_identity:
            out["userId"] = self.user_id
            out["username"] = self.username
            out["fullName"] = self.full_name
        return out


@dataclass(frozen=True)
class AttendanceSummary:
    present_days: int
    absent_days: int
    total_worked: timedelta

    @property
    def total_worked_hours(self) -> str:
        return format_duration(self.total_worked)

    def to_dict(self) -> dict:
        return {
            "totalWorkedHours": self.total_worked_hours,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
        }
