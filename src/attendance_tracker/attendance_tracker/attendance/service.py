from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, ContextManager, Optional

from ..common.datetime_utils import format_duration, now_local
from ..common.working_days import is_working_day
from ..core.enums import AttendanceStatus
from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceRecordView, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Check-in/check-out per user per day, history, summaries and absence backfill.

    ``transaction`` returns a context manager scoping each read-modify-write
    sequence; ``clock`` is read once per operation.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        transaction: Optional[Callable[[], ContextManager]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._transaction = transaction or nullcontext
        self._clock = clock or now_local

    def check_in(self, username: str, *, now: datetime | None = None) -> AttendanceRecordView:
        now = now or self._clock()
        today = now.date()

        with self._transaction():
            user = self._get_user_by_username(username)
            if not is_working_day(today):
                raise BadRequestError("Check-in is allowed only on working days")

            record = self._attendance.get_for_user_and_date(user.user_id, today)
            if record is None:
                record = AttendanceRecord(
                    attendance_id=None,
                    user_id=user.user_id,
                    work_date=today,
                    check_in_time=None,
                    check_out_time=None,
                    status=AttendanceStatus.PRESENT,
                )

            if record.check_in_time is not None:
                raise BadRequestError("You have already checked in today")

            saved = self._attendance.save(
                replace(
                    record,
                    check_in_time=now.time(),
                    status=AttendanceStatus.PRESENT,
                    worked=record.worked or timedelta(0),
                )
            )

        logger.info("User %s checked in on %s at %s", username, today, saved.check_in_time)
        return self._to_view(saved)

    def check_out(self, username: str, *, now: datetime | None = None) -> AttendanceRecordView:
        now = now or self._clock()
        today = now.date()
        current = now.time()

        with self._transaction():
            user = self._get_user_by_username(username)
            if not is_working_day(today):
                raise BadRequestError("Check-out is allowed only on working days")

            record = self._attendance.get_for_user_and_date(user.user_id, today)
            if record is None or record.check_in_time is None:
                raise BadRequestError("Check-in is required before check-out")
            if record.check_out_time is not None:
                raise BadRequestError("You have already checked out today")
            if current < record.check_in_time:
                raise BadRequestError("Check-out time must be after check-in time")

            worked = datetime.combine(today, current) - datetime.combine(today, record.check_in_time)
            saved = self._attendance.save(
                replace(record, check_out_time=current, worked=worked, status=AttendanceStatus.PRESENT)
            )

        logger.info("User %s checked out on %s after %s", username, today, format_duration(worked))
        return self._to_view(saved)

    def get_my_records(self, username: str) -> list[AttendanceRecordView]:
        user = self._get_user_by_username(username)
        return [self._to_view(r) for r in self._attendance.list_for_user(user.user_id)]

    def get_my_summary(self, username: str) -> AttendanceSummary:
        user = self._get_user_by_username(username)
        records = self._attendance.list_for_user(user.user_id)

        present = [r for r in records if r.status == AttendanceStatus.PRESENT]
        absent_days = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        total = sum((r.worked for r in present if r.worked is not None), timedelta(0))

        return AttendanceSummary(present_days=len(present), absent_days=absent_days, total_worked=total)

    def get_all_records(self) -> list[AttendanceRecordView]:
        users_by_id = {u.user_id: u for u in self._users.list_all()}
        return [self._to_view(r, users_by_id.get(r.user_id)) for r in self._attendance.list_all()]

    def get_records_by_user_id(self, user_id: int) -> list[AttendanceRecordView]:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return [self._to_view(r, user) for r in self._attendance.list_for_user(user.user_id)]

    def mark_absent_for_date(self, work_date: date) -> int:
        """Create ABSENT rows for users with no record on ``work_date``.

        Idempotent; returns the number of rows created. Non-working days are skipped.
        """
        if not is_working_day(work_date):
            logger.info("Skipping absence backfill for non-working day %s", work_date)
            return 0

        created = 0
        for user in self._users.list_all():
            if self._mark_absent(user, work_date):
                created += 1

        logger.info("Absence backfill for %s created %d record(s)", work_date, created)
        return created

    def _mark_absent(self, user: User, work_date: date) -> bool:
        try:
            with self._transaction():
                if self._attendance.exists_for_user_and_date(user.user_id, work_date):
                    return False
                self._attendance.save(
                    AttendanceRecord(
                        attendance_id=None,
                        user_id=user.user_id,
                        work_date=work_date,
                        check_in_time=None,
                        check_out_time=None,
                        status=AttendanceStatus.ABSENT,
                    )
                )
        except ConflictError:
            # A concurrent check-in or backfill created the row first.
            logger.info("Attendance for %s on %s already exists, left unchanged", user.username, work_date)
            return False
        return True

    def _get_user_by_username(self, username: str) -> User:
        user = self._users.get_by_username(username)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _to_view(self, record: AttendanceRecord, user: Optional[User] = None) -> AttendanceRecordView:
        view = AttendanceRecordView(
            attendance_id=record.attendance_id,
            work_date=record.work_date,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            worked_hours=format_duration(record.worked),
            status=record.status,
        )
        if user is None:
            return view
        return replace(view, user_id=user.user_id, username=user.username, full_name=user.full_name)
