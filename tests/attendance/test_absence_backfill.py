from __future__ import annotations

from datetime import date, datetime

import pytest

from src.attendance_tracker.attendance_tracker.attendance.scheduler import JOB_ID, AbsenceBackfillScheduler
from src.attendance_tracker.attendance_tracker.attendance.service import AttendanceService
from src.attendance_tracker.attendance_tracker.core.enums import AttendanceStatus
from src.attendance_tracker.attendance_tracker.core.exceptions import ConflictError

MONDAY = date(2026, 2, 2)
THURSDAY = date(2026, 2, 5)


@pytest.fixture
def svc(attendance_repo, users_repo, transaction):
    return AttendanceService(attendance_repo, users_repo, transaction=transaction)


def test_marks_users_without_a_record(svc, add_user, attendance_repo):
    add_user("alice")
    bob = add_user("bob")
    svc.check_in("alice", now=datetime(2026, 2, 2, 9, 0))

    created = svc.mark_absent_for_date(MONDAY)

    assert created == 1
    absent = [r for r in attendance_repo.all() if r.status == AttendanceStatus.ABSENT]
    assert len(absent) == 1
    assert absent[0].user_id == bob.user_id
    assert absent[0].check_in_time is None and absent[0].check_out_time is None
    assert absent[0].worked.total_seconds() == 0


def test_running_twice_changes_nothing(svc, add_user, attendance_repo):
    add_user("alice")
    add_user("bob")

    svc.mark_absent_for_date(MONDAY)
    first = attendance_repo.all()
    created_again = svc.mark_absent_for_date(MONDAY)

    assert created_again == 0
    assert attendance_repo.all() == first


def test_non_working_day_creates_nothing(svc, add_user, attendance_repo, transaction):
    add_user("alice")

    assert svc.mark_absent_for_date(THURSDAY) == 0
    assert attendance_repo.all() == []
    assert transaction.opened == 0


def test_uniqueness_conflict_skips_user_and_keeps_going(svc, add_user, attendance_repo, transaction):
    alice = add_user("alice")
    bob = add_user("bob")
    real_save = attendance_repo.save

    def racing_save(record):
        if record.user_id == alice.user_id:
            raise ConflictError("Record already exists")
        return real_save(record)

    attendance_repo.save = racing_save

    created = svc.mark_absent_for_date(MONDAY)

    assert created == 1
    assert [r.user_id for r in attendance_repo.all()] == [bob.user_id]
    assert transaction.rolled_back == 1
    assert transaction.opened == transaction.closed == 2


class FakeService:
    def __init__(self):
        self.dates = []

    def mark_absent_for_date(self, work_date):
        self.dates.append(work_date)
        return 3


class FakeScheduler:
    def __init__(self):
        self.jobs = []
        self.running = False

    def add_job(self, func, trigger, **kwargs):
        self.jobs.append((func, trigger, kwargs))

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False


def test_scheduler_targets_previous_calendar_day():
    service = FakeService()
    job = AbsenceBackfillScheduler(service, scheduler=FakeScheduler(), today=lambda: date(2026, 2, 6))

    assert job.run_once() == 3
    # Thursday is passed through; the service decides it is not a working day.
    assert service.dates == [date(2026, 2, 5)]


def test_scheduler_registers_daily_cron_job():
    fake = FakeScheduler()
    job = AbsenceBackfillScheduler(FakeService(), scheduler=fake)

    job.start()

    func, trigger, kwargs = fake.jobs[0]
    assert trigger == "cron"
    assert (kwargs["hour"], kwargs["minute"]) == (0, 5)
    assert kwargs["id"] == JOB_ID
    assert fake.running

    job.shutdown()
    assert not fake.running
