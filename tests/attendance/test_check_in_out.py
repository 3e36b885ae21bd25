from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from src.attendance_tracker.attendance_tracker.attendance.model import AttendanceRecord
from src.attendance_tracker.attendance_tracker.attendance.service import AttendanceService
from src.attendance_tracker.attendance_tracker.core.enums import AttendanceStatus
from src.attendance_tracker.attendance_tracker.core.exceptions import BadRequestError, ConflictError, NotFoundError


@pytest.fixture
def svc(attendance_repo, users_repo, transaction, clock):
    return AttendanceService(attendance_repo, users_repo, transaction=transaction, clock=clock)


def test_check_in_creates_one_present_record(svc, add_user, attendance_repo, fixed_now):
    alice = add_user("alice")

    view = svc.check_in("alice", now=fixed_now)

    records = attendance_repo.all()
    assert len(records) == 1
    rec = records[0]
    assert rec.user_id == alice.user_id
    assert rec.work_date == fixed_now.date()
    assert rec.check_in_time == time(8, 30)
    assert rec.check_out_time is None
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.worked == timedelta(0)

    assert view.includes_identity is False
    body = view.to_dict()
    assert body["checkInTime"] == "08:30:00"
    assert body["workedHours"] == "00:00"
    assert "username" not in body and "userId" not in body


def test_check_in_twice_fails_and_keeps_state(svc, add_user, attendance_repo, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)
    before = attendance_repo.all()

    with pytest.raises(BadRequestError, match="already checked in"):
        svc.check_in("alice", now=fixed_now + timedelta(hours=1))

    assert attendance_repo.all() == before


def test_check_in_rejected_on_non_working_day(svc, add_user, attendance_repo):
    add_user("alice")

    with pytest.raises(BadRequestError, match="working days"):
        svc.check_in("alice", now=datetime(2026, 2, 5, 9, 0))

    assert attendance_repo.all() == []


def test_check_in_unknown_user(svc):
    with pytest.raises(NotFoundError):
        svc.check_in("ghost")


def test_check_in_uses_clock_once_when_now_not_given(svc, add_user, clock):
    add_user("alice")

    view = svc.check_in("alice")

    assert clock.calls == 1
    assert view.check_in_time == clock.now.time()


def test_check_in_turns_backfilled_absence_into_presence(svc, add_user, attendance_repo, fixed_now):
    alice = add_user("alice")
    attendance_repo.save(
        AttendanceRecord(
            attendance_id=None,
            user_id=alice.user_id,
            work_date=fixed_now.date(),
            check_in_time=None,
            check_out_time=None,
            status=AttendanceStatus.ABSENT,
        )
    )

    svc.check_in("alice", now=fixed_now)

    records = attendance_repo.all()
    assert len(records) == 1
    assert records[0].status == AttendanceStatus.PRESENT
    assert records[0].check_in_time == fixed_now.time()


def test_check_out_requires_check_in(svc, add_user, fixed_now):
    add_user("alice")

    with pytest.raises(BadRequestError, match="Check-in is required before check-out"):
        svc.check_out("alice", now=fixed_now)


def test_check_out_on_absent_record_requires_check_in(svc, add_user, attendance_repo, fixed_now):
    alice = add_user("alice")
    attendance_repo.save(
        AttendanceRecord(
            attendance_id=None,
            user_id=alice.user_id,
            work_date=fixed_now.date(),
            check_in_time=None,
            check_out_time=None,
            status=AttendanceStatus.ABSENT,
        )
    )

    with pytest.raises(BadRequestError, match="Check-in is required before check-out"):
        svc.check_out("alice", now=fixed_now)


def test_check_out_records_exact_worked_duration(svc, add_user, attendance_repo, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)

    view = svc.check_out("alice", now=datetime(2026, 2, 2, 17, 15, 30))

    rec = attendance_repo.all()[0]
    assert rec.check_out_time == time(17, 15, 30)
    assert rec.worked == timedelta(hours=8, minutes=45, seconds=30)
    assert rec.status == AttendanceStatus.PRESENT
    assert view.worked_hours == "08:45"


def test_check_out_at_same_instant_is_zero_duration(svc, add_user, attendance_repo, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)

    svc.check_out("alice", now=fixed_now)

    assert attendance_repo.all()[0].worked == timedelta(0)


def test_check_out_before_check_in_time_fails_and_keeps_record(svc, add_user, attendance_repo, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)
    before = attendance_repo.all()

    with pytest.raises(BadRequestError, match="after check-in"):
        svc.check_out("alice", now=fixed_now - timedelta(minutes=1))

    assert attendance_repo.all() == before


def test_check_out_twice_fails(svc, add_user, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)
    svc.check_out("alice", now=fixed_now + timedelta(hours=8))

    with pytest.raises(BadRequestError, match="already checked out"):
        svc.check_out("alice", now=fixed_now + timedelta(hours=9))


def test_check_out_rejected_on_non_working_day(svc, add_user):
    add_user("alice")

    with pytest.raises(BadRequestError, match="working days"):
        svc.check_out("alice", now=datetime(2026, 2, 6, 17, 0))


def test_each_mutation_runs_in_a_transaction_released_on_failure(svc, add_user, transaction, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)

    with pytest.raises(BadRequestError):
        svc.check_in("alice", now=fixed_now)

    assert transaction.opened == 2
    assert transaction.closed == 2
    assert transaction.rolled_back == 1


def test_check_in_on_another_day_is_independent(svc, add_user, attendance_repo, fixed_now):
    add_user("alice")
    svc.check_in("alice", now=fixed_now)
    svc.check_in("alice", now=fixed_now + timedelta(days=1))

    assert [r.work_date for r in attendance_repo.all()] == [date(2026, 2, 2), date(2026, 2, 3)]


def test_check_in_losing_a_concurrent_insert_raises_conflict(svc, add_user, attendance_repo, transaction):
    add_user("alice")

    def lost_race(record):
        raise ConflictError("Record already exists")

    attendance_repo.get_for_user_and_date = lambda user_id, work_date: None
    attendance_repo.save = lost_race

    with pytest.raises(ConflictError):
        svc.check_in("alice")

    assert transaction.rolled_back == 1
    assert attendance_repo.all() == []
