from datetime import date

import pytest

from src.attendance_tracker.attendance_tracker.common.working_days import is_working_day, previous_working_day


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2026, 1, 31), True),  # Saturday
        (date(2026, 2, 1), True),  # Sunday
        (date(2026, 2, 2), True),  # Monday
        (date(2026, 2, 3), True),  # Tuesday
        (date(2026, 2, 4), True),  # Wednesday
        (date(2026, 2, 5), False),  # Thursday
        (date(2026, 2, 6), False),  # Friday
    ],
)
def test_working_week_is_saturday_to_wednesday(day, expected):
    assert is_working_day(day) is expected


def test_previous_working_day_skips_thursday_and_friday():
    assert previous_working_day(date(2026, 2, 7)) == date(2026, 2, 4)


def test_previous_working_day_is_strictly_before():
    assert previous_working_day(date(2026, 2, 2)) == date(2026, 2, 1)
