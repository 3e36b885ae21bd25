"""Working-day policy.

The working week is Saturday through Wednesday; Thursday and Friday are the
weekend. The set is fixed rather than derived from a locale.
"""

from __future__ import annotations

from datetime import date, timedelta

# date.weekday(): Monday=0 ... Sunday=6
WORKING_WEEKDAYS = frozenset({5, 6, 0, 1, 2})


def is_working_day(day: date) -> bool:
    return day.weekday() in WORKING_WEEKDAYS


def previous_working_day(day: date) -> date:
    """Closest working day strictly before ``day``."""
    cursor = day - timedelta(days=1)
    while not is_working_day(cursor):
        cursor -= timedelta(days=1)
    return cursor
