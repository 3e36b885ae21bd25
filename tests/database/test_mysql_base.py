from datetime import time, timedelta

import mysql.connector
import pytest

from src.attendance_tracker.attendance_tracker.core.exceptions import ConflictError
from src.attendance_tracker.attendance_tracker.database.mysql_base import db_cursor, normalize_mysql_time


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConn:
    def __init__(self):
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self.cur = FakeCursor()

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, pinned=None):
        self.pinned = pinned
        self.opened = []

    def active(self):
        return self.pinned

    def connect(self):
        conn = FakeConn()
        self.opened.append(conn)
        return conn


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        (time(8, 30), time(8, 30)),
        (timedelta(hours=17, minutes=15, seconds=30), time(17, 15, 30)),
        ("09:05", time(9, 5)),
        ("09:05:07.000000", time(9, 5, 7)),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_short_lived_connection_commits_and_closes():
    factory = FakeFactory()

    with db_cursor(factory) as (conn, cur):
        pass

    conn = factory.opened[0]
    assert conn.committed and conn.closed and conn.cur.closed
    assert not conn.rolled_back


def test_duplicate_key_becomes_conflict():
    factory = FakeFactory()

    with pytest.raises(ConflictError, match="Record already exists"):
        with db_cursor(factory):
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062)

    conn = factory.opened[0]
    assert conn.rolled_back and conn.closed
    assert not conn.committed


def test_pinned_connection_is_left_to_the_transaction():
    pinned = FakeConn()
    factory = FakeFactory(pinned=pinned)

    with db_cursor(factory) as (conn, _):
        assert conn is pinned

    assert factory.opened == []
    assert not pinned.committed and not pinned.closed
    assert pinned.cur.closed
