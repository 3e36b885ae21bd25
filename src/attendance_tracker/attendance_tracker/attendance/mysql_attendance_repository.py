from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, work_date, check_in_time, check_out_time, worked_seconds, status"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=normalize_mysql_time(r.get("check_in_time")),
        check_out_time=normalize_mysql_time(r.get("check_out_time")),
        worked=timedelta(seconds=int(r.get("worked_seconds") or 0)),
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def exists_for_user_and_date(self, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM attendance_records WHERE user_id=%s AND work_date=%s LIMIT 1",
                (int(user_id), work_date),
            )
            return fetchone(cur) is not None

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY work_date DESC
                """,
                (int(user_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                ORDER BY work_date DESC, user_id ASC
                """
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        worked_seconds = int(record.worked.total_seconds()) if record.worked else 0
        with db_cursor(self._conn_factory) as (_, cur):
            if record.attendance_id is None:
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, check_in_time, check_out_time, worked_seconds, status)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.user_id),
                        record.work_date,
                        record.check_in_time,
                        record.check_out_time,
                        worked_seconds,
                        record.status.value,
                    ),
                )
                return replace(record, attendance_id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, worked_seconds=%s, status=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in_time,
                    record.check_out_time,
                    worked_seconds,
                    record.status.value,
                    int(record.attendance_id),
                ),
            )
            return record
