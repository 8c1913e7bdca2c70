from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.student_id, a.attendance_date, a.present, a.marked_by,
           a.subject, a.period, a.created_at, m.name AS marked_by_name
    FROM attendance_records a
    LEFT JOIN users m ON m.user_id = a.marked_by
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        present=bool(r["present"]),
        marked_by=int(r["marked_by"]),
        subject=r.get("subject"),
        period=r.get("period"),
        created_at=r.get("created_at"),
        marked_by_name=r.get("marked_by_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE a.student_id=%s AND a.attendance_date=%s",
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_record(
        self,
        *,
        student_id: int,
        attendance_date: date,
        present: bool,
        marked_by: int,
        subject: Optional[str],
        period: Optional[str],
    ) -> int:
        # uq_attendance_student_day turns a racing duplicate into ConflictError in db_cursor.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, present, marked_by, subject, period)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), attendance_date, 1 if present else 0, int(marked_by), subject, period),
            )
            return int(cur.lastrowid)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_student(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["a.student_id=%s"]
        params: list[object] = [int(student_id)]
        if start_date is not None:
            clauses.append("a.attendance_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.attendance_date <= %s")
            params.append(end_date)
        if subject:
            clauses.append("a.subject=%s")
            params.append(subject)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {build_where(clauses)} ORDER BY a.attendance_date DESC, a.attendance_id DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def summarize_student(self, student_id: int) -> tuple[int, int, Optional[date]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total_days,
                       COALESCE(SUM(present), 0) AS present_days,
                       MAX(attendance_date) AS last_attendance
                FROM attendance_records
                WHERE student_id=%s
                """,
                (int(student_id),),
            )
            row = fetchone(cur) or {}
            return (
                int(row.get("total_days") or 0),
                int(row.get("present_days") or 0),
                row.get("last_attendance"),
            )
