from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..access.scope import ScopeFilter
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT r.request_id, r.student_id, r.leave_type, r.reason, r.start_date, r.end_date,
           r.status, r.dept, r.hostel, r.days, r.created_at, r.updated_at,
           r.approved_by, r.remarks, u.name AS student_name
    FROM leave_requests r
    JOIN users u ON u.user_id = r.student_id
"""

_OVERLAP = "r.student_id=%s AND r.status IN ({statuses}) AND r.start_date <= %s AND r.end_date >= %s"


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        leave_type=LeaveType(r["leave_type"]),
        reason=r["reason"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=LeaveStatus(r["status"]),
        dept=r["dept"],
        hostel=r.get("hostel"),
        days=int(r["days"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        approved_by=r.get("approved_by"),
        remarks=r.get("remarks"),
        student_name=r.get("student_name"),
    )


def _overlap_clause(statuses: Iterable[LeaveStatus]) -> tuple[str, list[str]]:
    values = [s.value for s in statuses]
    return _OVERLAP.format(statuses=",".join(["%s"] * len(values))), values


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_leave(
        self,
        *,
        student_id: int,
        leave_type: LeaveType,
        reason: str,
        start_date: date,
        end_date: date,
        dept: str,
        hostel: Optional[str],
        days: int,
    ) -> int:
        clause, statuses = _overlap_clause((LeaveStatus.PENDING, LeaveStatus.APPROVED))
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the student serialises concurrent submissions for that student.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (int(student_id),))
            fetchone(cur)

            cur.execute(
                f"SELECT r.request_id FROM leave_requests r WHERE {clause} LIMIT 1",
                tuple([int(student_id)] + statuses + [end_date, start_date]),
            )
            if fetchone(cur):
                raise ConflictError("You already have a leave request for this period")

            cur.execute(
                """
                INSERT INTO leave_requests(
                    student_id, leave_type, reason, start_date, end_date, status, dept, hostel, days
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    leave_type.value,
                    reason,
                    start_date,
                    end_date,
                    LeaveStatus.PENDING.value,
                    dept,
                    hostel,
                    int(days),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_overlapping(
        self,
        *,
        student_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        clause, values = _overlap_clause(statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {clause} ORDER BY r.start_date",
                tuple([int(student_id)] + values + [end_date, start_date]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    @staticmethod
    def _filters(
        scope: ScopeFilter,
        status: Optional[LeaveStatus],
        leave_type: Optional[LeaveType],
    ) -> tuple[str, list[object]]:
        clauses: list[str] = []
        params: list[object] = []

        if scope.deny_all:
            clauses.append("1=0")
        if scope.student_id is not None:
            clauses.append("r.student_id=%s")
            params.append(int(scope.student_id))
        if scope.dept is not None:
            clauses.append("r.dept=%s")
            params.append(scope.dept)
        if scope.hostel is not None:
            clauses.append("r.hostel=%s")
            params.append(scope.hostel)
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if leave_type is not None:
            clauses.append("r.leave_type=%s")
            params.append(leave_type.value)

        return build_where(clauses), params

    def list_leaves(
        self,
        *,
        scope: ScopeFilter,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        where, params = self._filters(scope, status, leave_type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY r.created_at DESC, r.request_id DESC LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def count_leaves(
        self,
        *,
        scope: ScopeFilter,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> int:
        where, params = self._filters(scope, status, leave_type)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM leave_requests r WHERE {where}", tuple(params))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def decide_leave(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, remarks=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), remarks, int(request_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def find_approved_covering(self, *, student_id: int, day: date) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE r.student_id=%s AND r.status=%s AND r.start_date <= %s AND r.end_date >= %s
                ORDER BY r.start_date
                LIMIT 1
                """,
                (int(student_id), LeaveStatus.APPROVED.value, day, day),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_approved_starting_on(self, day: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE r.status=%s AND r.start_date=%s ORDER BY r.request_id",
                (LeaveStatus.APPROVED.value, day),
            )
            return [_to_leave(r) for r in fetchall(cur)]
