from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..access.scope import Actor, ScopeResolver, ScopeTarget
from ..common.validators import FieldErrors
from ..core.constants import PERIOD_MAX_LENGTH, SUBJECT_MAX_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord, AttendanceStats, DepartmentStats
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def attendance_percentage(present_days: int, total_days: int) -> float:
    if total_days <= 0:
        return 0.0
    return round(present_days * 100.0 / total_days, 2)


class AttendanceService:
    """Daily presence ledger with leave cross-checking.

    One record per (student, day). Marking a student present on a day covered
    by an approved leave is refused; marking them absent is allowed.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        leaves: LeaveRepository,
        scope: ScopeResolver,
    ):
        self._attendance = attendance
        self._users = users
        self._leaves = leaves
        self._scope = scope

    def mark(
        self,
        marker: Actor,
        *,
        student_id: int,
        attendance_date: date,
        present: bool,
        subject: Optional[str] = None,
        period: Optional[str] = None,
    ) -> AttendanceRecord:
        if marker.role != Role.FACULTY:
            raise AuthorizationError("Only faculty can mark attendance")

        errors = FieldErrors()
        subject = errors.optional_text(subject, "subject", max_len=SUBJECT_MAX_LENGTH)
        period = errors.optional_text(period, "period", max_len=PERIOD_MAX_LENGTH)
        errors.raise_if_any()

        student = self._users.get_by_id(int(student_id))
        if not student or student.role != Role.STUDENT:
            raise NotFoundError("Student not found")

        if self._attendance.get_for_student_and_date(student.user_id, attendance_date):
            raise ConflictError("Attendance already marked for this date")

        leave = self._leaves.find_approved_covering(student_id=student.user_id, day=attendance_date)
        if leave and present:
            raise ConflictError(
                "Student has approved leave for this date",
                details={
                    "leave_details": {
                        "leave_type": leave.leave_type.value,
                        "reason": leave.reason,
                        "start_date": leave.start_date.isoformat(),
                        "end_date": leave.end_date.isoformat(),
                    }
                },
            )

        attendance_id = self._attendance.create_record(
            student_id=student.user_id,
            attendance_date=attendance_date,
            present=bool(present),
            marked_by=marker.user_id,
            subject=subject,
            period=period,
        )
        logger.info(
            "Attendance %s marked for student_id=%s on %s (present=%s) by user_id=%s",
            attendance_id,
            student.user_id,
            attendance_date,
            present,
            marker.user_id,
        )
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def view(
        self,
        actor: Actor,
        *,
        student_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError(
                "end_date must not be before start_date",
                fields={"end_date": "end_date must not be before start_date"},
            )
        student = self._target_student(actor, student_id)
        return self._attendance.list_for_student(
            student.user_id,
            start_date=start_date,
            end_date=end_date,
            subject=(subject or "").strip() or None,
        )

    def stats(self, actor: Actor, *, student_id: Optional[int] = None) -> AttendanceStats:
        return self._stats_for(self._target_student(actor, student_id))

    def department_stats(self, actor: Actor, *, department: Optional[str] = None) -> DepartmentStats:
        if actor.role == Role.FACULTY:
            dept = actor.dept
        elif actor.role == Role.ADMIN:
            dept = (department or "").strip()
            if not dept:
                raise ValidationError(
                    "department parameter is required", fields={"department": "department is required"}
                )
        else:
            raise AuthorizationError("Access denied")

        if not dept:
            return DepartmentStats(department="", students=[])

        students = self._users.list_students_in_department(dept)
        return DepartmentStats(department=dept, students=[self._stats_for(s) for s in students])

    def _stats_for(self, student: User) -> AttendanceStats:
        total, present, last = self._attendance.summarize_student(student.user_id)
        return AttendanceStats(
            student_id=student.user_id,
            student_name=student.name,
            total_days=total,
            present_days=present,
            absent_days=total - present,
            attendance_percentage=attendance_percentage(present, total),
            last_attendance=last,
        )

    def _target_student(self, actor: Actor, student_id: Optional[int]) -> User:
        if actor.role == Role.STUDENT:
            if student_id is not None and int(student_id) != int(actor.user_id):
                raise AuthorizationError("Students can only view their own attendance")
            student_id = actor.user_id
        elif student_id is None:
            raise ValidationError("student_id is required", fields={"student_id": "student_id is required"})

        student = self._users.get_by_id(int(student_id))
        if not student or student.role != Role.STUDENT:
            raise NotFoundError("Student not found")

        self._scope.ensure_can_view(actor, ScopeTarget.for_student(student), "Access denied")
        return student
