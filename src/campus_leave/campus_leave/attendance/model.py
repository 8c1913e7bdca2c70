from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's presence on one day."""

    attendance_id: int
    student_id: int
    attendance_date: date
    present: bool
    marked_by: int
    subject: Optional[str] = None
    period: Optional[str] = None
    created_at: Optional[datetime] = None
    marked_by_name: Optional[str] = None


@dataclass(frozen=True)
class AttendanceStats:
    """Read-model: aggregate presence for one student."""

    student_id: int
    student_name: str
    total_days: int
    present_days: int
    absent_days: int
    attendance_percentage: float
    last_attendance: Optional[date] = None


@dataclass(frozen=True)
class DepartmentStats:
    department: str
    students: Sequence[AttendanceStats]

    @property
    def total_students(self) -> int:
        return len(self.students)
