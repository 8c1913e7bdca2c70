from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert one record; a second record for the same (student, day) raises ``ConflictError``."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(
        self,
        student_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def summarize_student(self, student_id: int) -> tuple[int, int, Optional[date]]:
        """Return ``(total_days, present_days, last_attendance_date)``."""

        raise NotImplementedError
