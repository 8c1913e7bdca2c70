from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a student's leave request.

    ``dept`` and ``hostel`` are copied from the student when the request is
    submitted; approval scope uses these values, not the student's current ones.
    """

    request_id: int
    student_id: int
    leave_type: LeaveType
    reason: str
    start_date: date
    end_date: date
    status: LeaveStatus
    dept: str
    hostel: Optional[str]
    days: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    remarks: Optional[str] = None
    student_name: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class LeaveStatusChanged:
    """Event published after a leave leaves the pending state."""

    leave: LeaveRequest
    decided_by: int
