from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..access.scope import ScopeFilter
from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
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
        """Insert a pending leave.

        Implementations must re-check overlap atomically with the insert and
        raise ``ConflictError`` when a pending/approved leave intersects.
        """

        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        student_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_leaves(
        self,
        *,
        scope: ScopeFilter,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def count_leaves(
        self,
        *,
        scope: ScopeFilter,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> int:
        raise NotImplementedError

    def decide_leave(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        remarks: Optional[str] = None,
    ) -> bool:
        """Move a pending leave to ``status``. Returns False if it was no longer pending."""

        raise NotImplementedError

    def find_approved_covering(self, *, student_id: int, day: date) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_approved_starting_on(self, day: date) -> Sequence[LeaveRequest]:
        raise NotImplementedError
