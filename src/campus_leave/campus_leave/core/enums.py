from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for scoping and route gates."""

    ADMIN = "admin"
    STUDENT = "student"
    FACULTY = "faculty"
    WARDEN = "warden"


APPROVER_ROLES = frozenset({Role.ADMIN, Role.FACULTY, Role.WARDEN})


class LeaveType(str, Enum):
    MEDICAL = "medical"
    PERSONAL = "personal"
    EMERGENCY = "emergency"
    ACADEMIC = "academic"


class LeaveStatus(str, Enum):
    """Leave workflow states. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


# Statuses that block another leave over the same days.
ACTIVE_LEAVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


class DecisionAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> LeaveStatus:
        return LeaveStatus.APPROVED if self is DecisionAction.APPROVE else LeaveStatus.REJECTED


class NotificationCategory(str, Enum):
    LEAVE_STATUS = "leave_status"
    LEAVE_REMINDER = "leave_reminder"
    SYSTEM = "system"
