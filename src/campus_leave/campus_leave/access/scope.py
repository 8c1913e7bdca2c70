"""Who may see or act on which leave and attendance records.

Rules, in precedence order:

* admin: every record, view and act;
* student: own records only (view); never acts on a leave;
* faculty: records whose department equals the faculty's department;
* warden: records whose hostel equals the warden's hostel. A missing hostel
  on either side denies access.

Any role without a rule is denied. ``can_view`` / ``can_act_on`` are pure and
never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


class ScopedRecord(Protocol):
    """Anything owned by a student and carrying an affiliation (leave or attendance target)."""

    student_id: int
    dept: Optional[str]
    hostel: Optional[str]


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""

    user_id: int
    role: Role
    dept: Optional[str] = None
    hostel: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(user_id=int(user.user_id), role=user.role, dept=user.dept, hostel=user.hostel)


@dataclass(frozen=True)
class ScopeTarget:
    """Affiliation of a student, used to scope attendance reads."""

    student_id: int
    dept: Optional[str]
    hostel: Optional[str]

    @classmethod
    def for_student(cls, student) -> "ScopeTarget":
        return cls(student_id=int(student.user_id), dept=student.dept, hostel=student.hostel)


@dataclass(frozen=True)
class ScopeFilter:
    """Query constraints equivalent to ``can_view`` for listing leaves."""

    student_id: Optional[int] = None
    dept: Optional[str] = None
    hostel: Optional[str] = None
    deny_all: bool = False


Rule = Callable[[Actor, ScopedRecord], bool]


def _same_hostel(actor: Actor, record: ScopedRecord) -> bool:
    return actor.hostel is not None and record.hostel is not None and actor.hostel == record.hostel


def _same_dept(actor: Actor, record: ScopedRecord) -> bool:
    return actor.dept is not None and record.dept is not None and actor.dept == record.dept


VIEW_RULES: Mapping[Role, Rule] = {
    Role.ADMIN: lambda actor, record: True,
    Role.STUDENT: lambda actor, record: int(actor.user_id) == int(record.student_id),
    Role.FACULTY: _same_dept,
    Role.WARDEN: _same_hostel,
}

ACT_RULES: Mapping[Role, Rule] = {
    Role.ADMIN: lambda actor, record: True,
    Role.STUDENT: lambda actor, record: False,
    Role.FACULTY: _same_dept,
    Role.WARDEN: _same_hostel,
}


class ScopeResolver:
    def __init__(self, view_rules: Mapping[Role, Rule] = VIEW_RULES, act_rules: Mapping[Role, Rule] = ACT_RULES):
        self._view_rules = view_rules
        self._act_rules = act_rules

    @staticmethod
    def _check(rules: Mapping[Role, Rule], actor: Actor, record: ScopedRecord) -> bool:
        try:
            rule = rules.get(actor.role)
            return bool(rule and rule(actor, record))
        except (AttributeError, TypeError, ValueError):
            return False

    def can_view(self, actor: Actor, record: ScopedRecord) -> bool:
        return self._check(self._view_rules, actor, record)

    def can_act_on(self, actor: Actor, leave: ScopedRecord) -> bool:
        return self._check(self._act_rules, actor, leave)

    def ensure_can_view(self, actor: Actor, record: ScopedRecord, message: str = "You cannot view this record") -> None:
        if not self.can_view(actor, record):
            raise AuthorizationError(message)

    def ensure_can_act_on(self, actor: Actor, leave: ScopedRecord, message: str = "You cannot act on this leave request") -> None:
        if not self.can_act_on(actor, leave):
            raise AuthorizationError(message)

    def leave_filter(self, actor: Actor) -> ScopeFilter:
        if actor.role == Role.ADMIN:
            return ScopeFilter()
        if actor.role == Role.STUDENT:
            return ScopeFilter(student_id=int(actor.user_id))
        if actor.role == Role.FACULTY:
            return ScopeFilter(dept=actor.dept) if actor.dept else ScopeFilter(deny_all=True)
        if actor.role == Role.WARDEN:
            return ScopeFilter(hostel=actor.hostel) if actor.hostel else ScopeFilter(deny_all=True)
        raise AuthorizationError("Forbidden")
