from __future__ import annotations

from dataclasses import dataclass

import pytest

from src.campus_leave.campus_leave.access.scope import (
    ACT_RULES,
    VIEW_RULES,
    Actor,
    ScopeFilter,
    ScopeResolver,
    ScopeTarget,
)
from src.campus_leave.campus_leave.core.enums import Role
from src.campus_leave.campus_leave.core.exceptions import AuthorizationError

from tests.fakes import pending_leave


@dataclass(frozen=True)
class _Stranger:
    user_id: int
    role: str
    dept: str = "CS"
    hostel: str = "H1"


@pytest.fixture()
def scope():
    return ScopeResolver()


def test_rule_tables_cover_every_role():
    assert set(VIEW_RULES) == set(Role)
    assert set(ACT_RULES) == set(Role)


def test_admin_sees_and_acts_on_everything(scope):
    admin = Actor(user_id=1, role=Role.ADMIN)
    leave = pending_leave(1, 99, dept="EE", hostel=None)
    assert scope.can_view(admin, leave)
    assert scope.can_act_on(admin, leave)


def test_student_views_only_own_and_never_acts(scope):
    student = Actor(user_id=5, role=Role.STUDENT, dept="CS", hostel="H1")
    own = pending_leave(1, 5)
    other = pending_leave(2, 6)
    assert scope.can_view(student, own)
    assert not scope.can_view(student, other)
    assert not scope.can_act_on(student, own)


def test_faculty_is_scoped_by_department(scope):
    faculty = Actor(user_id=2, role=Role.FACULTY, dept="CS")
    assert scope.can_act_on(faculty, pending_leave(1, 5, dept="CS"))
    assert not scope.can_act_on(faculty, pending_leave(2, 6, dept="EE"))
    assert not scope.can_view(faculty, ScopeTarget(student_id=6, dept="EE", hostel="H1"))


def test_warden_is_scoped_by_hostel_and_fails_closed_on_missing_hostel(scope):
    warden = Actor(user_id=3, role=Role.WARDEN, dept="HOSTEL", hostel="H1")
    assert scope.can_act_on(warden, pending_leave(1, 5, hostel="H1"))
    assert not scope.can_act_on(warden, pending_leave(2, 5, hostel="H2"))
    assert not scope.can_act_on(warden, pending_leave(3, 5, hostel=None))

    homeless_warden = Actor(user_id=4, role=Role.WARDEN, dept="HOSTEL", hostel=None)
    assert not scope.can_view(homeless_warden, pending_leave(4, 5, hostel=None))


def test_unknown_role_is_denied_without_raising(scope):
    stranger = _Stranger(user_id=9, role="janitor")
    leave = pending_leave(1, 9)
    assert scope.can_view(stranger, leave) is False
    assert scope.can_act_on(stranger, leave) is False


def test_ensure_helpers_raise_authorization_error(scope):
    faculty = Actor(user_id=2, role=Role.FACULTY, dept="CS")
    with pytest.raises(AuthorizationError) as exc:
        scope.ensure_can_act_on(faculty, pending_leave(1, 5, dept="EE"), "nope")
    assert exc.value.message == "nope"


@pytest.mark.parametrize(
    "actor,expected",
    [
        (Actor(user_id=1, role=Role.ADMIN), ScopeFilter()),
        (Actor(user_id=5, role=Role.STUDENT, dept="CS"), ScopeFilter(student_id=5)),
        (Actor(user_id=2, role=Role.FACULTY, dept="CS"), ScopeFilter(dept="CS")),
        (Actor(user_id=3, role=Role.WARDEN, hostel="H1"), ScopeFilter(hostel="H1")),
        (Actor(user_id=3, role=Role.WARDEN, hostel=None), ScopeFilter(deny_all=True)),
    ],
)
def test_leave_filter_matches_view_rules(scope, actor, expected):
    assert scope.leave_filter(actor) == expected


def test_leave_filter_rejects_unknown_role(scope):
    with pytest.raises(AuthorizationError):
        scope.leave_filter(_Stranger(user_id=9, role="janitor"))
