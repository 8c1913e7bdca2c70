from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.security import generate_password_hash

from src.campus_leave.campus_leave.access.scope import Actor
from src.campus_leave.campus_leave.common.pagination import PageRequest
from src.campus_leave.campus_leave.core.enums import Role
from src.campus_leave.campus_leave.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from src.campus_leave.campus_leave.users.service import AuthService, UserService
from src.campus_leave.campus_leave.users.tokens import TokenService

from tests.fakes import FakeUserRepo, make_user

ADMIN = make_user(1, Role.ADMIN, dept="ADMIN", email="admin@campus.local", password_hash=generate_password_hash("admin123"))


@pytest.fixture()
def users():
    return FakeUserRepo(ADMIN)


@pytest.fixture()
def tokens():
    return TokenService("unit-test-secret", expiry_hours=1)


@pytest.fixture()
def auth(users, tokens):
    return AuthService(users, tokens)


def register_student(auth, **kw):
    data = dict(
        name="Asha Rao",
        email="Asha@Campus.Local",
        password="secret1",
        role="student",
        dept="CS",
        hostel="H1",
        student_number="CS-0042",
    )
    data.update(kw)
    return auth.register(**data)


def test_register_normalises_email_and_hashes_password(auth):
    user = register_student(auth)

    assert user.email == "asha@campus.local"
    assert user.role == Role.STUDENT
    assert user.password_hash != "secret1"


def test_register_rejects_duplicates(auth):
    register_student(auth)
    with pytest.raises(ConflictError):
        register_student(auth, student_number="CS-0043")
    with pytest.raises(ConflictError):
        register_student(auth, email="other@campus.local")


def test_register_validates_fields(auth):
    with pytest.raises(ValidationError) as exc:
        auth.register(name="A", email="nope", password="123", role="dean", dept="")
    assert set(exc.value.fields) == {"name", "email", "password", "role", "dept"}


def test_admin_cannot_self_register(auth):
    with pytest.raises(ValidationError):
        register_student(auth, role="admin", student_number=None)


def test_login_issues_token_that_resolves_to_actor(auth, users):
    user = register_student(auth)
    result = auth.authenticate("asha@campus.local", "secret1")

    actor = auth.resolve_actor(result.token)
    assert actor == Actor(user_id=user.user_id, role=Role.STUDENT, dept="CS", hostel="H1")
    assert users.get_by_id(user.user_id).last_login is not None


def test_login_with_wrong_password_or_inactive_user_fails(auth, users):
    user = register_student(auth)

    with pytest.raises(AuthenticationError):
        auth.authenticate("asha@campus.local", "wrong-password")

    users.set_active(user.user_id, is_active=False)
    with pytest.raises(AuthenticationError):
        auth.authenticate("asha@campus.local", "secret1")


def test_expired_or_tampered_token_is_rejected(auth, tokens):
    user = register_student(auth)
    old = tokens.issue(
        user_id=user.user_id,
        email=user.email,
        role=user.role,
        now=datetime.now(timezone.utc) - timedelta(hours=2),
    )
    with pytest.raises(AuthenticationError):
        auth.resolve_actor(old)

    forged = TokenService("another-secret").issue(user_id=user.user_id, email=user.email, role=user.role)
    with pytest.raises(AuthenticationError):
        auth.resolve_actor(forged)


def test_change_password_requires_current_password(auth, users):
    user = register_student(auth)
    service = UserService(users)
    me = Actor.from_user(user)

    with pytest.raises(AuthenticationError):
        service.change_password(me, current_password="bad", new_password="newsecret")

    service.change_password(me, current_password="secret1", new_password="newsecret")
    assert auth.authenticate("asha@campus.local", "newsecret").user.user_id == user.user_id


def test_admin_user_management(auth, users):
    student = register_student(auth)
    service = UserService(users)
    admin = Actor.from_user(ADMIN)

    page = service.list_users(admin, role="student", page=PageRequest())
    assert [u.user_id for u in page.items] == [student.user_id]
    assert page.pagination.total == 1

    with pytest.raises(AuthorizationError):
        service.list_users(Actor.from_user(student))
    with pytest.raises(ValidationError):
        service.deactivate(admin, user_id=ADMIN.user_id)

    service.deactivate(admin, user_id=student.user_id)
    assert users.get_by_id(student.user_id).is_active is False
    with pytest.raises(ConflictError):
        service.deactivate(admin, user_id=student.user_id)
