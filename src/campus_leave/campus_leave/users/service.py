from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.scope import Actor
from ..common.pagination import PageRequest, Pagination
from ..common.validators import FieldErrors, parse_enum
from ..core.constants import NAME_MAX_LENGTH, NAME_MIN_LENGTH, PASSWORD_MIN_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


@dataclass(frozen=True)
class UserPage:
    items: Sequence[User]
    pagination: Pagination


class AuthService:
    """Use cases: register, log in, resolve the actor behind a bearer token."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: str,
        dept: str,
        hostel: Optional[str] = None,
        phone: Optional[str] = None,
        student_number: Optional[str] = None,
    ) -> User:
        errors = FieldErrors()
        name = errors.text(name, "name", min_len=NAME_MIN_LENGTH, max_len=NAME_MAX_LENGTH)
        email = errors.email(email)
        if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
            errors.add("password", f"password must be at least {PASSWORD_MIN_LENGTH} characters long")
        parsed_role = errors.choice(role, Role, "role")
        dept = errors.text(dept, "dept", max_len=100)
        hostel = errors.optional_text(hostel, "hostel", max_len=100)
        phone = errors.optional_text(phone, "phone", max_len=30)
        student_number = errors.optional_text(student_number, "student_id", max_len=50)
        errors.raise_if_any()

        if parsed_role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered", fields={"role": "admin is not allowed"})

        if self._users.get_by_email(email):
            raise ConflictError("Email already registered")
        if student_number and self._users.get_by_student_number(student_number):
            raise ConflictError("Student ID already registered")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=parsed_role,
            dept=dept,
            hostel=hostel,
            phone=phone,
            student_number=student_number,
        )
        logger.info("Registered %s account user_id=%s", parsed_role.value, user_id)
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found after registration")
        return user

    def authenticate(self, email: str, password: str, *, now: datetime | None = None) -> LoginResult:
        email = email.strip().lower() if isinstance(email, str) else ""
        password = password if isinstance(password, str) else ""
        if not email or not password:
            raise ValidationError(
                "Email and password are required",
                fields={k: f"{k} is required" for k, v in (("email", email), ("password", password)) if not v},
            )

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            logger.warning("Login rejected for unknown or inactive account")
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            logger.warning("Login rejected for user_id=%s (bad password)", user.user_id)
            raise AuthenticationError("Invalid email or password")

        self._users.touch_last_login(user.user_id, at=now or datetime.now())
        token = self._tokens.issue(user_id=user.user_id, email=user.email, role=user.role)
        return LoginResult(token=token, user=user)

    def resolve_actor(self, token: str) -> Actor:
        claims = self._tokens.verify(token)
        user = self._users.get_by_id(claims.user_id)
        if not user or not user.is_active or user.email != claims.email:
            raise AuthenticationError("User not found")
        return Actor.from_user(user)


class UserService:
    """Use cases: profile, password change, admin user management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_profile(self, actor: Actor) -> User:
        user = self._users.get_by_id(actor.user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, actor: Actor, *, role: Optional[str] = None, page: PageRequest = PageRequest()) -> UserPage:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Forbidden - insufficient permissions")

        role_filter = parse_enum(role, Role, "role")
        items = self._users.list_users(role=role_filter, offset=page.offset, limit=page.limit)
        total = self._users.count_users(role=role_filter)
        return UserPage(items=items, pagination=Pagination.build(page, total))

    def change_password(self, actor: Actor, *, current_password: str, new_password: str) -> None:
        user = self.get_profile(actor)
        try:
            ok = check_password_hash(user.password_hash, current_password if isinstance(current_password, str) else "")
        except ValueError:
            ok = False
        if not ok:
            raise AuthenticationError("Current password is incorrect")

        if not isinstance(new_password, str) or len(new_password) < PASSWORD_MIN_LENGTH:
            message = f"new_password must be at least {PASSWORD_MIN_LENGTH} characters long"
            raise ValidationError(message, fields={"new_password": message})

        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password))
        logger.info("Password changed for user_id=%s", user.user_id)

    def deactivate(self, actor: Actor, *, user_id: int) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Forbidden - insufficient permissions")
        if int(user_id) == int(actor.user_id):
            raise ValidationError("You cannot deactivate your own account")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if not user.is_active:
            raise ConflictError("User is already inactive")

        self._users.set_active(user.user_id, is_active=False)
        logger.info("User user_id=%s deactivated by user_id=%s", user.user_id, actor.user_id)
