from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_student_number(self, student_number: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        dept: str,
        hostel: Optional[str],
        phone: Optional[str],
        student_number: Optional[str],
    ) -> int:
        raise NotImplementedError

    def touch_last_login(self, user_id: int, *, at: datetime) -> None:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_users(self, *, role: Optional[Role] = None, offset: int = 0, limit: int = 10) -> Sequence[User]:
        raise NotImplementedError

    def count_users(self, *, role: Optional[Role] = None) -> int:
        raise NotImplementedError

    def list_students_in_department(self, dept: str) -> Sequence[User]:
        raise NotImplementedError
