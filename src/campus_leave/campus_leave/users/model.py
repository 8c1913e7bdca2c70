from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code). Role never changes after creation.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    dept: str
    hostel: Optional[str] = None
    phone: Optional[str] = None
    student_number: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
