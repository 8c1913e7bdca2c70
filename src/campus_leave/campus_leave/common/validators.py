from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FieldErrors:
    """Collects per-field messages so one response can list every problem."""

    def __init__(self) -> None:
        self._errors: dict[str, str] = {}

    def add(self, field_name: str, message: str) -> None:
        self._errors.setdefault(field_name, message)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self._errors

    def __bool__(self) -> bool:
        return bool(self._errors)

    def raise_if_any(self, message: str = "Validation failed") -> None:
        if self._errors:
            raise ValidationError(message, fields=self._errors)

    def _is_text(self, value: object, field_name: str) -> bool:
        if value is None or isinstance(value, str):
            return True
        self.add(field_name, f"{field_name} must be a string")
        return False

    def text(self, value: Optional[str], field_name: str, *, min_len: int = 1, max_len: Optional[int] = None) -> str:
        if not self._is_text(value, field_name):
            return ""
        v = (value or "").strip()
        if not v:
            self.add(field_name, f"{field_name} is required")
        elif len(v) < min_len:
            self.add(field_name, f"{field_name} must be at least {min_len} characters long")
        elif max_len is not None and len(v) > max_len:
            self.add(field_name, f"{field_name} must be at most {max_len} characters long")
        return v

    def optional_text(self, value: Optional[str], field_name: str, *, max_len: int) -> Optional[str]:
        if not self._is_text(value, field_name):
            return None
        v = (value or "").strip()
        if not v:
            return None
        if len(v) > max_len:
            self.add(field_name, f"{field_name} must be at most {max_len} characters long")
        return v

    def email(self, value: Optional[str], field_name: str = "email") -> str:
        if not self._is_text(value, field_name):
            return ""
        v = (value or "").strip().lower()
        if not v:
            self.add(field_name, f"{field_name} is required")
        elif not _EMAIL_RE.match(v):
            self.add(field_name, f"{field_name} must be a valid email address")
        return v

    def choice(self, value: object, enum_cls: Type[E], field_name: str) -> Optional[E]:
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(str(value or "").strip().lower())
        except ValueError:
            options = " ".join(m.value for m in enum_cls)
            self.add(field_name, f"{field_name} must be one of: {options}")
            return None


def parse_enum(value: Optional[str], enum_cls: Type[E], field_name: str) -> Optional[E]:
    """Parse an optional filter value; empty means "no filter"."""

    if value is None or not str(value).strip():
        return None
    errors = FieldErrors()
    parsed = errors.choice(value, enum_cls, field_name)
    errors.raise_if_any(f"Invalid {field_name}")
    return parsed
