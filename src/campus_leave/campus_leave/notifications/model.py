from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationCategory


@dataclass(frozen=True)
class Notification:
    """In-app message addressed to one user."""

    notification_id: int
    user_id: int
    title: str
    message: str
    category: NotificationCategory
    is_read: bool = False
    related_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmailMessage:
    recipient: str
    subject: str
    body: str
