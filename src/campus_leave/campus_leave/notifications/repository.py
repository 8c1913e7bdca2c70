from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationCategory
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        title: str,
        message: str,
        category: NotificationCategory,
        related_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int = 20) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def mark_read(self, notification_id: int, *, user_id: int) -> bool:
        """Returns False when the notification does not exist or belongs to someone else."""

        raise NotImplementedError

    def mark_all_read(self, user_id: int) -> int:
        raise NotImplementedError

    def unread_count(self, user_id: int) -> int:
        raise NotImplementedError
