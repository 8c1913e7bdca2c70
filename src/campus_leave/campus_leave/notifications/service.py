from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..access.scope import Actor
from ..common.datetime_utils import today_local
from ..common.validators import FieldErrors
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import NotificationCategory
from ..core.exceptions import NotFoundError
from ..leaves.model import LeaveRequest, LeaveStatusChanged
from ..leaves.repository import LeaveRepository
from ..users.repository import UserRepository
from .mailer import Mailer, render_email
from .model import EmailMessage, Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications: create for any user, read/ack for the owner only."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        *,
        user_id: int,
        title: str,
        message: str,
        category: NotificationCategory = NotificationCategory.SYSTEM,
        related_id: Optional[int] = None,
    ) -> int:
        errors = FieldErrors()
        title = errors.text(title, "title", max_len=200)
        message = errors.text(message, "message")
        errors.raise_if_any()

        notification_id = self._notifications.create(
            user_id=int(user_id),
            title=title,
            message=message,
            category=category,
            related_id=related_id,
        )
        logger.debug("Notification %s created for user_id=%s", notification_id, user_id)
        return notification_id

    def list_for_actor(self, actor: Actor, *, limit: int = DEFAULT_NOTIFICATION_LIMIT) -> Sequence[Notification]:
        if limit < 1 or limit > MAX_PAGE_LIMIT:
            limit = DEFAULT_NOTIFICATION_LIMIT
        return self._notifications.list_for_user(actor.user_id, limit=limit)

    def unread_count(self, actor: Actor) -> int:
        return self._notifications.unread_count(actor.user_id)

    def mark_read(self, actor: Actor, notification_id: int) -> None:
        if not self._notifications.mark_read(int(notification_id), user_id=actor.user_id):
            raise NotFoundError("Notification not found")

    def mark_all_read(self, actor: Actor) -> int:
        return self._notifications.mark_all_read(actor.user_id)


class LeaveNotifier:
    """Turns leave events into in-app notifications and emails."""

    def __init__(
        self,
        notifications: NotificationService,
        users: UserRepository,
        leaves: LeaveRepository,
        mailer: Mailer,
    ):
        self._notifications = notifications
        self._users = users
        self._leaves = leaves
        self._mailer = mailer

    def handle(self, event: LeaveStatusChanged) -> None:
        leave = event.leave
        status = leave.status.value.capitalize()
        message = (
            f"Your {leave.leave_type.value} leave request from {leave.start_date} to {leave.end_date} "
            f"has been {leave.status.value}."
        )
        if leave.remarks:
            message += f" Remarks: {leave.remarks}"

        self._notifications.notify(
            user_id=leave.student_id,
            title=f"Leave Request {status}",
            message=message,
            category=NotificationCategory.LEAVE_STATUS,
            related_id=leave.request_id,
        )
        self._email(leave, template="leave_status.txt", subject=f"Leave Request {status}")

    def remind_leaves_starting(self, day: Optional[date] = None) -> int:
        """Notify every student whose approved leave starts on ``day``. Returns how many were reminded."""

        day = day or today_local()
        sent = 0
        for leave in self._leaves.list_approved_starting_on(day):
            try:
                self._notifications.notify(
                    user_id=leave.student_id,
                    title="Leave Reminder",
                    message=(
                        f"Your approved {leave.leave_type.value} leave starts on {leave.start_date} "
                        f"and ends on {leave.end_date}."
                    ),
                    category=NotificationCategory.LEAVE_REMINDER,
                    related_id=leave.request_id,
                )
                self._email(leave, template="leave_reminder.txt", subject="Leave Reminder")
                sent += 1
            except Exception:
                logger.exception("Failed to send reminder for leave %s", leave.request_id)
        logger.info("Sent %s leave reminder(s) for %s", sent, day)
        return sent

    def _email(self, leave: LeaveRequest, *, template: str, subject: str) -> None:
        student = self._users.get_by_id(leave.student_id)
        if not student or not student.email:
            logger.warning("No email address for student_id=%s; skipping email", leave.student_id)
            return
        body = render_email(template, leave=leave, student_name=student.name)
        if not self._mailer.send(EmailMessage(recipient=student.email, subject=subject, body=body)):
            logger.warning("Email for leave %s was not delivered", leave.request_id)
