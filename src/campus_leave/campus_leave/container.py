from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.scope import ScopeResolver
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TOKEN_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.model import LeaveStatusChanged
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mailer import Mailer, build_mailer
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import LeaveNotifier, NotificationService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    leaves_repo: LeaveRepository
    attendance_repo: AttendanceRepository
    notifications_repo: NotificationRepository

    scope: ScopeResolver
    tokens: TokenService
    mailer: Mailer
    dispatcher: NotificationDispatcher[LeaveStatusChanged]

    auth_service: AuthService
    user_service: UserService
    leave_service: LeaveService
    attendance_service: AttendanceService
    notification_service: NotificationService
    leave_notifier: LeaveNotifier

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    users_repo: UserRepository,
    leaves_repo: LeaveRepository,
    attendance_repo: AttendanceRepository,
    notifications_repo: NotificationRepository,
    tokens: TokenService,
    mailer: Mailer,
    notifications_async: bool = True,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories. Storage-agnostic."""

    scope = ScopeResolver()
    notification_service = NotificationService(notifications_repo)
    leave_notifier = LeaveNotifier(notification_service, users_repo, leaves_repo, mailer)
    dispatcher: NotificationDispatcher[LeaveStatusChanged] = NotificationDispatcher(
        leave_notifier.handle, asynchronous=notifications_async
    )

    return Container(
        users_repo=users_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        scope=scope,
        tokens=tokens,
        mailer=mailer,
        dispatcher=dispatcher,
        auth_service=AuthService(users_repo, tokens),
        user_service=UserService(users_repo),
        leave_service=LeaveService(leaves_repo, users_repo, scope, dispatcher),
        attendance_service=AttendanceService(attendance_repo, users_repo, leaves_repo, scope),
        notification_service=notification_service,
        leave_notifier=leave_notifier,
        conn=conn,
    )


def build_container(settings) -> Container:
    """Production wiring: MySQL repositories plus settings-driven token, mail and dispatch options."""

    conn = DatabaseConnection(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))
    tokens = TokenService(
        str(getattr(settings, "JWT_SECRET", "") or getattr(settings, "SECRET_KEY")),
        expiry_hours=int(getattr(settings, "JWT_EXPIRY_HOURS", DEFAULT_TOKEN_HOURS)),
    )

    return assemble(
        users_repo=MySQLUserRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        tokens=tokens,
        mailer=build_mailer(settings),
        notifications_async=bool(getattr(settings, "NOTIFICATIONS_ASYNC", True)),
        conn=conn,
    )
