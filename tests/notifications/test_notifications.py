from __future__ import annotations

import threading
from datetime import date

import pytest

from src.campus_leave.campus_leave.access.scope import Actor
from src.campus_leave.campus_leave.core.enums import LeaveStatus, NotificationCategory, Role
from src.campus_leave.campus_leave.core.exceptions import NotFoundError
from src.campus_leave.campus_leave.leaves.model import LeaveStatusChanged
from src.campus_leave.campus_leave.notifications.dispatcher import NotificationDispatcher
from src.campus_leave.campus_leave.notifications.mailer import LoggingMailer, SmtpSettings, build_mailer, render_email
from src.campus_leave.campus_leave.notifications.service import LeaveNotifier, NotificationService

from tests.fakes import FakeLeaveRepo, FakeNotificationRepo, FakeUserRepo, RecordingMailer, make_user, pending_leave

STUDENT = make_user(10, Role.STUDENT, dept="CS", hostel="H1", name="Asha", email="asha@campus.local")
OTHER = make_user(11, Role.STUDENT, dept="CS", hostel="H1")


@pytest.fixture()
def repo():
    return FakeNotificationRepo()


@pytest.fixture()
def notifications(repo):
    return NotificationService(repo)


def test_notify_and_read_cycle(notifications):
    me = Actor.from_user(STUDENT)
    first = notifications.notify(user_id=STUDENT.user_id, title="Hello", message="World")
    notifications.notify(user_id=STUDENT.user_id, title="Again", message="World")
    notifications.notify(user_id=OTHER.user_id, title="Not yours", message="x")

    assert notifications.unread_count(me) == 2
    assert [n.title for n in notifications.list_for_actor(me)] == ["Again", "Hello"]

    notifications.mark_read(me, first)
    assert notifications.unread_count(me) == 1

    assert notifications.mark_all_read(me) == 1
    assert notifications.unread_count(me) == 0


def test_mark_read_of_someone_elses_notification_is_not_found(notifications):
    theirs = notifications.notify(user_id=OTHER.user_id, title="Private", message="x")
    with pytest.raises(NotFoundError):
        notifications.mark_read(Actor.from_user(STUDENT), theirs)


def _notifier(repo, mailer, leaves=None):
    users = FakeUserRepo(STUDENT, OTHER)
    return LeaveNotifier(NotificationService(repo), users, leaves or FakeLeaveRepo(users), mailer)


def test_status_change_creates_notification_and_email(repo):
    mailer = RecordingMailer()
    leave = pending_leave(7, STUDENT.user_id, status=LeaveStatus.APPROVED, remarks="Rest well")

    _notifier(repo, mailer).handle(LeaveStatusChanged(leave=leave, decided_by=20))

    [n] = repo.for_user(STUDENT.user_id)
    assert n.title == "Leave Request Approved"
    assert n.category == NotificationCategory.LEAVE_STATUS
    assert n.related_id == 7
    assert "Remarks: Rest well" in n.message

    [email] = mailer.sent
    assert email.recipient == "asha@campus.local"
    assert "has been approved" in email.body


def test_undelivered_email_does_not_raise(repo):
    leave = pending_leave(7, STUDENT.user_id, status=LeaveStatus.REJECTED)
    _notifier(repo, RecordingMailer(ok=False)).handle(LeaveStatusChanged(leave=leave, decided_by=20))
    assert len(repo.for_user(STUDENT.user_id)) == 1


def test_reminders_for_leaves_starting_on_day(repo):
    users = FakeUserRepo(STUDENT, OTHER)
    leaves = FakeLeaveRepo(users)
    leaves.put(pending_leave(1, STUDENT.user_id, status=LeaveStatus.APPROVED, start=date(2026, 3, 10)))
    leaves.put(pending_leave(2, OTHER.user_id, start=date(2026, 3, 10)))
    leaves.put(pending_leave(3, OTHER.user_id, status=LeaveStatus.APPROVED, start=date(2026, 3, 20), end=date(2026, 3, 21)))

    sent = _notifier(repo, RecordingMailer(), leaves).remind_leaves_starting(date(2026, 3, 10))

    assert sent == 1
    [n] = repo.items.values()
    assert n.user_id == STUDENT.user_id
    assert n.category == NotificationCategory.LEAVE_REMINDER


def test_render_email_fills_template():
    body = render_email("leave_status.txt", leave=pending_leave(1, 10, status=LeaveStatus.REJECTED), student_name="Asha")
    assert body.startswith("Dear Asha,")
    assert "has been rejected" in body


def test_build_mailer_without_server_logs_instead():
    class Settings:
        MAIL_SERVER = ""

    assert isinstance(build_mailer(Settings), LoggingMailer)
    assert SmtpSettings.from_settings(Settings) is None


def test_inline_dispatcher_swallows_handler_failure():
    calls = []

    def handler(event):
        calls.append(event)
        raise RuntimeError("boom")

    dispatcher = NotificationDispatcher(handler, asynchronous=False)
    dispatcher.publish("evt")

    assert calls == ["evt"]
    assert dispatcher.running is False


def test_async_dispatcher_delivers_on_worker_and_drains_on_stop():
    delivered = []
    seen_threads = set()
    done = threading.Event()

    def handler(event):
        seen_threads.add(threading.current_thread().name)
        delivered.append(event)
        if event == "boom":
            raise RuntimeError("handler failure")
        if len(delivered) == 3:
            done.set()

    dispatcher = NotificationDispatcher(handler, asynchronous=True)
    dispatcher.start()
    dispatcher.publish("boom")
    dispatcher.publish("a")
    dispatcher.publish("b")

    assert done.wait(timeout=5)
    dispatcher.stop()

    assert delivered == ["boom", "a", "b"]
    assert seen_threads == {"notification-dispatcher"}
    assert dispatcher.running is False
