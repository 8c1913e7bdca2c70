"""In-memory repositories and collaborators shared by the service and API tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.campus_leave.campus_leave.access.scope import ScopeFilter
from src.campus_leave.campus_leave.attendance.model import AttendanceRecord
from src.campus_leave.campus_leave.core.enums import LeaveStatus, LeaveType, NotificationCategory, Role
from src.campus_leave.campus_leave.core.exceptions import ConflictError
from src.campus_leave.campus_leave.leaves.model import LeaveRequest
from src.campus_leave.campus_leave.notifications.model import Notification
from src.campus_leave.campus_leave.users.model import User

CREATED_AT = datetime(2026, 3, 1, 9, 0, 0)


def make_user(user_id, role, *, dept="CS", hostel=None, name=None, email=None, password_hash="x", is_active=True):
    return User(
        user_id=user_id,
        name=name or f"User {user_id}",
        email=email or f"user{user_id}@campus.local",
        password_hash=password_hash,
        role=role,
        dept=dept,
        hostel=hostel,
        is_active=is_active,
    )


class FakeUserRepo:
    def __init__(self, *users: User):
        self._users: dict[int, User] = {u.user_id: u for u in users}
        self._next_id = max(self._users, default=0) + 1

    def add(self, user: User) -> User:
        self._users[user.user_id] = user
        self._next_id = max(self._next_id, user.user_id + 1)
        return user

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self._users.values() if u.email == email), None)

    def get_by_student_number(self, student_number):
        return next((u for u in self._users.values() if u.student_number == student_number), None)

    def create_user(self, *, name, email, password_hash, role, dept, hostel, phone, student_number):
        uid = self._next_id
        self._next_id += 1
        self._users[uid] = User(
            user_id=uid,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            dept=dept,
            hostel=hostel,
            phone=phone,
            student_number=student_number,
            created_at=CREATED_AT,
        )
        return uid

    def touch_last_login(self, user_id, *, at):
        self._users[int(user_id)] = replace(self._users[int(user_id)], last_login=at)

    def update_password(self, user_id, *, password_hash):
        user = self._users.get(int(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(user, password_hash=password_hash)
        return True

    def set_active(self, user_id, *, is_active):
        user = self._users.get(int(user_id))
        if not user:
            return False
        self._users[user.user_id] = replace(user, is_active=is_active)
        return True

    def list_users(self, *, role=None, offset=0, limit=10):
        items = [u for u in sorted(self._users.values(), key=lambda u: u.user_id) if role is None or u.role == role]
        return items[offset : offset + limit]

    def count_users(self, *, role=None):
        return sum(1 for u in self._users.values() if role is None or u.role == role)

    def list_students_in_department(self, dept):
        return sorted(
            (u for u in self._users.values() if u.role == Role.STUDENT and u.dept == dept),
            key=lambda u: u.name,
        )


class FakeLeaveRepo:
    def __init__(self, users: Optional[FakeUserRepo] = None):
        self._users = users
        self._next_id = 1
        self._items: dict[int, LeaveRequest] = {}

    def _overlaps(self, student_id, start_date, end_date, statuses):
        return [
            x
            for x in self._items.values()
            if x.student_id == int(student_id)
            and x.status in tuple(statuses)
            and x.start_date <= end_date
            and x.end_date >= start_date
        ]

    def create_leave(self, *, student_id, leave_type, reason, start_date, end_date, dept, hostel, days):
        if self._overlaps(student_id, start_date, end_date, (LeaveStatus.PENDING, LeaveStatus.APPROVED)):
            raise ConflictError("You already have a leave request for this period")
        rid = self._next_id
        self._next_id += 1
        student = self._users.get_by_id(student_id) if self._users else None
        self._items[rid] = LeaveRequest(
            request_id=rid,
            student_id=int(student_id),
            leave_type=leave_type,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            status=LeaveStatus.PENDING,
            dept=dept,
            hostel=hostel,
            days=days,
            created_at=CREATED_AT,
            student_name=student.name if student else None,
        )
        return rid

    def put(self, leave: LeaveRequest) -> LeaveRequest:
        self._items[leave.request_id] = leave
        self._next_id = max(self._next_id, leave.request_id + 1)
        return leave

    def get_by_id(self, request_id):
        return self._items.get(int(request_id))

    def find_overlapping(self, *, student_id, start_date, end_date, statuses):
        return self._overlaps(student_id, start_date, end_date, statuses)

    def _filtered(self, scope: ScopeFilter, status, leave_type):
        if scope.deny_all:
            return []
        out = []
        for x in sorted(self._items.values(), key=lambda x: x.request_id, reverse=True):
            if scope.student_id is not None and x.student_id != scope.student_id:
                continue
            if scope.dept is not None and x.dept != scope.dept:
                continue
            if scope.hostel is not None and x.hostel != scope.hostel:
                continue
            if status is not None and x.status != status:
                continue
            if leave_type is not None and x.leave_type != leave_type:
                continue
            out.append(x)
        return out

    def list_leaves(self, *, scope, status=None, leave_type=None, offset=0, limit=10):
        return self._filtered(scope, status, leave_type)[offset : offset + limit]

    def count_leaves(self, *, scope, status=None, leave_type=None):
        return len(self._filtered(scope, status, leave_type))

    def decide_leave(self, *, request_id, status, decided_by, remarks=None):
        leave = self._items.get(int(request_id))
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self._items[leave.request_id] = replace(leave, status=status, approved_by=decided_by, remarks=remarks)
        return True

    def find_approved_covering(self, *, student_id, day):
        return next(
            (
                x
                for x in self._items.values()
                if x.student_id == int(student_id) and x.status == LeaveStatus.APPROVED and x.covers(day)
            ),
            None,
        )

    def list_approved_starting_on(self, day):
        return [x for x in self._items.values() if x.status == LeaveStatus.APPROVED and x.start_date == day]


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self._items: dict[int, AttendanceRecord] = {}

    def get_for_student_and_date(self, student_id, attendance_date):
        return next(
            (
                r
                for r in self._items.values()
                if r.student_id == int(student_id) and r.attendance_date == attendance_date
            ),
            None,
        )

    def create_record(self, *, student_id, attendance_date, present, marked_by, subject, period):
        if self.get_for_student_and_date(student_id, attendance_date):
            raise ConflictError("Record conflicts with existing data")
        aid = self._next_id
        self._next_id += 1
        self._items[aid] = AttendanceRecord(
            attendance_id=aid,
            student_id=int(student_id),
            attendance_date=attendance_date,
            present=bool(present),
            marked_by=int(marked_by),
            subject=subject,
            period=period,
            created_at=CREATED_AT,
        )
        return aid

    def get_by_id(self, attendance_id):
        return self._items.get(int(attendance_id))

    def list_for_student(self, student_id, *, start_date=None, end_date=None, subject=None):
        items = [
            r
            for r in self._items.values()
            if r.student_id == int(student_id)
            and (start_date is None or r.attendance_date >= start_date)
            and (end_date is None or r.attendance_date <= end_date)
            and (subject is None or r.subject == subject)
        ]
        return sorted(items, key=lambda r: (r.attendance_date, r.attendance_id), reverse=True)

    def summarize_student(self, student_id):
        items = self.list_for_student(student_id)
        present = sum(1 for r in items if r.present)
        last = items[0].attendance_date if items else None
        return len(items), present, last


class FakeNotificationRepo:
    def __init__(self):
        self._next_id = 1
        self.items: dict[int, Notification] = {}

    def create(self, *, user_id, title, message, category=NotificationCategory.SYSTEM, related_id=None):
        nid = self._next_id
        self._next_id += 1
        self.items[nid] = Notification(
            notification_id=nid,
            user_id=int(user_id),
            title=title,
            message=message,
            category=category,
            related_id=related_id,
            created_at=CREATED_AT,
        )
        return nid

    def for_user(self, user_id):
        return [n for n in self.items.values() if n.user_id == int(user_id)]

    def list_for_user(self, user_id, *, limit=20):
        return sorted(self.for_user(user_id), key=lambda n: n.notification_id, reverse=True)[:limit]

    def mark_read(self, notification_id, *, user_id):
        n = self.items.get(int(notification_id))
        if not n or n.user_id != int(user_id):
            return False
        self.items[n.notification_id] = replace(n, is_read=True)
        return True

    def mark_all_read(self, user_id):
        count = 0
        for n in self.for_user(user_id):
            if not n.is_read:
                self.items[n.notification_id] = replace(n, is_read=True)
                count += 1
        return count

    def unread_count(self, user_id):
        return sum(1 for n in self.for_user(user_id) if not n.is_read)


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


class FailingPublisher:
    def __init__(self):
        self.calls = 0

    def publish(self, event):
        self.calls += 1
        raise RuntimeError("notification backend down")


class RecordingMailer:
    def __init__(self, ok: bool = True):
        self.sent = []
        self._ok = ok

    def send(self, message):
        self.sent.append(message)
        return self._ok


def pending_leave(request_id, student_id, *, dept="CS", hostel="H1", start=date(2026, 3, 10), end=date(2026, 3, 12), **kw):
    fields = dict(
        request_id=request_id,
        student_id=student_id,
        leave_type=LeaveType.MEDICAL,
        reason="Fever and doctor visit",
        start_date=start,
        end_date=end,
        status=LeaveStatus.PENDING,
        dept=dept,
        hostel=hostel,
        days=(end - start).days + 1,
        created_at=CREATED_AT,
    )
    fields.update(kw)
    return LeaveRequest(**fields)
