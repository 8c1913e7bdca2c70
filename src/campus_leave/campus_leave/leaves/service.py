from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from ..access.scope import Actor, ScopeFilter, ScopeResolver
from ..common.datetime_utils import inclusive_days, today_local
from ..common.pagination import PageRequest, Pagination
from ..common.validators import FieldErrors, parse_enum
from ..core.constants import MAX_LEAVE_DAYS, REASON_MAX_LENGTH, REASON_MIN_LENGTH, REMARKS_MAX_LENGTH
from ..core.enums import (
    ACTIVE_LEAVE_STATUSES,
    APPROVER_ROLES,
    DecisionAction,
    LeaveStatus,
    LeaveType,
    Role,
)
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..users.repository import UserRepository
from .model import LeaveRequest, LeaveStatusChanged
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveEventPublisher(Protocol):
    def publish(self, event: LeaveStatusChanged) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class LeavePage:
    items: Sequence[LeaveRequest]
    pagination: Pagination
    status: Optional[LeaveStatus]
    leave_type: Optional[LeaveType]


class LeaveService:
    """Leave lifecycle: submit, list/get with role scoping, approve/reject.

    ``pending -> approved`` and ``pending -> rejected`` are the only
    transitions; both targets are terminal.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        scope: ScopeResolver,
        publisher: LeaveEventPublisher,
    ):
        self._leaves = leaves
        self._users = users
        self._scope = scope
        self._publisher = publisher

    def submit(
        self,
        actor: Actor,
        *,
        leave_type: str,
        reason: str,
        start_date: Optional[date],
        end_date: Optional[date],
        today: Optional[date] = None,
    ) -> LeaveRequest:
        if actor.role != Role.STUDENT:
            raise AuthorizationError("Only students can apply for leave")

        today = today or today_local()
        errors = FieldErrors()
        parsed_type = errors.choice(leave_type, LeaveType, "leave_type")
        reason = errors.text(reason, "reason", min_len=REASON_MIN_LENGTH, max_len=REASON_MAX_LENGTH)
        if start_date is None:
            errors.add("start_date", "start_date is required")
        elif start_date < today:
            errors.add("start_date", "Date cannot be in the past")
        if end_date is None:
            errors.add("end_date", "end_date is required")
        elif start_date is not None:
            if end_date < start_date:
                errors.add("end_date", "End date must not be before start date")
            elif inclusive_days(start_date, end_date) > MAX_LEAVE_DAYS:
                errors.add("end_date", f"Leave duration cannot exceed {MAX_LEAVE_DAYS} days")
        errors.raise_if_any()

        student = self._users.get_by_id(actor.user_id)
        if not student:
            raise NotFoundError("Student data not found")

        if self._leaves.find_overlapping(
            student_id=student.user_id,
            start_date=start_date,
            end_date=end_date,
            statuses=ACTIVE_LEAVE_STATUSES,
        ):
            raise ConflictError("You already have a leave request for this period")

        request_id = self._leaves.create_leave(
            student_id=student.user_id,
            leave_type=parsed_type,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            dept=student.dept,
            hostel=student.hostel,
            days=inclusive_days(start_date, end_date),
        )
        logger.info(
            "Leave %s submitted by student_id=%s (%s..%s)", request_id, student.user_id, start_date, end_date
        )
        return self._require(request_id)

    def list_for_actor(
        self,
        actor: Actor,
        *,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
        page: PageRequest = PageRequest(),
    ) -> LeavePage:
        scope = self._scope.leave_filter(actor)
        status_filter = parse_enum(status, LeaveStatus, "status")
        type_filter = parse_enum(leave_type, LeaveType, "leave_type")

        # Approvers see actionable items first.
        if status_filter is None and actor.role in (Role.FACULTY, Role.WARDEN):
            status_filter = LeaveStatus.PENDING

        return self._page(scope, status_filter, type_filter, page)

    def list_own(
        self,
        actor: Actor,
        *,
        status: Optional[str] = None,
        leave_type: Optional[str] = None,
        page: PageRequest = PageRequest(),
    ) -> LeavePage:
        scope = ScopeFilter(student_id=int(actor.user_id))
        return self._page(
            scope,
            parse_enum(status, LeaveStatus, "status"),
            parse_enum(leave_type, LeaveType, "leave_type"),
            page,
        )

    def _page(
        self,
        scope: ScopeFilter,
        status: Optional[LeaveStatus],
        leave_type: Optional[LeaveType],
        page: PageRequest,
    ) -> LeavePage:
        items = self._leaves.list_leaves(
            scope=scope, status=status, leave_type=leave_type, offset=page.offset, limit=page.limit
        )
        total = self._leaves.count_leaves(scope=scope, status=status, leave_type=leave_type)
        return LeavePage(items=items, pagination=Pagination.build(page, total), status=status, leave_type=leave_type)

    def get_for_actor(self, actor: Actor, leave_id: int) -> LeaveRequest:
        leave = self._require(leave_id)
        self._scope.ensure_can_view(actor, leave, "You cannot view this leave request")
        return leave

    def decide(
        self,
        actor: Actor,
        leave_id: int,
        *,
        action: DecisionAction | str,
        remarks: Optional[str] = None,
    ) -> LeaveRequest:
        # Students (and unknown roles) never decide, whatever their affiliation.
        if actor.role not in APPROVER_ROLES:
            raise AuthorizationError("Only faculty, wardens and admins can decide leave requests")

        errors = FieldErrors()
        parsed_action = errors.choice(action, DecisionAction, "action")
        remarks = errors.optional_text(remarks, "remarks", max_len=REMARKS_MAX_LENGTH)
        errors.raise_if_any()

        leave = self._require(leave_id)
        if leave.status.is_terminal:
            raise ConflictError("Leave request has already been processed")
        self._scope.ensure_can_act_on(actor, leave, self._scope_message(actor))

        decided = self._leaves.decide_leave(
            request_id=leave.request_id,
            status=parsed_action.resulting_status,
            decided_by=actor.user_id,
            remarks=remarks,
        )
        if not decided:
            raise ConflictError("Leave request has already been processed")

        updated = self._require(leave.request_id)
        logger.info("Leave %s %s by user_id=%s", updated.request_id, updated.status.value, actor.user_id)

        try:
            self._publisher.publish(LeaveStatusChanged(leave=updated, decided_by=actor.user_id))
        except Exception:
            logger.exception("Could not publish status change for leave %s", updated.request_id)

        return updated

    def approve(self, actor: Actor, leave_id: int, *, remarks: Optional[str] = None) -> LeaveRequest:
        return self.decide(actor, leave_id, action=DecisionAction.APPROVE, remarks=remarks)

    def reject(self, actor: Actor, leave_id: int, *, remarks: Optional[str] = None) -> LeaveRequest:
        return self.decide(actor, leave_id, action=DecisionAction.REJECT, remarks=remarks)

    @staticmethod
    def _scope_message(actor: Actor) -> str:
        if actor.role == Role.FACULTY:
            return "You can only approve leaves from your department"
        if actor.role == Role.WARDEN:
            return "You can only approve leaves from your hostel"
        return "You cannot act on this leave request"

    def _require(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave
