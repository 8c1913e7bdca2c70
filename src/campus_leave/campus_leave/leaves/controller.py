from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_day
from ..common.pagination import PageRequest
from ..core.constants import API_PREFIX
from ..core.enums import DecisionAction, Role
from ..core.exceptions import ValidationError
from ..core.http import auth_required, current_actor, json_body, jsonable, roles_required
from ..container import Container
from .model import LeaveRequest
from .service import LeavePage


def leave_to_dict(leave: LeaveRequest) -> dict:
    return {
        "id": leave.request_id,
        "student_id": leave.student_id,
        "student_name": leave.student_name,
        "leave_type": leave.leave_type.value,
        "reason": leave.reason,
        "start_date": leave.start_date.isoformat(),
        "end_date": leave.end_date.isoformat(),
        "days": leave.days,
        "status": leave.status.value,
        "dept": leave.dept,
        "hostel": leave.hostel,
        "approved_by": leave.approved_by,
        "remarks": leave.remarks,
        "created_at": jsonable(leave.created_at),
        "updated_at": jsonable(leave.updated_at),
    }


def _page_to_dict(result: LeavePage) -> dict:
    return {
        "leaves": [leave_to_dict(x) for x in result.items],
        "pagination": result.pagination.to_dict(),
        "filters": {
            "status": result.status.value if result.status else None,
            "leave_type": result.leave_type.value if result.leave_type else None,
        },
    }


def _collect_dates(data: dict) -> tuple:
    fields: dict[str, str] = {}
    parsed = []
    for name in ("start_date", "end_date"):
        try:
            parsed.append(parse_day(data.get(name), name))
        except ValidationError as e:
            fields.update(e.fields)
            parsed.append(None)
    if fields:
        raise ValidationError(fields=fields)
    return tuple(parsed)


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/leaves/apply", methods=["POST"], endpoint="leaves_apply")
    @roles_required(Role.STUDENT)
    def leaves_apply():
        data = json_body()
        start_date, end_date = _collect_dates(data)
        leave = container.leave_service.submit(
            current_actor(),
            leave_type=data.get("leave_type", ""),
            reason=data.get("reason", ""),
            start_date=start_date,
            end_date=end_date,
        )
        return jsonify({"message": "Leave application submitted successfully", "leave": leave_to_dict(leave)}), 201

    @app.route(f"{API_PREFIX}/leaves/", methods=["GET"], endpoint="leaves_list")
    @auth_required
    def leaves_list():
        result = container.leave_service.list_for_actor(
            current_actor(),
            status=request.args.get("status"),
            leave_type=request.args.get("leave_type"),
            page=PageRequest.from_args(request.args),
        )
        return jsonify(_page_to_dict(result))

    @app.route(f"{API_PREFIX}/leaves/my", methods=["GET"], endpoint="leaves_my")
    @auth_required
    def leaves_my():
        result = container.leave_service.list_own(
            current_actor(),
            status=request.args.get("status"),
            leave_type=request.args.get("leave_type"),
            page=PageRequest.from_args(request.args),
        )
        return jsonify(_page_to_dict(result))

    @app.route(f"{API_PREFIX}/leaves/<int:leave_id>", methods=["GET"], endpoint="leaves_get")
    @auth_required
    def leaves_get(leave_id: int):
        leave = container.leave_service.get_for_actor(current_actor(), leave_id)
        return jsonify({"leave": leave_to_dict(leave)})

    @app.route(
        f"{API_PREFIX}/leaves/<int:leave_id>/<any(approve, reject):action>",
        methods=["PUT"],
        endpoint="leaves_decide",
    )
    @roles_required(Role.FACULTY, Role.WARDEN, Role.ADMIN)
    def leaves_decide(leave_id: int, action: str):
        data = request.get_json(silent=True) or {}
        leave = container.leave_service.decide(
            current_actor(),
            leave_id,
            action=DecisionAction(action),
            remarks=data.get("remarks") if isinstance(data, dict) else None,
        )
        return jsonify({"message": f"Leave {leave.status.value} successfully", "leave": leave_to_dict(leave)})
