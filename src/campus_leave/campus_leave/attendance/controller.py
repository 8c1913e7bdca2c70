from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_day, parse_optional_day
from ..core.constants import API_PREFIX
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..core.http import auth_required, current_actor, json_body, jsonable, roles_required
from ..container import Container
from .model import AttendanceRecord, AttendanceStats


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "student_id": record.student_id,
        "date": record.attendance_date.isoformat(),
        "present": record.present,
        "subject": record.subject,
        "period": record.period,
        "marked_by": record.marked_by,
        "marked_by_name": record.marked_by_name,
        "created_at": jsonable(record.created_at),
    }


def stats_to_dict(stats: AttendanceStats) -> dict:
    return jsonable(stats)


def _int_arg(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name}", fields={name: f"{name} must be an integer"})


def _present_flag(data: dict) -> bool:
    value = data.get("present")
    if not isinstance(value, bool):
        raise ValidationError("Validation failed", fields={"present": "present must be true or false"})
    return value


def _student_id(data: dict) -> int:
    value = data.get("student_id")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Validation failed", fields={"student_id": "student_id must be an integer"})
    return value


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @roles_required(Role.FACULTY)
    def attendance_mark():
        data = json_body()
        record = container.attendance_service.mark(
            current_actor(),
            student_id=_student_id(data),
            attendance_date=parse_day(data.get("date"), "date"),
            present=_present_flag(data),
            subject=data.get("subject"),
            period=data.get("period"),
        )
        return jsonify({"message": "Attendance marked successfully", "attendance": record_to_dict(record)}), 201

    @app.route(f"{API_PREFIX}/attendance/", methods=["GET"], endpoint="attendance_view")
    @auth_required
    def attendance_view():
        records = container.attendance_service.view(
            current_actor(),
            student_id=_int_arg("student_id"),
            start_date=parse_optional_day(request.args.get("start_date"), "start_date"),
            end_date=parse_optional_day(request.args.get("end_date"), "end_date"),
            subject=request.args.get("subject"),
        )
        return jsonify({"attendance": [record_to_dict(r) for r in records], "total": len(records)})

    @app.route(f"{API_PREFIX}/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @auth_required
    def attendance_stats():
        stats = container.attendance_service.stats(current_actor(), student_id=_int_arg("student_id"))
        return jsonify({"stats": stats_to_dict(stats)})

    @app.route(f"{API_PREFIX}/attendance/department", methods=["GET"], endpoint="attendance_department")
    @roles_required(Role.FACULTY, Role.ADMIN)
    def attendance_department():
        result = container.attendance_service.department_stats(
            current_actor(), department=request.args.get("department")
        )
        return jsonify(
            {
                "department": result.department,
                "stats": [stats_to_dict(s) for s in result.students],
                "total_students": result.total_students,
            }
        )
