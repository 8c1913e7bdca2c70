from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.pagination import PageRequest
from ..core.constants import API_PREFIX
from ..core.enums import Role
from ..core.http import auth_required, current_actor, json_body, jsonable, roles_required
from ..container import Container
from .model import User


def user_to_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "dept": user.dept,
        "hostel": user.hostel,
        "phone": user.phone,
        "student_id": user.student_number,
        "is_active": user.is_active,
        "last_login": jsonable(user.last_login),
        "created_at": jsonable(user.created_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        user = container.auth_service.register(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=data.get("role", ""),
            dept=data.get("dept", ""),
            hostel=data.get("hostel"),
            phone=data.get("phone"),
            student_number=data.get("student_id"),
        )
        return jsonify({"message": "User registered successfully", "user": user_to_dict(user)}), 201

    @app.route(f"{API_PREFIX}/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        result = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        return jsonify({"message": "Login successful", "token": result.token, "user": user_to_dict(result.user)})

    @app.route(f"{API_PREFIX}/users/me", methods=["GET"], endpoint="users_me")
    @auth_required
    def users_me():
        user = container.user_service.get_profile(current_actor())
        return jsonify({"user": user_to_dict(user)})

    @app.route(f"{API_PREFIX}/users/me/password", methods=["PUT"], endpoint="users_change_password")
    @auth_required
    def users_change_password():
        data = json_body()
        container.user_service.change_password(
            current_actor(),
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
        )
        return jsonify({"message": "Password changed successfully"})

    @app.route(f"{API_PREFIX}/users/", methods=["GET"], endpoint="users_list")
    @roles_required(Role.ADMIN)
    def users_list():
        result = container.user_service.list_users(
            current_actor(),
            role=request.args.get("role"),
            page=PageRequest.from_args(request.args),
        )
        return jsonify({"users": [user_to_dict(u) for u in result.items], "pagination": result.pagination.to_dict()})

    @app.route(f"{API_PREFIX}/users/<int:user_id>/deactivate", methods=["PUT"], endpoint="users_deactivate")
    @roles_required(Role.ADMIN)
    def users_deactivate(user_id: int):
        container.user_service.deactivate(current_actor(), user_id=user_id)
        return jsonify({"message": "User deactivated successfully"})
