"""Flask glue shared by every controller: bearer auth, role gates, JSON errors."""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Mapping

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .enums import Role
from .exceptions import AuthenticationError, AuthorizationError, DomainError, InternalError, ValidationError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "campus_leave"


def jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and dates into JSON-friendly values."""

    if is_dataclass(value) and not isinstance(value, type):
        return {k: jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return value


def json_body() -> dict:
    """Request JSON object; anything else is a validation error."""

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization header required")
    return token.strip()


def current_actor():
    return g.actor


def auth_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        container = current_app.extensions[EXTENSION_KEY]
        g.actor = container.auth_service.resolve_actor(_bearer_token())
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        @auth_required
        def wrapper(*args, **kwargs):
            if g.actor.role not in allowed:
                raise AuthorizationError("Forbidden - insufficient permissions")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        if exc.status_code >= 500:
            logger.error("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        body = {"error": (exc.name or "error").lower().replace(" ", "_"), "message": exc.description}
        return jsonify(body), exc.code or 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        err = InternalError()
        return jsonify(err.to_dict()), err.status_code
