"""Helpers shared by the Flask controllers.

Sessions are established by the outer application; controllers only read
`session["user_id"]` and `session["role"]`.
"""
from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def api_view(view):
    """Require a session and translate domain errors into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Not authenticated"}), 401
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        except AuthorizationError as e:
            return jsonify({"error": str(e)}), 403
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"error": "Internal server error"}), 500

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role", Role.MEMBER.value))
    except ValueError:
        return Role.MEMBER


def target_user_id(requested: Any, admin_role: Role) -> int:
    """Admins of the given family may act on another member; everyone else gets themselves."""
    if requested not in (None, "") and current_role() == admin_role:
        try:
            return int(requested)
        except (TypeError, ValueError):
            raise ValidationError("Invalid user_id")
    return current_user_id()


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def require_arg(source: dict, name: str) -> str:
    value = source.get(name)
    if value in (None, ""):
        raise ValidationError(f"{name} is required")
    return str(value)


def optional_int(value: Any, name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}")


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    return value
