from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import api_view, current_role, target_user_id, to_jsonable
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError


def _require_handler_admin() -> None:
    if current_role() != Role.HANDLER_ADMIN:
        raise AuthorizationError("Handler admin access required")


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger_service
    incentives = container.incentive_service

    @app.route("/api/earnings", methods=["GET"], endpoint="earnings_balance")
    @api_view
    def earnings_balance():
        user_id = target_user_id(request.args.get("user_id"), Role.HANDLER_ADMIN)
        balance = ledger.get_user_earnings(user_id)
        return jsonify({"user_id": user_id, **balance.to_dict()})

    @app.route("/api/admin/earnings", methods=["GET"], endpoint="admin_earnings")
    @api_view
    def admin_earnings():
        _require_handler_admin()
        rows = ledger.get_all_users_earnings()
        return jsonify({"users": [{"user_id": r.user_id, **r.balance.to_dict()} for r in rows]})

    @app.route("/api/admin/attendance-summary", methods=["GET"], endpoint="admin_attendance_summary")
    @api_view
    def admin_attendance_summary():
        _require_handler_admin()
        return jsonify({"summary": to_jsonable(incentives.get_global_attendance_summary())})
