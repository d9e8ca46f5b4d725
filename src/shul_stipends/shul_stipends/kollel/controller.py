from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    api_view,
    current_role,
    current_user_id,
    json_body,
    optional_int,
    require_arg,
    target_user_id,
    to_jsonable,
)
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def resolve_kollel_program_id(container: Container, raw: Any) -> int:
    """Explicit program_id when given, else the configured default kollel."""
    service = container.kollel_service
    program_id = optional_int(raw, "program_id")
    if program_id is not None:
        program = service.find_program(program_id)
    else:
        program = service.find_program_by_name(container.default_kollel_program)
    if program is None:
        raise ValidationError("Kollel program not found")
    return program.program_id


def _require_kollel_admin() -> None:
    if current_role() != Role.KOLLEL_ADMIN:
        raise AuthorizationError("Kollel admin access required")


def register(app: Flask, container: Container) -> None:
    service = container.kollel_service
    ledger = container.ledger_service

    @app.route("/api/kollel-attendance", methods=["POST"], endpoint="kollel_attendance_submit")
    @api_view
    def kollel_attendance_submit():
        body = json_body()
        program_id = resolve_kollel_program_id(container, body.get("program_id"))
        fact = service.submit_kollel_attendance(
            current_user_id(),
            program_id,
            parse_iso_date(require_arg(body, "date")),
            arrival_time=body.get("arrival_time") or "",
            departure_time=body.get("departure_time") or "",
        )
        return jsonify({"success": True, "attendance": to_jsonable(fact)})

    @app.route("/api/kollel-attendance", methods=["GET"], endpoint="kollel_attendance_get")
    @api_view
    def kollel_attendance_get():
        program_id = resolve_kollel_program_id(container, request.args.get("program_id"))
        work_date = parse_iso_date(require_arg(request.args, "date"))
        fact = service.get_kollel_attendance_by_date(current_user_id(), program_id, work_date)
        return jsonify({"attendance": to_jsonable(fact)})

    @app.route("/api/kollel-attendance", methods=["DELETE"], endpoint="kollel_attendance_delete")
    @api_view
    def kollel_attendance_delete():
        program_id = resolve_kollel_program_id(container, request.args.get("program_id"))
        work_date = parse_iso_date(require_arg(request.args, "date"))
        service.delete_kollel_attendance(current_user_id(), program_id, work_date)
        return jsonify({"success": True})

    @app.route("/api/kollel-earnings", methods=["GET"], endpoint="kollel_earnings_get")
    @api_view
    def kollel_earnings_get():
        program_id = resolve_kollel_program_id(container, request.args.get("program_id"))

        if request.args.get("all_users") in ("1", "true"):
            _require_kollel_admin()
            rows = ledger.get_all_users_kollel_earnings(program_id)
            return jsonify(
                {"program_id": program_id, "users": [{"user_id": r.user_id, **r.balance.to_dict()} for r in rows]}
            )

        user_id = target_user_id(request.args.get("user_id"), Role.KOLLEL_ADMIN)
        year = optional_int(request.args.get("year"), "year")
        month = optional_int(request.args.get("month"), "month")
        if year is not None and month is not None:
            entry = service.calculate_kollel_earnings(user_id, program_id, year, month)
            return jsonify({"earnings": to_jsonable(entry)})

        result = ledger.get_user_kollel_earnings(user_id, program_id)
        return jsonify(
            {
                "program_id": program_id,
                **result.balance.to_dict(),
                "monthly_earnings": to_jsonable(result.monthly_earnings),
                "daily_attendance": to_jsonable(result.daily_attendance),
            }
        )

    @app.route("/api/kollel-earnings", methods=["POST"], endpoint="kollel_earnings_calculate")
    @api_view
    def kollel_earnings_calculate():
        body = json_body()
        program_id = resolve_kollel_program_id(container, body.get("program_id"))
        user_id = target_user_id(body.get("user_id"), Role.KOLLEL_ADMIN)
        entry = service.calculate_kollel_earnings(
            user_id,
            program_id,
            optional_int(require_arg(body, "year"), "year"),
            optional_int(require_arg(body, "month"), "month"),
        )
        return jsonify({"success": True, "earnings": to_jsonable(entry)})

    @app.route("/api/kollel-earnings/recalculate", methods=["POST"], endpoint="kollel_earnings_recalculate")
    @api_view
    def kollel_earnings_recalculate():
        _require_kollel_admin()
        body = json_body()
        program_id = resolve_kollel_program_id(container, body.get("program_id"))
        entries = service.recalculate_monthly_earnings(
            program_id,
            optional_int(require_arg(body, "year"), "year"),
            optional_int(require_arg(body, "month"), "month"),
        )
        return jsonify({"success": True, "count": len(entries), "earnings": to_jsonable(entries)})
