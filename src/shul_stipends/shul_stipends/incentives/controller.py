from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import api_view, current_user_id, json_body, optional_int, require_arg, to_jsonable
from ..container import Container
from .model import AttendanceInput


def register(app: Flask, container: Container) -> None:
    service = container.incentive_service

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_submit")
    @api_view
    def attendance_submit():
        body = json_body()
        work_date = parse_iso_date(require_arg(body, "date"))
        result = service.submit_attendance(
            current_user_id(),
            work_date,
            AttendanceInput.from_mapping(body),
            program_id=optional_int(body.get("program_id"), "program_id"),
        )
        return jsonify({"success": True, **to_jsonable(result)})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_get")
    @api_view
    def attendance_get():
        work_date = parse_iso_date(require_arg(request.args, "date"))
        fact = service.get_attendance_by_date(
            current_user_id(),
            work_date,
            optional_int(request.args.get("program_id"), "program_id"),
        )
        return jsonify({"attendance": to_jsonable(fact)})

    @app.route("/api/attendance", methods=["DELETE"], endpoint="attendance_delete")
    @api_view
    def attendance_delete():
        work_date = parse_iso_date(require_arg(request.args, "date"))
        service.delete_attendance(current_user_id(), work_date)
        return jsonify({"success": True})

    @app.route("/api/attendance/range", methods=["GET"], endpoint="attendance_range")
    @api_view
    def attendance_range():
        start = parse_iso_date(require_arg(request.args, "start"))
        end = parse_iso_date(require_arg(request.args, "end"))
        facts = service.get_attendance_range(current_user_id(), start, end)
        return jsonify({"attendance": to_jsonable(list(facts))})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @api_view
    def attendance_stats():
        start = parse_iso_date(require_arg(request.args, "start"))
        end = parse_iso_date(require_arg(request.args, "end"))
        stats = service.get_attendance_stats(current_user_id(), start, end)
        return jsonify({"stats": to_jsonable(stats)})

    @app.route("/api/earnings/history", methods=["GET"], endpoint="earnings_history")
    @api_view
    def earnings_history():
        rows = service.get_earnings_history(current_user_id())
        return jsonify(
            {
                "earnings": [
                    {**to_jsonable(r.entry), "program_id": r.program_id, "program_name": r.program_name}
                    for r in rows
                ]
            }
        )
