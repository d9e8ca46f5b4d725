from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
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
from ..kollel.controller import resolve_kollel_program_id


def _payment_date(body: dict):
    raw = body.get("payment_date")
    return parse_iso_date(raw) if raw else now_local().date()


def register(app: Flask, container: Container) -> None:
    service = container.payment_service

    @app.route("/api/payments", methods=["GET"], endpoint="payments_list")
    @api_view
    def payments_list():
        user_id = target_user_id(request.args.get("user_id"), Role.HANDLER_ADMIN)
        return jsonify({"payments": to_jsonable(list(service.list_user_payments(user_id)))})

    @app.route("/api/payments", methods=["POST"], endpoint="payments_create")
    @api_view
    def payments_create():
        body = json_body()
        payment = service.create_payment(
            current_role=current_role(),
            admin_id=current_user_id(),
            user_id=optional_int(require_arg(body, "user_id"), "user_id"),
            amount=body.get("amount"),
            payment_date=_payment_date(body),
            notes=body.get("notes"),
        )
        return jsonify({"success": True, "payment": to_jsonable(payment)})

    @app.route("/api/payments", methods=["DELETE"], endpoint="payments_delete")
    @api_view
    def payments_delete():
        payment_id = optional_int(require_arg(request.args, "id"), "id")
        service.delete_payment(current_role=current_role(), payment_id=payment_id)
        return jsonify({"success": True})

    @app.route("/api/kollel-payments", methods=["GET"], endpoint="kollel_payments_list")
    @api_view
    def kollel_payments_list():
        program_id = resolve_kollel_program_id(container, request.args.get("program_id"))
        user_id = target_user_id(request.args.get("user_id"), Role.KOLLEL_ADMIN)
        payments = service.list_user_kollel_payments(user_id, program_id)
        return jsonify({"payments": to_jsonable(list(payments))})

    @app.route("/api/kollel-payments", methods=["POST"], endpoint="kollel_payments_create")
    @api_view
    def kollel_payments_create():
        body = json_body()
        program_id = resolve_kollel_program_id(container, body.get("program_id"))
        payment = service.create_kollel_payment(
            current_role=current_role(),
            admin_id=current_user_id(),
            user_id=optional_int(require_arg(body, "user_id"), "user_id"),
            program_id=program_id,
            amount=body.get("amount"),
            payment_date=_payment_date(body),
            notes=body.get("notes"),
        )
        return jsonify({"success": True, "payment": to_jsonable(payment)})
