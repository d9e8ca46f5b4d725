from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import api_view, to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    programs = container.programs_repo

    @app.route("/api/programs", methods=["GET"], endpoint="programs_list")
    @api_view
    def programs_list():
        return jsonify({"programs": to_jsonable(list(programs.list_active()))})
