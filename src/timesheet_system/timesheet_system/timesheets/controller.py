from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import caller_headers
from ..common.validators import require_int
from ..core.enums import HistoryAction
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def current_actor():
        return container.identity.resolve(*caller_headers())

    @app.route("/api/timesheets", methods=["GET"], endpoint="list_timesheets")
    def list_timesheets():
        actor = current_actor()
        month = request.args.get("month")
        year = request.args.get("year")
        if month or year:
            detail = container.timesheet_queries.get_for_period(actor=actor, month=month, year=year)
            return jsonify(detail.to_dict() if detail else None)
        return jsonify([t.to_dict() for t in container.timesheet_queries.list_visible(actor=actor)])

    @app.route("/api/timesheets/<timesheet_id>", methods=["GET"], endpoint="get_timesheet")
    def get_timesheet(timesheet_id: str):
        detail = container.timesheet_queries.get_timesheet(actor=current_actor(), timesheet_id=timesheet_id)
        return jsonify(detail.to_dict())

    @app.route("/api/timesheets/<timesheet_id>/history", methods=["GET"], endpoint="timesheet_history")
    def timesheet_history(timesheet_id: str):
        raw_action = request.args.get("action")
        try:
            action = HistoryAction(raw_action) if raw_action else None
        except ValueError:
            raise ValidationError(f"Unknown action: {raw_action!r}")
        limit = request.args.get("limit")
        page = container.timesheet_queries.get_history(
            actor=current_actor(),
            timesheet_id=timesheet_id,
            action=action,
            limit=require_int(limit, "limit") if limit else None,
            offset=require_int(request.args.get("offset", 0), "offset"),
        )
        return jsonify(page.to_dict())
