from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import caller_headers, json_body
from ..container import Container
from .model import parse_drafts


def register(app: Flask, container: Container) -> None:
    service = container.reconciliation_service

    def current_actor():
        return container.identity.resolve(*caller_headers())

    @app.route("/api/entries/bulk-save", methods=["POST"], endpoint="bulk_save_entries")
    def bulk_save_entries():
        """Body: ``{"timesheetId": ...}`` or ``{"month": m, "year": y}`` plus ``entries``."""
        actor = current_actor()
        data = json_body()
        drafts, rejected = parse_drafts(data.get("entries"))

        if data.get("timesheetId"):
            report = service.bulk_save(
                actor=actor,
                timesheet_id=str(data["timesheetId"]),
                drafts=drafts,
                rejected=rejected,
            )
        else:
            report = service.bulk_save_for_period(
                actor=actor,
                month=data.get("month"),
                year=data.get("year"),
                drafts=drafts,
                rejected=rejected,
            )
        return jsonify(report.to_dict())

    @app.route("/api/entries/<entry_id>", methods=["DELETE"], endpoint="delete_entry")
    def delete_entry(entry_id: str):
        service.delete_entry(actor=current_actor(), entry_id=entry_id)
        return "", 204
