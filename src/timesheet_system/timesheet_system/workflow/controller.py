from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import caller_headers, json_body
from ..core.enums import WorkflowAction
from ..container import Container
from .commands import parse_bulk_decision, parse_bulk_escalation, parse_command


def register(app: Flask, container: Container) -> None:
    engine = container.workflow_engine

    def current_actor():
        return container.identity.resolve(*caller_headers())

    def transition(action: WorkflowAction, timesheet_id: str):
        actor = current_actor()
        payload = dict(json_body(), timesheetId=timesheet_id)
        command = parse_command(action, payload)
        handler = {
            WorkflowAction.SUBMIT: engine.submit,
            WorkflowAction.APPROVE: engine.approve,
            WorkflowAction.REJECT: engine.reject,
            WorkflowAction.SUBMIT_TO_ADMIN: engine.submit_to_admin,
            WorkflowAction.FINISH: engine.finish,
        }[action]
        ts = handler(actor=actor, command=command)
        return jsonify(ts.to_dict())

    @app.route("/api/timesheets/<timesheet_id>/submit", methods=["POST"], endpoint="submit_timesheet")
    def submit_timesheet(timesheet_id: str):
        return transition(WorkflowAction.SUBMIT, timesheet_id)

    @app.route("/api/timesheets/<timesheet_id>/approve", methods=["POST"], endpoint="approve_timesheet")
    def approve_timesheet(timesheet_id: str):
        return transition(WorkflowAction.APPROVE, timesheet_id)

    @app.route("/api/timesheets/<timesheet_id>/reject", methods=["POST"], endpoint="reject_timesheet")
    def reject_timesheet(timesheet_id: str):
        return transition(WorkflowAction.REJECT, timesheet_id)

    @app.route("/api/timesheets/<timesheet_id>/submit-to-admin", methods=["POST"], endpoint="submit_to_admin")
    def submit_to_admin(timesheet_id: str):
        return transition(WorkflowAction.SUBMIT_TO_ADMIN, timesheet_id)

    @app.route("/api/timesheets/<timesheet_id>/finish", methods=["POST"], endpoint="finish_timesheet")
    def finish_timesheet(timesheet_id: str):
        return transition(WorkflowAction.FINISH, timesheet_id)

    @app.route("/api/entries/<entry_id>/approved-hours", methods=["POST"], endpoint="modify_entry_hours")
    def modify_entry_hours(entry_id: str):
        actor = current_actor()
        command = parse_command(WorkflowAction.MODIFY_ENTRY_HOURS, dict(json_body(), entryId=entry_id))
        return jsonify({"id": engine.modify_entry_hours(actor=actor, command=command)})

    @app.route("/api/approvals", methods=["GET"], endpoint="approvable_timesheets")
    def approvable_timesheets():
        summaries = engine.get_approvable_timesheets(actor=current_actor())
        return jsonify([s.to_dict() for s in summaries])

    @app.route("/api/approvals/bulk-approve", methods=["POST"], endpoint="bulk_approve")
    def bulk_approve():
        actor = current_actor()
        command = parse_bulk_decision(json_body(), comment_required=False)
        return jsonify(engine.bulk_approve(actor=actor, command=command).to_dict())

    @app.route("/api/approvals/bulk-reject", methods=["POST"], endpoint="bulk_reject")
    def bulk_reject():
        actor = current_actor()
        command = parse_bulk_decision(json_body(), comment_required=True)
        return jsonify(engine.bulk_reject(actor=actor, command=command).to_dict())

    @app.route("/api/approvals/bulk-submit-to-admin", methods=["POST"], endpoint="bulk_submit_to_admin")
    def bulk_submit_to_admin():
        actor = current_actor()
        command = parse_bulk_escalation(json_body())
        return jsonify(engine.bulk_submit_to_admin(actor=actor, command=command).to_dict())
