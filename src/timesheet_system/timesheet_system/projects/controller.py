from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import caller_headers, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/projects", methods=["GET"], endpoint="list_projects")
    def list_projects():
        actor = container.identity.resolve(*caller_headers())
        projects = container.project_service.list_projects(owner_id=actor.user_id)
        return jsonify([p.to_dict() for p in projects])

    @app.route("/api/projects", methods=["POST"], endpoint="create_project")
    def create_project():
        principal, override = caller_headers()
        data = json_body()
        project = container.project_service.create_project(
            principal=principal,
            override=override,
            name=data.get("name", ""),
            code=data.get("code"),
        )
        return jsonify(project.to_dict()), 201
