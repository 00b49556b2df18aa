from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import caller_headers
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/me", methods=["GET"], endpoint="user_info")
    def user_info():
        principal, override = caller_headers()
        return jsonify(container.identity.user_info(principal, override))
