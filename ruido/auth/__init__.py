#!/usr/bin/env python
"""Flask-Login integration.

Sessions are owned by the upstream auth gateway, which forwards the acting
profile id in a trusted header. This module only resolves that header to a
``Profile`` so routes can use ``current_user`` and ``login_required``.
"""

from __future__ import annotations

from flask import jsonify
from flask_login import LoginManager

login_manager = LoginManager()
login_manager.login_message = None


def init_auth(app):
    """Attach Flask-Login to the Flask app."""
    from ruido.database.db_manager import Profile, db

    login_manager.init_app(app)
    header_name = app.config.get("PROFILE_HEADER", "X-Profile-Id")

    @login_manager.user_loader
    def load_user(profile_id: str) -> Profile | None:
        return db.session.get(Profile, profile_id)

    @login_manager.request_loader
    def load_user_from_request(request) -> Profile | None:
        profile_id = (request.headers.get(header_name) or "").strip()
        if not profile_id:
            return None
        return db.session.get(Profile, profile_id)

    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify({"error": "authentication_required"}), 401

    return login_manager


__all__ = ["login_manager", "init_auth"]
