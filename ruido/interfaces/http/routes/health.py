from __future__ import annotations

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ruido.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


def _search_extension_status() -> str:
    dialect = db.engine.dialect.name
    if dialect != "postgresql":
        return f"emulated ({dialect})"
    installed = db.session.execute(
        text("SELECT 1 FROM pg_extension WHERE extname = 'pg_trgm'")
    ).first()
    return "ok" if installed else "missing pg_trgm"


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
        checks["search"] = _search_extension_status()
    except SQLAlchemyError as exc:  # pragma: no cover - DB failure path
        db.session.rollback()
        status = 503
        checks["database"] = f"error: {exc}"

    if checks.get("search", "").startswith("missing"):
        status = 503

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
