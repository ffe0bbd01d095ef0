from __future__ import annotations

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from tunebox.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:  # pragma: no cover - DB failure path
        db.session.rollback()
        status = 503
        checks["database"] = f"error: {exc}"

    blob_store = current_app.extensions.get("blob_store")
    if blob_store is not None and blob_store.is_writable():
        checks["uploads"] = "ok"
    else:
        status = 503
        checks["uploads"] = "unwritable"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status


@health_bp.route("/readyz")
def readyz():
    blob_store = current_app.extensions.get("blob_store")
    ready = blob_store is not None and blob_store.base_dir.is_dir()
    payload = {
        "status": "ready" if ready else "blocked",
        "upload_dir": str(blob_store.base_dir) if blob_store is not None else None,
    }
    return jsonify(payload), 200 if ready else 503
