# backend/storefront/routes/system.py
"""System health endpoint."""

import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from ..extensions import db
from storefront.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "response_time_ms": round((time.time() - start_time) * 1000, 2)}
    except Exception as e:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {"status": "unhealthy", "error": str(e)}


@system_bp.get("/health")
def health():
    """
    Liveness plus database connectivity.

    Returns 200 when the database answers, 503 otherwise.
    """
    database = check_database_health()
    ok = database["status"] == "healthy"
    return jsonify({
        "status": "OK" if ok else "DEGRADED",
        "message": "Server is running",
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }), 200 if ok else 503
