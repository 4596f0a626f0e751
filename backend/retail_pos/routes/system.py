# backend/retail_pos/routes/system.py
"""
System status and local upload serving.

GET / summarizes the deployment: environment, database connectivity and which
storage backend was selected at startup.
"""

import time
from flask import Blueprint, current_app, send_from_directory, jsonify
from sqlalchemy import text

from ..extensions import db
from ..services.container import get_services
from ..services.storage_service import LocalStorage
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial query.

    Returns dict with status and latency.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "Connected", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {"status": "Disconnected", "latency_ms": round(elapsed_ms, 2)}


@system_bp.get("/")
def status():
    """
    Server status summary.

    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    services = get_services()
    settings = services.settings
    database = check_database_health()

    response = {
        "status": "Server is Running",
        "environment": "Production" if settings.is_production else "Development",
        "database": database["status"],
        "database_latency_ms": database["latency_ms"],
        "storage": services.storage.describe(),
        "timestamp": to_utc_z(utcnow()),
    }
    http_status = 200 if database["status"] == "Connected" else 503
    return jsonify(response), http_status


@system_bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    """Serve images written by the local storage backend."""
    storage = get_services().storage
    if not isinstance(storage, LocalStorage):
        return jsonify({"error": "Not found"}), 404
    return send_from_directory(storage.base_path.resolve(), filename)
