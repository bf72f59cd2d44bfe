# Overview: Health probe for deployments; database reachability plus reception counters.

import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import PickupPoint, Reception, STATUS_IN_PROGRESS

system_bp = Blueprint("system", __name__)


def probe_database() -> dict:
    """
    Round-trip the database and report how many receptions are open.

    Returns a dict with "status" of healthy/unhealthy and the probe latency.
    """
    started = time.perf_counter()
    try:
        db.session.execute(text("SELECT 1"))
        details = {
            "pickup_points": db.session.query(PickupPoint).count(),
            "open_receptions": db.session.query(Reception)
            .filter(Reception.status == STATUS_IN_PROGRESS)
            .count(),
        }
        status = "healthy"
    except SQLAlchemyError:
        current_app.logger.exception("Database health probe failed")
        db.session.rollback()
        details = None
        status = "unhealthy"

    result = {
        "status": status,
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
    }
    if details is not None:
        result["details"] = details
    else:
        result["error"] = "Database error"
    return result


@system_bp.get("/health")
def health_route():
    result = probe_database()
    return jsonify(result), 200 if result["status"] == "healthy" else 503
