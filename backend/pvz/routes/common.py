# Overview: Shared helpers for API routes; JSON error bodies and query parsing.

from __future__ import annotations

from flask import current_app, jsonify, request

from ..errors import CoordinationError, PvzError, RollbackFailure
from ..validation import validate_offset_limit


def error_response(exc: PvzError, status: int):
    return jsonify({"error": exc.code, "message": str(exc)}), status


def coordination_error_response(exc: CoordinationError, action: str):
    """
    500 for a unit of work that could not commit or roll back.

    Rollback failures are logged as critical: storage state is not known.
    """
    if isinstance(exc, RollbackFailure):
        current_app.logger.critical("Failed to %s: rollback failed", action, exc_info=exc)
    else:
        current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": exc.code, "message": "Internal server error"}), 500


def internal_error_response(action: str):
    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "internal_error", "message": "Internal server error"}), 500


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def get_offset_limit() -> tuple[int, int]:
    """Read ?offset=&limit= with config defaults; raises InvalidPaginationError."""
    offset = request.args.get("offset", 0, type=int)
    limit = request.args.get("limit", current_app.config.get("DEFAULT_PAGE_LIMIT", 10), type=int)
    return validate_offset_limit(offset, limit)
