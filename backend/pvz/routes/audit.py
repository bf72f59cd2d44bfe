# Overview: Flask API routes for the audit trail (read-only).

from flask import Blueprint, jsonify, request

from ..errors import InvalidPaginationError, ValidationError
from ..services import audit_service
from ..validation import parse_uuid
from .common import error_response, get_offset_limit


audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit")


@audit_bp.get("")
def list_audit_events_route():
    """
    Query parameters:
    - pvz_id: Filter by pickup point
    - event_type: Filter by event type (e.g., reception.opened)
    - offset / limit: Pagination
    """
    try:
        offset, limit = get_offset_limit()
        pvz_id = request.args.get("pvz_id")
        pickup_point_id = parse_uuid(pvz_id, "pvz_id") if pvz_id else None
    except (InvalidPaginationError, ValidationError) as e:
        return error_response(e, 400)

    events = audit_service.list_audit_events(
        pickup_point_id=pickup_point_id,
        event_type=request.args.get("event_type"),
        offset=offset,
        limit=limit,
    )
    return jsonify({"items": [e.to_dict() for e in events]})
