# Overview: Flask API routes for pickup points; parses input and returns JSON responses.

"""
Pickup Point Routes

- POST  /api/pvz                              create {city}
- GET   /api/pvz                              list (offset/limit), or with receptions
                                              when start_date/end_date/page is given
- GET   /api/pvz/<id>                         fetch one
- PATCH /api/pvz/<id>                         rename {city}
- GET   /api/pvz/<id>/open_reception          current open reception
- POST  /api/pvz/<id>/close_last_reception    close the open reception
- POST  /api/pvz/<id>/delete_last_product     pop the tail product of the open reception
"""

import uuid

from flask import Blueprint, current_app, jsonify, request

from ..errors import (
    CoordinationError,
    InvalidCityError,
    InvalidDateRangeError,
    InvalidPaginationError,
    NoOpenReceptionError,
    NoProductsToRemoveError,
    PickupPointNotFoundError,
)
from ..services import inventory_service, pickup_point_service, reception_service
from ..validation import parse_datetime_arg, validate_page_limit
from .common import (
    coordination_error_response,
    error_response,
    get_json_body,
    get_offset_limit,
    internal_error_response,
)


pickup_points_bp = Blueprint("pickup_points", __name__, url_prefix="/api/pvz")


@pickup_points_bp.post("")
def create_pickup_point_route():
    """
    Create a new pickup point.

    Request body:
    {
        "city": "Москва"   // required
    }

    Returns:
        Created PickupPoint object
    """
    data = get_json_body()

    try:
        pickup_point = pickup_point_service.create_pickup_point(data.get("city"))
        return jsonify(pickup_point.to_dict()), 201
    except InvalidCityError as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "create pickup point")
    except Exception:
        return internal_error_response("create pickup point")


@pickup_points_bp.get("")
def list_pickup_points_route():
    """
    List pickup points.

    Query parameters (plain listing):
    - offset: Pagination offset (default: 0)
    - limit: Maximum results (default: DEFAULT_PAGE_LIMIT)

    Query parameters (with receptions and products):
    - start_date / end_date: ISO-8601 bounds on reception date_time (inclusive)
    - page: 1-based page (default: 1)
    - limit: Page size (default: DEFAULT_PAGE_LIMIT)
    """
    with_receptions = any(k in request.args for k in ("start_date", "end_date", "page"))

    try:
        if not with_receptions:
            offset, limit = get_offset_limit()
            items = pickup_point_service.list_pickup_points(offset=offset, limit=limit)
            return jsonify({
                "items": [p.to_dict() for p in items],
                "offset": offset,
                "limit": limit,
            })

        start_date = parse_datetime_arg(request.args.get("start_date"), "start_date")
        end_date = parse_datetime_arg(request.args.get("end_date"), "end_date")
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", current_app.config.get("DEFAULT_PAGE_LIMIT", 10), type=int)
        offset, limit = validate_page_limit(page, limit)

        items = pickup_point_service.list_pickup_points_with_receptions(
            start_date=start_date,
            end_date=end_date,
            offset=offset,
            limit=limit,
        )
        return jsonify({"items": items, "page": page, "limit": limit})
    except (InvalidPaginationError, InvalidDateRangeError) as e:
        return error_response(e, 400)


@pickup_points_bp.get("/<uuid:pvz_id>")
def get_pickup_point_route(pvz_id: uuid.UUID):
    try:
        pickup_point = pickup_point_service.get_pickup_point(pvz_id)
        return jsonify(pickup_point.to_dict())
    except PickupPointNotFoundError as e:
        return error_response(e, 404)


@pickup_points_bp.patch("/<uuid:pvz_id>")
def rename_pickup_point_route(pvz_id: uuid.UUID):
    """
    Rename a pickup point. The city label is its only mutable field.

    Request body:
    {
        "city": "Казань"   // required
    }
    """
    data = get_json_body()

    try:
        pickup_point = pickup_point_service.rename_pickup_point(pvz_id, data.get("city"))
        return jsonify(pickup_point.to_dict())
    except PickupPointNotFoundError as e:
        return error_response(e, 404)
    except InvalidCityError as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "rename pickup point")
    except Exception:
        return internal_error_response("rename pickup point")


@pickup_points_bp.get("/<uuid:pvz_id>/open_reception")
def get_open_reception_route(pvz_id: uuid.UUID):
    try:
        reception = reception_service.get_open_reception(pvz_id)
        return jsonify(reception.to_dict())
    except NoOpenReceptionError as e:
        return error_response(e, 404)


@pickup_points_bp.post("/<uuid:pvz_id>/close_last_reception")
def close_last_reception_route(pvz_id: uuid.UUID):
    """
    Close the open reception of a pickup point.

    Not idempotent: 409 when there is no open reception.

    Returns:
        Closed Reception object
    """
    try:
        reception = reception_service.close_last_reception(pvz_id)
        return jsonify(reception.to_dict())
    except NoOpenReceptionError as e:
        return error_response(e, 409)
    except CoordinationError as e:
        return coordination_error_response(e, "close reception")
    except Exception:
        return internal_error_response("close reception")


@pickup_points_bp.post("/<uuid:pvz_id>/delete_last_product")
def delete_last_product_route(pvz_id: uuid.UUID):
    """
    Remove the most recently added product from the open reception.

    Returns:
        Removed Product object
    """
    try:
        product = inventory_service.remove_last_product_from_open_reception(pvz_id)
        return jsonify(product.to_dict())
    except (NoOpenReceptionError, NoProductsToRemoveError) as e:
        return error_response(e, 409)
    except CoordinationError as e:
        return coordination_error_response(e, "delete last product")
    except Exception:
        return internal_error_response("delete last product")
