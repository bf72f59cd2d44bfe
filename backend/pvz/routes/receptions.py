# Overview: Flask API routes for receptions and their inventory; parses input and returns JSON responses.

"""
Reception Routes

Lifecycle: open (POST /api/receptions) -> close (POST /api/pvz/<id>/close_last_reception).
Products may be added or popped (LIFO) only while the reception is in_progress.
"""

import uuid

from flask import Blueprint, jsonify, request

from ..errors import (
    CoordinationError,
    InvalidPaginationError,
    InventoryConflictError,
    InvalidProductTypeError,
    NoProductsToRemoveError,
    PickupPointNotFoundError,
    ReceptionAlreadyClosedError,
    ReceptionAlreadyOpenError,
    ReceptionNotFoundError,
    ValidationError,
)
from ..services import inventory_service, reception_service
from ..validation import parse_uuid
from .common import (
    coordination_error_response,
    error_response,
    get_json_body,
    get_offset_limit,
    internal_error_response,
)


receptions_bp = Blueprint("receptions", __name__, url_prefix="/api/receptions")


@receptions_bp.post("")
def open_reception_route():
    """
    Open a reception at a pickup point.

    Request body:
    {
        "pvz_id": "<uuid>"   // required
    }

    Returns:
        Created Reception object (status in_progress)
    """
    data = get_json_body()

    try:
        pvz_id = parse_uuid(data.get("pvz_id"), "pvz_id")
        reception = reception_service.open_reception(pvz_id)
        return jsonify(reception.to_dict()), 201
    except PickupPointNotFoundError as e:
        return error_response(e, 404)
    except ReceptionAlreadyOpenError as e:
        return error_response(e, 409)
    except ValidationError as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "open reception")
    except Exception:
        return internal_error_response("open reception")


@receptions_bp.get("")
def list_receptions_route():
    """
    Query parameters:
    - pvz_id: Filter by pickup point
    - offset / limit: Pagination
    """
    try:
        offset, limit = get_offset_limit()
        pvz_id = request.args.get("pvz_id")
        pickup_point_id = parse_uuid(pvz_id, "pvz_id") if pvz_id else None
    except (InvalidPaginationError, ValidationError) as e:
        return error_response(e, 400)

    items = reception_service.list_receptions(
        pickup_point_id=pickup_point_id,
        offset=offset,
        limit=limit,
    )
    return jsonify({
        "items": [r.to_dict() for r in items],
        "offset": offset,
        "limit": limit,
    })


@receptions_bp.get("/<uuid:reception_id>")
def get_reception_route(reception_id: uuid.UUID):
    try:
        reception = reception_service.get_reception(reception_id)
        return jsonify(reception.to_dict())
    except ReceptionNotFoundError as e:
        return error_response(e, 404)


@receptions_bp.get("/<uuid:reception_id>/products")
def list_reception_products_route(reception_id: uuid.UUID):
    """Products of a reception in insertion order."""
    try:
        reception_service.get_reception(reception_id)
    except ReceptionNotFoundError as e:
        return error_response(e, 404)

    products = inventory_service.get_products_by_reception(reception_id)
    return jsonify({"items": [p.to_dict() for p in products]})


@receptions_bp.post("/<uuid:reception_id>/products")
def add_product_route(reception_id: uuid.UUID):
    """
    Add one product.

    Request body:
    {
        "type": "electronics"   // required: electronics, clothing, food, other
    }
    """
    data = get_json_body()

    try:
        product = inventory_service.add_product(reception_id, data.get("type"))
        return jsonify(product.to_dict()), 201
    except ReceptionNotFoundError as e:
        return error_response(e, 404)
    except (ReceptionAlreadyClosedError, InventoryConflictError) as e:
        return error_response(e, 409)
    except InvalidProductTypeError as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "add product")
    except Exception:
        return internal_error_response("add product")


@receptions_bp.post("/<uuid:reception_id>/products/batch")
def add_products_batch_route(reception_id: uuid.UUID):
    """
    Add several products; all-or-nothing.

    Request body:
    {
        "types": ["electronics", "food", ...]   // required, non-empty
    }
    """
    data = get_json_body()

    try:
        products = inventory_service.add_products(reception_id, data.get("types") or [])
        return jsonify({"items": [p.to_dict() for p in products]}), 201
    except ReceptionNotFoundError as e:
        return error_response(e, 404)
    except (ReceptionAlreadyClosedError, InventoryConflictError) as e:
        return error_response(e, 409)
    except InvalidProductTypeError as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "add products")
    except Exception:
        return internal_error_response("add products")


@receptions_bp.delete("/<uuid:reception_id>/products/last")
def remove_last_product_route(reception_id: uuid.UUID):
    """
    Pop the most recently added product.

    Returns:
        Removed Product object
    """
    try:
        product = inventory_service.remove_last_product(reception_id)
        return jsonify(product.to_dict())
    except ReceptionNotFoundError as e:
        return error_response(e, 404)
    except (ReceptionAlreadyClosedError, NoProductsToRemoveError) as e:
        return error_response(e, 409)
    except CoordinationError as e:
        return coordination_error_response(e, "remove last product")
    except Exception:
        return internal_error_response("remove last product")
