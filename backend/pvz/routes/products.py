# Overview: Flask API routes for products; parses input and returns JSON responses.

import uuid

from flask import Blueprint, jsonify

from ..errors import (
    CoordinationError,
    InvalidPaginationError,
    InventoryConflictError,
    InvalidProductTypeError,
    NoOpenReceptionError,
    ProductNotFoundError,
    ValidationError,
)
from ..services import inventory_service
from ..validation import parse_uuid
from .common import (
    coordination_error_response,
    error_response,
    get_json_body,
    get_offset_limit,
    internal_error_response,
)


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.post("")
def add_product_to_pickup_point_route():
    """
    Add a product to the open reception of a pickup point.

    Request body:
    {
        "pvz_id": "<uuid>",     // required
        "type": "clothing"      // required
    }
    """
    data = get_json_body()

    try:
        pvz_id = parse_uuid(data.get("pvz_id"), "pvz_id")
        product = inventory_service.add_product_to_open_reception(pvz_id, data.get("type"))
        return jsonify(product.to_dict()), 201
    except (NoOpenReceptionError, InventoryConflictError) as e:
        return error_response(e, 409)
    except (InvalidProductTypeError, ValidationError) as e:
        return error_response(e, 400)
    except CoordinationError as e:
        return coordination_error_response(e, "add product")
    except Exception:
        return internal_error_response("add product")


@products_bp.get("")
def list_products_route():
    try:
        offset, limit = get_offset_limit()
    except InvalidPaginationError as e:
        return error_response(e, 400)

    items = inventory_service.list_products(offset=offset, limit=limit)
    return jsonify({
        "items": [p.to_dict() for p in items],
        "offset": offset,
        "limit": limit,
    })


@products_bp.get("/<uuid:product_id>")
def get_product_route(product_id: uuid.UUID):
    try:
        product = inventory_service.get_product(product_id)
        return jsonify(product.to_dict())
    except ProductNotFoundError as e:
        return error_response(e, 404)
