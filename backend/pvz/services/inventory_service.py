# Overview: Service-layer operations for reception inventory; LIFO product add/remove.

"""
Inventory Service

WHY: Products are registered against a reception while it is open and can
only be retracted in reverse order of insertion (stack discipline).

RULES:
- Add and remove are legal only while the reception is in_progress
- Product type must be one of the closed PRODUCT_TYPES set
- Batch add is all-or-nothing: every type is validated before any row is
  created, and the batch is persisted with a single flush
- Remove always targets the product with the greatest sequence

Every mutation locks the reception row so a concurrent close cannot
interleave between the status check and the write: SELECT ... FOR UPDATE on
servers, and the database write lock taken at BEGIN on SQLite.
"""

from __future__ import annotations

import logging
import uuid
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import (
    InventoryConflictError,
    NoOpenReceptionError,
    NoProductsToRemoveError,
    ProductNotFoundError,
    ReceptionAlreadyClosedError,
    ReceptionNotFoundError,
)
from ..extensions import db
from ..models import Product, Reception
from ..repositories import products as product_repo
from ..repositories import receptions as reception_repo
from ..validation import validate_product_type, validate_product_types
from .audit_service import (
    EVENT_PRODUCT_ADDED,
    EVENT_PRODUCT_BATCH_ADDED,
    EVENT_PRODUCT_REMOVED,
    append_audit_event,
)
from .concurrency import is_unique_violation
from .unit_of_work import unit_of_work
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)

PRODUCT_SEQUENCE_INDEX_MARKERS = (
    "uq_products_reception_sequence",
    "products.reception_id, products.sequence",
)


def _get_open_reception_for_update(session: Session, reception_id: uuid.UUID) -> Reception:
    reception = reception_repo.get_by_id(session, reception_id, for_update=True)
    if reception is None:
        raise ReceptionNotFoundError(f"Reception {reception_id} not found")
    if not reception.is_open:
        raise ReceptionAlreadyClosedError(f"Reception {reception_id} is already closed")
    return reception


def _resolve_open_reception_for_update(session: Session, pickup_point_id: uuid.UUID) -> Reception:
    reception = reception_repo.get_last_open_by_pickup_point(
        session, pickup_point_id, for_update=True
    )
    if reception is None:
        raise NoOpenReceptionError(f"Pickup point {pickup_point_id} has no open reception")
    return reception


def _persist(session: Session, write):
    try:
        return write()
    except IntegrityError as exc:
        # Another writer took the same tail sequence on this reception
        if is_unique_violation(exc, *PRODUCT_SEQUENCE_INDEX_MARKERS):
            raise InventoryConflictError() from exc
        raise


def _add_one(session: Session, reception: Reception, product_type: str) -> Product:
    product = _persist(session, lambda: product_repo.create(
        session,
        Product(
            id=uuid.uuid4(),
            date_time=utcnow(),
            type=product_type,
            reception_id=reception.id,
        ),
    ))
    append_audit_event(
        session,
        event_type=EVENT_PRODUCT_ADDED,
        entity_type="product",
        entity_id=product.id,
        pickup_point_id=reception.pickup_point_id,
        note=f"Added {product_type} to reception {reception.id}",
    )
    return product


def _remove_last(session: Session, reception: Reception) -> Product:
    product = product_repo.delete_last(session, reception.id)
    if product is None:
        raise NoProductsToRemoveError(f"Reception {reception.id} has no products to remove")

    append_audit_event(
        session,
        event_type=EVENT_PRODUCT_REMOVED,
        entity_type="product",
        entity_id=product.id,
        pickup_point_id=reception.pickup_point_id,
        note=f"Removed {product.type} from reception {reception.id}",
    )
    return product


def add_product(reception_id: uuid.UUID, product_type: str) -> Product:
    """
    Add one product to an open reception.

    Raises:
        ReceptionNotFoundError: If the reception does not exist
        ReceptionAlreadyClosedError: If the reception is closed
        InvalidProductTypeError: If product_type is not a known type
    """
    def _op(session):
        reception = _get_open_reception_for_update(session, reception_id)
        validate_product_type(product_type)
        return _add_one(session, reception, product_type)

    return unit_of_work().run(_op)


def add_products(reception_id: uuid.UUID, product_types: Sequence[str]) -> list[Product]:
    """
    Add several products to an open reception in one all-or-nothing write.

    Returns:
        Created products in insertion order

    Raises:
        ReceptionNotFoundError: If the reception does not exist
        ReceptionAlreadyClosedError: If the reception is closed
        InvalidProductTypeError: On the first invalid type; nothing is created
    """
    def _op(session):
        reception = _get_open_reception_for_update(session, reception_id)
        types = validate_product_types(product_types)

        now = utcnow()
        batch = [Product(id=uuid.uuid4(), date_time=now, type=t) for t in types]
        products = _persist(session, lambda: product_repo.create_batch(session, reception.id, batch))

        append_audit_event(
            session,
            event_type=EVENT_PRODUCT_BATCH_ADDED,
            entity_type="reception",
            entity_id=reception.id,
            pickup_point_id=reception.pickup_point_id,
            note=f"Added {len(products)} products to reception {reception.id}",
        )
        return products

    products = unit_of_work().run(_op)
    logger.info("Added %d products to reception %s", len(products), reception_id)
    return products


def remove_last_product(reception_id: uuid.UUID) -> Product:
    """
    Remove the most recently added product of an open reception.

    Returns:
        The removed Product (detached)

    Raises:
        ReceptionNotFoundError: If the reception does not exist
        ReceptionAlreadyClosedError: If the reception is closed
        NoProductsToRemoveError: If the reception has no products
    """
    def _op(session):
        reception = _get_open_reception_for_update(session, reception_id)
        return _remove_last(session, reception)

    return unit_of_work().run(_op)


def add_product_to_open_reception(pickup_point_id: uuid.UUID, product_type: str) -> Product:
    """
    Add one product to whatever reception is currently open at a pickup point.

    Raises:
        NoOpenReceptionError: If the pickup point has no open reception
        InvalidProductTypeError: If product_type is not a known type
    """
    def _op(session):
        reception = _resolve_open_reception_for_update(session, pickup_point_id)
        validate_product_type(product_type)
        return _add_one(session, reception, product_type)

    return unit_of_work().run(_op)


def remove_last_product_from_open_reception(pickup_point_id: uuid.UUID) -> Product:
    """
    Raises:
        NoOpenReceptionError: If the pickup point has no open reception
        NoProductsToRemoveError: If the open reception has no products
    """
    def _op(session):
        reception = _resolve_open_reception_for_update(session, pickup_point_id)
        return _remove_last(session, reception)

    return unit_of_work().run(_op)


def get_products_by_reception(reception_id: uuid.UUID) -> list[Product]:
    """Products of a reception in insertion order (possibly empty)."""
    return product_repo.list_by_reception(db.session, reception_id)


def get_product(product_id: uuid.UUID) -> Product:
    product = product_repo.get_by_id(db.session, product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def list_products(offset: int = 0, limit: int = 10) -> list[Product]:
    return product_repo.list_page(db.session, offset, limit)
