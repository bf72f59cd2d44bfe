# Overview: Service-layer operations for pickup points; the root identity receptions attach to.

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from ..errors import PickupPointNotFoundError
from ..extensions import db
from ..models import PickupPoint
from ..repositories import pickup_points as pickup_point_repo
from ..repositories import products as product_repo
from ..repositories import receptions as reception_repo
from ..validation import validate_city, validate_date_range
from .audit_service import (
    EVENT_PICKUP_POINT_CREATED,
    EVENT_PICKUP_POINT_RENAMED,
    append_audit_event,
)
from .unit_of_work import unit_of_work
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)


def create_pickup_point(city: str) -> PickupPoint:
    """
    Register a new pickup point.

    Raises:
        InvalidCityError: If the city label fails validation
    """
    city = validate_city(city)

    def _op(session):
        pickup_point = pickup_point_repo.create(
            session,
            PickupPoint(id=uuid.uuid4(), registration_date=utcnow(), city=city),
        )
        append_audit_event(
            session,
            event_type=EVENT_PICKUP_POINT_CREATED,
            entity_type="pickup_point",
            entity_id=pickup_point.id,
            pickup_point_id=pickup_point.id,
            note=f"Pickup point created in {city}",
        )
        return pickup_point

    pickup_point = unit_of_work().run(_op)
    logger.info("Created pickup point %s (%s)", pickup_point.id, pickup_point.city)
    return pickup_point


def get_pickup_point(pickup_point_id: uuid.UUID) -> PickupPoint:
    pickup_point = pickup_point_repo.get_by_id(db.session, pickup_point_id)
    if pickup_point is None:
        raise PickupPointNotFoundError(f"Pickup point {pickup_point_id} not found")
    return pickup_point


def list_pickup_points(offset: int = 0, limit: int = 10) -> list[PickupPoint]:
    return pickup_point_repo.list_page(db.session, offset, limit)


def rename_pickup_point(pickup_point_id: uuid.UUID, city: str) -> PickupPoint:
    """The city label is the only mutable field of a pickup point."""
    city = validate_city(city)

    def _op(session):
        pickup_point = pickup_point_repo.get_by_id(session, pickup_point_id)
        if pickup_point is None:
            raise PickupPointNotFoundError(f"Pickup point {pickup_point_id} not found")

        previous = pickup_point.city
        pickup_point.city = city
        pickup_point_repo.update(session, pickup_point)

        append_audit_event(
            session,
            event_type=EVENT_PICKUP_POINT_RENAMED,
            entity_type="pickup_point",
            entity_id=pickup_point.id,
            pickup_point_id=pickup_point.id,
            note=f"Renamed from {previous} to {city}",
        )
        return pickup_point

    return unit_of_work().run(_op)


def list_pickup_points_with_receptions(
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    offset: int = 0,
    limit: int = 10,
) -> list[dict]:
    """
    Pickup points with their receptions (inclusive date range) and products.

    Returns:
        [{"pvz": {...}, "receptions": [{"reception": {...}, "products": [...]}]}]
        Pickup points newest first, receptions newest first, products in
        insertion order.

    Raises:
        InvalidDateRangeError: If start_date is after end_date
    """
    validate_date_range(start_date, end_date)
    session = db.session

    pickup_points = pickup_point_repo.list_page_with_receptions_in_range(
        session, start_date, end_date, offset, limit
    )
    receptions = reception_repo.list_for_pickup_points_in_range(
        session, [p.id for p in pickup_points], start_date, end_date
    )
    products = product_repo.list_for_receptions(session, [r.id for r in receptions])

    products_by_reception: dict[uuid.UUID, list[dict]] = {}
    for product in products:
        products_by_reception.setdefault(product.reception_id, []).append(product.to_dict())

    receptions_by_pvz: dict[uuid.UUID, list[dict]] = {}
    for reception in receptions:
        receptions_by_pvz.setdefault(reception.pickup_point_id, []).append({
            "reception": reception.to_dict(),
            "products": products_by_reception.get(reception.id, []),
        })

    return [
        {"pvz": p.to_dict(), "receptions": receptions_by_pvz.get(p.id, [])}
        for p in pickup_points
    ]
