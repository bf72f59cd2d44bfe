# Overview: Service-layer operations for receptions; enforces the open/close lifecycle.

"""
Reception Lifecycle Service

LIFECYCLE:
1. in_progress: opened at a pickup point, products may be added/removed
2. close: terminal, no further mutation

INVARIANT: at most one in_progress reception per pickup point.
The check-then-create in open_reception runs inside one unit of work, and the
partial unique index on receptions turns a lost race into
ReceptionAlreadyOpenError instead of a second open reception.

Close is strict: closing a pickup point with no open reception raises
NoOpenReceptionError. It is never a silent no-op.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import IntegrityError

from ..errors import (
    NoOpenReceptionError,
    PickupPointNotFoundError,
    ReceptionAlreadyOpenError,
    ReceptionNotFoundError,
)
from ..extensions import db
from ..models import Reception, STATUS_IN_PROGRESS
from ..repositories import pickup_points as pickup_point_repo
from ..repositories import receptions as reception_repo
from .audit_service import EVENT_RECEPTION_CLOSED, EVENT_RECEPTION_OPENED, append_audit_event
from .concurrency import is_unique_violation
from .unit_of_work import unit_of_work
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)

OPEN_RECEPTION_INDEX_MARKERS = (
    "uq_receptions_one_open_per_pvz",
    "receptions.pickup_point_id",
)


def open_reception(pickup_point_id: uuid.UUID) -> Reception:
    """
    Open a new reception at a pickup point.

    Not idempotent: an existing open reception is an error, it is never
    returned.

    Raises:
        PickupPointNotFoundError: If the pickup point does not exist
        ReceptionAlreadyOpenError: If the pickup point already has an open reception
    """
    def _op(session):
        pickup_point = pickup_point_repo.get_by_id(session, pickup_point_id)
        if pickup_point is None:
            raise PickupPointNotFoundError(f"Pickup point {pickup_point_id} not found")

        existing = reception_repo.get_open_by_pickup_point(session, pickup_point_id)
        if existing is not None:
            raise ReceptionAlreadyOpenError(
                f"Pickup point {pickup_point_id} already has open reception {existing.id}"
            )

        reception = Reception(
            id=uuid.uuid4(),
            date_time=utcnow(),
            pickup_point_id=pickup_point_id,
            status=STATUS_IN_PROGRESS,
        )
        try:
            reception_repo.create(session, reception)
        except IntegrityError as exc:
            # A concurrent open committed between our check and our insert
            if is_unique_violation(exc, *OPEN_RECEPTION_INDEX_MARKERS):
                raise ReceptionAlreadyOpenError(
                    f"Pickup point {pickup_point_id} already has an open reception"
                ) from exc
            raise

        append_audit_event(
            session,
            event_type=EVENT_RECEPTION_OPENED,
            entity_type="reception",
            entity_id=reception.id,
            pickup_point_id=pickup_point_id,
            note="Reception opened",
        )
        return reception

    try:
        reception = unit_of_work().run(_op)
    except ReceptionAlreadyOpenError:
        logger.info("Open rejected: pickup point %s already has an open reception", pickup_point_id)
        raise

    logger.info("Opened reception %s at pickup point %s", reception.id, pickup_point_id)
    return reception


def close_last_reception(pickup_point_id: uuid.UUID) -> Reception:
    """
    Close the most recent open reception of a pickup point.

    Returns:
        The closed Reception

    Raises:
        NoOpenReceptionError: If the pickup point has no open reception
    """
    def _op(session):
        reception = reception_repo.get_last_open_by_pickup_point(
            session, pickup_point_id, for_update=True
        )
        if reception is None:
            raise NoOpenReceptionError(f"Pickup point {pickup_point_id} has no open reception")

        reception.close()
        reception_repo.update(session, reception)

        append_audit_event(
            session,
            event_type=EVENT_RECEPTION_CLOSED,
            entity_type="reception",
            entity_id=reception.id,
            pickup_point_id=pickup_point_id,
            note=f"Reception closed with {len(reception.products)} products",
        )
        return reception

    try:
        reception = unit_of_work().run(_op)
    except NoOpenReceptionError:
        logger.info("Close rejected: pickup point %s has no open reception", pickup_point_id)
        raise

    logger.info("Closed reception %s at pickup point %s", reception.id, pickup_point_id)
    return reception


def get_reception(reception_id: uuid.UUID) -> Reception:
    reception = reception_repo.get_by_id(db.session, reception_id)
    if reception is None:
        raise ReceptionNotFoundError(f"Reception {reception_id} not found")
    return reception


def get_open_reception(pickup_point_id: uuid.UUID) -> Reception:
    """
    Raises:
        NoOpenReceptionError: If the pickup point has no open reception
    """
    reception = reception_repo.get_open_by_pickup_point(db.session, pickup_point_id)
    if reception is None:
        raise NoOpenReceptionError(f"Pickup point {pickup_point_id} has no open reception")
    return reception


def list_receptions(
    *,
    pickup_point_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 10,
) -> list[Reception]:
    return reception_repo.list_page(
        db.session, offset, limit, pickup_point_id=pickup_point_id
    )
