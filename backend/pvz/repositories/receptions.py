from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from ..models import Reception, STATUS_IN_PROGRESS
from ..services.concurrency import lock_for_update


def create(session: Session, reception: Reception) -> Reception:
    """Insert and flush; the one-open-per-pickup-point index fires here."""
    session.add(reception)
    session.flush()
    return reception


def get_by_id(session: Session, reception_id: uuid.UUID, *, for_update: bool = False) -> Reception | None:
    query = session.query(Reception).filter_by(id=reception_id)
    if for_update:
        query = lock_for_update(query)
    return query.first()


def update(session: Session, reception: Reception) -> Reception:
    session.flush()
    return reception


def delete(session: Session, reception: Reception) -> None:
    session.delete(reception)
    session.flush()


def list_page(
    session: Session,
    offset: int,
    limit: int,
    *,
    pickup_point_id: uuid.UUID | None = None,
) -> list[Reception]:
    query = session.query(Reception)
    if pickup_point_id is not None:
        query = query.filter(Reception.pickup_point_id == pickup_point_id)
    return (
        query.order_by(Reception.date_time.desc(), Reception.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_open_by_pickup_point(session: Session, pickup_point_id: uuid.UUID) -> Reception | None:
    """The in_progress reception of a pickup point, or None when there is none."""
    return session.query(Reception).filter_by(
        pickup_point_id=pickup_point_id,
        status=STATUS_IN_PROGRESS,
    ).first()


def get_last_open_by_pickup_point(
    session: Session,
    pickup_point_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Reception | None:
    """Most recent in_progress reception of a pickup point, or None."""
    query = (
        session.query(Reception)
        .filter_by(pickup_point_id=pickup_point_id, status=STATUS_IN_PROGRESS)
        .order_by(Reception.date_time.desc())
    )
    if for_update:
        query = lock_for_update(query)
    return query.first()


def list_for_pickup_points_in_range(
    session: Session,
    pickup_point_ids: list[uuid.UUID],
    start_date: datetime | None,
    end_date: datetime | None,
) -> list[Reception]:
    if not pickup_point_ids:
        return []
    query = session.query(Reception).filter(Reception.pickup_point_id.in_(pickup_point_ids))
    if start_date is not None:
        query = query.filter(Reception.date_time >= start_date)
    if end_date is not None:
        query = query.filter(Reception.date_time <= end_date)
    return query.order_by(Reception.date_time.desc()).all()


def map_open_by_pickup_points(
    session: Session,
    pickup_point_ids: list[uuid.UUID],
) -> dict[uuid.UUID, Reception]:
    """Open reception per pickup point in one query; pickup points without one are absent."""
    if not pickup_point_ids:
        return {}
    rows = session.query(Reception).filter(
        Reception.pickup_point_id.in_(pickup_point_ids),
        Reception.status == STATUS_IN_PROGRESS,
    ).all()
    return {r.pickup_point_id: r for r in rows}
