from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import exists
from sqlalchemy.orm import Session

from ..models import PickupPoint, Reception


def create(session: Session, pickup_point: PickupPoint) -> PickupPoint:
    session.add(pickup_point)
    session.flush()
    return pickup_point


def get_by_id(session: Session, pickup_point_id: uuid.UUID) -> PickupPoint | None:
    return session.query(PickupPoint).filter_by(id=pickup_point_id).first()


def update(session: Session, pickup_point: PickupPoint) -> PickupPoint:
    session.flush()
    return pickup_point


def delete(session: Session, pickup_point: PickupPoint) -> None:
    session.delete(pickup_point)
    session.flush()


def list_page(session: Session, offset: int, limit: int) -> list[PickupPoint]:
    return (
        session.query(PickupPoint)
        .order_by(PickupPoint.registration_date.desc(), PickupPoint.id)
        .offset(offset)
        .limit(limit)
        .all()
    )


def _reception_in_range(start_date: datetime | None, end_date: datetime | None) -> list:
    clauses = []
    if start_date is not None:
        clauses.append(Reception.date_time >= start_date)
    if end_date is not None:
        clauses.append(Reception.date_time <= end_date)
    return clauses


def list_page_with_receptions_in_range(
    session: Session,
    start_date: datetime | None,
    end_date: datetime | None,
    offset: int,
    limit: int,
) -> list[PickupPoint]:
    """
    Pickup points that own at least one reception in the range.

    Without bounds every pickup point qualifies.
    """
    query = session.query(PickupPoint)
    clauses = _reception_in_range(start_date, end_date)
    if clauses:
        query = query.filter(
            exists().where(Reception.pickup_point_id == PickupPoint.id, *clauses)
        )
    return (
        query.order_by(PickupPoint.registration_date.desc(), PickupPoint.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
