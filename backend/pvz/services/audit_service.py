# Overview: Service-layer operations for the audit trail; append-only event writes and reads.

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from ..extensions import db
from ..models import AuditEvent
from pvz.time_utils import utcnow

"""
Audit trail invariants

- Append-only: no updates or deletes of existing events.
- Written through the caller's session, inside the same unit of work as the
  mutation being recorded. A rolled-back mutation leaves no event.
"""

EVENT_PICKUP_POINT_CREATED = "pickup_point.created"
EVENT_PICKUP_POINT_RENAMED = "pickup_point.renamed"
EVENT_RECEPTION_OPENED = "reception.opened"
EVENT_RECEPTION_CLOSED = "reception.closed"
EVENT_PRODUCT_ADDED = "product.added"
EVENT_PRODUCT_BATCH_ADDED = "product.batch_added"
EVENT_PRODUCT_REMOVED = "product.removed"


def append_audit_event(
    session: Session,
    *,
    event_type: str,
    entity_type: str,
    entity_id: uuid.UUID,
    pickup_point_id: uuid.UUID,
    note: str | None = None,
) -> AuditEvent:
    ev = AuditEvent(
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        pickup_point_id=pickup_point_id,
        occurred_at=utcnow(),
        note=note[:255] if note else None,
    )
    session.add(ev)
    session.flush()  # ensures ev.id is assigned without committing
    return ev


def list_audit_events(
    *,
    pickup_point_id: uuid.UUID | None = None,
    event_type: str | None = None,
    offset: int = 0,
    limit: int = 10,
) -> list[AuditEvent]:
    query = db.session.query(AuditEvent)
    if pickup_point_id is not None:
        query = query.filter(AuditEvent.pickup_point_id == pickup_point_id)
    if event_type:
        query = query.filter(AuditEvent.event_type == event_type)
    return (
        query.order_by(AuditEvent.occurred_at.desc(), AuditEvent.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
