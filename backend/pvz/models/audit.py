from __future__ import annotations

from ..extensions import db
from pvz.time_utils import to_utc_z, utcnow


class AuditEvent(db.Model):
    """
    Append-only audit trail for pickup point, reception and product mutations.

    Events are written inside the same unit of work as the change they
    record, so a rolled-back operation leaves no audit row behind.
    """
    __tablename__ = "audit_events"
    __table_args__ = (
        db.Index("ix_audit_events_pvz_occurred", "pickup_point_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # What happened
    event_type = db.Column(db.String(64), nullable=False, index=True)  # e.g., reception.opened, product.removed

    # What it refers to (generic pointer)
    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.Uuid, nullable=False, index=True)

    # Every event is scoped to a pickup point for filtering
    pickup_point_id = db.Column(db.Uuid, nullable=False)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    note = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_type": self.event_type,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id),
            "pvz_id": str(self.pickup_point_id),
            "occurred_at": to_utc_z(self.occurred_at),
            "note": self.note,
        }
