from __future__ import annotations

import uuid

from ..extensions import db
from pvz.time_utils import to_utc_z, utcnow


class PickupPoint(db.Model):
    """
    Pickup point (PVZ): the root identity receptions attach to.

    DESIGN:
    - Immutable once created except for the city label
    - Never cascades a delete onto its receptions (deletion is an admin concern)
    """
    __tablename__ = "pickup_points"
    __table_args__ = (
        db.Index("ix_pickup_points_registered", "registration_date"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    registration_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    city = db.Column(db.String(100), nullable=False)

    receptions = db.relationship(
        "Reception",
        back_populates="pickup_point",
        lazy=True,
        order_by="Reception.date_time.desc()",
    )

    def __repr__(self) -> str:
        return f"<PickupPoint id={self.id} city={self.city!r}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "registration_date": to_utc_z(self.registration_date),
            "city": self.city,
        }
