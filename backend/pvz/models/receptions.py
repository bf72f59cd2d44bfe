from __future__ import annotations

import uuid

from ..extensions import db
from pvz.time_utils import to_utc_z, utcnow

STATUS_IN_PROGRESS = "in_progress"
STATUS_CLOSED = "close"

RECEPTION_STATUSES = (STATUS_IN_PROGRESS, STATUS_CLOSED)


class Reception(db.Model):
    """
    Goods-intake session at a pickup point.

    LIFECYCLE:
    - in_progress: accepting products
    - close: terminal; no further product mutation

    INVARIANT: at most one in_progress reception per pickup point. Enforced by
    the partial unique index below, not only by the service layer, so two
    concurrent opens cannot both commit.
    """
    __tablename__ = "receptions"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('in_progress', 'close')",
            name="ck_receptions_status",
        ),
        db.Index(
            "uq_receptions_one_open_per_pvz",
            "pickup_point_id",
            unique=True,
            sqlite_where=db.text("status = 'in_progress'"),
            postgresql_where=db.text("status = 'in_progress'"),
        ),
        db.Index("ix_receptions_pvz_date_time", "pickup_point_id", "date_time"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    date_time = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    pickup_point_id = db.Column(db.Uuid, db.ForeignKey("pickup_points.id"), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_IN_PROGRESS)

    pickup_point = db.relationship("PickupPoint", back_populates="receptions")
    products = db.relationship(
        "Product",
        back_populates="reception",
        lazy=True,
        order_by="Product.sequence.asc()",
    )

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    def close(self) -> None:
        self.status = STATUS_CLOSED

    def __repr__(self) -> str:
        return f"<Reception id={self.id} pvz_id={self.pickup_point_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "date_time": to_utc_z(self.date_time),
            "pvz_id": str(self.pickup_point_id),
            "status": self.status,
        }
