from __future__ import annotations

import uuid

from ..extensions import db
from pvz.time_utils import to_utc_z, utcnow

# Closed set; anything else is rejected before a row is created
PRODUCT_TYPES = ("electronics", "clothing", "food", "other")


class Product(db.Model):
    """
    Item registered during a reception.

    ORDERING: `sequence` is a per-reception monotonic counter assigned at
    insert time. The "last" product of a reception is the one with the
    greatest sequence; timestamps are informational only and may collide
    (a batch shares one timestamp).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("reception_id", "sequence", name="uq_products_reception_sequence"),
        db.CheckConstraint(
            "type IN ('electronics', 'clothing', 'food', 'other')",
            name="ck_products_type",
        ),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    date_time = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    type = db.Column(db.String(32), nullable=False)
    reception_id = db.Column(db.Uuid, db.ForeignKey("receptions.id"), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False)

    reception = db.relationship("Reception", back_populates="products")

    def __repr__(self) -> str:
        return f"<Product id={self.id} type={self.type!r} reception_id={self.reception_id} seq={self.sequence}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "date_time": to_utc_z(self.date_time),
            "type": self.type,
            "reception_id": str(self.reception_id),
        }
