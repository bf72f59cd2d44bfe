from __future__ import annotations

import uuid

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Product


def next_sequence(session: Session, reception_id: uuid.UUID) -> int:
    current = session.query(func.max(Product.sequence)).filter(
        Product.reception_id == reception_id
    ).scalar()
    return (current or 0) + 1


def create(session: Session, product: Product) -> Product:
    if product.sequence is None:
        product.sequence = next_sequence(session, product.reception_id)
    session.add(product)
    session.flush()
    return product


def create_batch(session: Session, reception_id: uuid.UUID, products: list[Product]) -> list[Product]:
    """
    Persist a batch in one write.

    Sequences are consecutive from the current tail, in list order.
    """
    start = next_sequence(session, reception_id)
    for offset, product in enumerate(products):
        product.reception_id = reception_id
        product.sequence = start + offset
    session.add_all(products)
    session.flush()
    return products


def get_by_id(session: Session, product_id: uuid.UUID) -> Product | None:
    return session.query(Product).filter_by(id=product_id).first()


def update(session: Session, product: Product) -> Product:
    session.flush()
    return product


def delete(session: Session, product: Product) -> None:
    session.delete(product)
    session.flush()


def list_page(session: Session, offset: int, limit: int) -> list[Product]:
    return (
        session.query(Product)
        .order_by(Product.date_time.desc(), Product.sequence.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_last_by_reception(session: Session, reception_id: uuid.UUID) -> Product | None:
    return (
        session.query(Product)
        .filter(Product.reception_id == reception_id)
        .order_by(Product.sequence.desc())
        .first()
    )


def delete_last(session: Session, reception_id: uuid.UUID) -> Product | None:
    """Delete the tail product of a reception; None when it has no products."""
    product = get_last_by_reception(session, reception_id)
    if product is None:
        return None
    delete(session, product)
    return product


def list_by_reception(session: Session, reception_id: uuid.UUID) -> list[Product]:
    return (
        session.query(Product)
        .filter(Product.reception_id == reception_id)
        .order_by(Product.sequence.asc())
        .all()
    )


def list_for_receptions(session: Session, reception_ids: list[uuid.UUID]) -> list[Product]:
    if not reception_ids:
        return []
    return (
        session.query(Product)
        .filter(Product.reception_id.in_(reception_ids))
        .order_by(Product.reception_id, Product.sequence.asc())
        .all()
    )
