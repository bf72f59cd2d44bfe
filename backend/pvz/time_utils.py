# Overview: UTC time helpers; every timestamp in the PVZ schema is naive UTC.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as naive UTC, the form stored in every timestamp column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a reception date filter such as "2026-10-01T00:00:00Z".

    Blank input means "no bound" and yields None. Offsets are folded into
    UTC. Raises ValueError on malformed input.
    """
    if value is None or not value.strip():
        return None

    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return as_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Render a stored timestamp as ISO-8601 with a trailing 'Z'.

    Microseconds are kept: products of one reception are often stamped within
    the same second.
    """
    if dt is None:
        return None
    return as_naive_utc(dt).isoformat() + "Z"
