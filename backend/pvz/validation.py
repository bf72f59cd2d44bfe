# Overview: Input parsing and validation helpers shared by routes, services and the CLI.

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from flask import current_app

from .errors import (
    InvalidCityError,
    InvalidDateRangeError,
    InvalidPaginationError,
    InvalidProductTypeError,
    ValidationError,
)
from .models import PRODUCT_TYPES
from .time_utils import parse_iso_datetime

CITY_MIN_LENGTH = 2
CITY_MAX_LENGTH = 100


def parse_uuid(value: Any, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationError(f"{field} must be a valid UUID")


def validate_city(city: Any) -> str:
    """
    Normalize and validate a pickup point label.

    Length must be 2..100 characters; when PVZ_ALLOWED_CITIES is non-empty the
    label must also be one of those cities.
    """
    if not isinstance(city, str):
        raise InvalidCityError("city is required")
    city = city.strip()
    if not (CITY_MIN_LENGTH <= len(city) <= CITY_MAX_LENGTH):
        raise InvalidCityError(
            f"city must be between {CITY_MIN_LENGTH} and {CITY_MAX_LENGTH} characters"
        )

    allowed = current_app.config.get("PVZ_ALLOWED_CITIES") or ()
    if allowed and city not in allowed:
        raise InvalidCityError(f"city must be one of: {', '.join(allowed)}")
    return city


def validate_product_type(product_type: Any) -> str:
    if product_type not in PRODUCT_TYPES:
        raise InvalidProductTypeError(
            f"Invalid product type {product_type!r}. Must be one of: {', '.join(PRODUCT_TYPES)}"
        )
    return product_type


def validate_product_types(product_types: Any) -> list[str]:
    """All-or-nothing: the first invalid entry rejects the whole list."""
    if not isinstance(product_types, (list, tuple)) or not product_types:
        raise InvalidProductTypeError("types must be a non-empty list")
    return [validate_product_type(t) for t in product_types]


def validate_offset_limit(offset: int, limit: int) -> tuple[int, int]:
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 30)
    if offset < 0:
        raise InvalidPaginationError("offset cannot be negative")
    if limit < 1 or limit > max_limit:
        raise InvalidPaginationError(f"limit must be between 1 and {max_limit}")
    return offset, limit


def validate_page_limit(page: int, limit: int) -> tuple[int, int]:
    """Convert 1-based page/limit into an (offset, limit) pair."""
    if page < 1:
        raise InvalidPaginationError("page must be at least 1")
    _, limit = validate_offset_limit(0, limit)
    return (page - 1) * limit, limit


def parse_datetime_arg(value: str | None, field: str) -> datetime | None:
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise InvalidDateRangeError(f"Invalid {field} format (expected ISO-8601)")


def validate_date_range(start_date: datetime | None, end_date: datetime | None) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise InvalidDateRangeError("start_date must not be after end_date")
