# Overview: Exception taxonomy shared by services, routes and the CLI.

"""
Error taxonomy

- NotFoundError: unknown id; recoverable by the caller (404)
- ConflictError: business-rule violation on current state; never retried (409)
- ValidationError: caller input defect; raised before any write (400)
- CoordinationError: the unit of work could not commit or roll back (500)

Every concrete error carries a stable `code` so callers can map it to a
user-facing status without matching on message text.
"""

from __future__ import annotations


class PvzError(Exception):
    """Base class for all domain errors."""

    code = "pvz_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self)


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(PvzError):
    code = "not_found"


class PickupPointNotFoundError(NotFoundError):
    """Pickup point not found."""
    code = "pickup_point_not_found"


class ReceptionNotFoundError(NotFoundError):
    """Reception not found."""
    code = "reception_not_found"


class ProductNotFoundError(NotFoundError):
    """Product not found."""
    code = "product_not_found"


# =============================================================================
# STATE CONFLICTS
# =============================================================================

class ConflictError(PvzError):
    code = "conflict"


class ReceptionAlreadyOpenError(ConflictError):
    """Pickup point already has an open reception."""
    code = "reception_already_open"


class ReceptionAlreadyClosedError(ConflictError):
    """Reception is already closed."""
    code = "reception_already_closed"


class NoOpenReceptionError(ConflictError):
    """Pickup point has no open reception."""
    code = "no_open_reception"


class NoProductsToRemoveError(ConflictError):
    """Reception has no products to remove."""
    code = "no_products_to_remove"


class InventoryConflictError(ConflictError):
    """Reception inventory was modified concurrently; retry the request."""
    code = "inventory_conflict"


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationError(PvzError, ValueError):
    """400-level input problem."""
    code = "validation_error"


class InvalidProductTypeError(ValidationError):
    """Invalid product type."""
    code = "invalid_product_type"


class InvalidCityError(ValidationError):
    """Invalid pickup point city."""
    code = "invalid_city"


class InvalidPaginationError(ValidationError):
    """Invalid pagination parameters."""
    code = "invalid_pagination"


class InvalidDateRangeError(ValidationError):
    """Invalid date range."""
    code = "invalid_date_range"


# =============================================================================
# COORDINATION
# =============================================================================

class CoordinationError(PvzError):
    code = "coordination_error"


class CommitFailure(CoordinationError):
    """
    Commit did not succeed. The operation's effects are not guaranteed to
    have happened.
    """
    code = "commit_failure"


class RollbackFailure(CoordinationError):
    """
    Rollback after a failed operation did not succeed. Storage state is not
    known to match either the pre- or post-operation view.

    The rollback exception is chained as __cause__; the error that triggered
    the rollback is kept on `original_error`.
    """
    code = "rollback_failure"

    def __init__(self, message: str | None = None, *, original_error: BaseException | None = None):
        super().__init__(message)
        self.original_error = original_error
