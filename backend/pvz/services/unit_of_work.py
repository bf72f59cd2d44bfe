# Overview: Unit-of-work coordinator; every mutating service sequence runs through it.

"""
Unit of Work

run(operation) hands the current session to `operation` and then:
- operation returns  -> commit; a failed commit raises CommitFailure
- operation raises   -> rollback, then re-raise the operation's error;
                        a failed rollback raises RollbackFailure instead

Nothing written inside `operation` is visible to other sessions before the
commit succeeds. The coordinator never retries; retry policy belongs to the
caller.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from sqlalchemy.orm import Session

from ..errors import CommitFailure, PvzError, RollbackFailure
from ..extensions import db

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    def __init__(self, session: Session | None = None):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else db.session

    def run(self, operation: Callable[[Session], T]) -> T:
        session = self.session

        try:
            result = operation(session)
        except Exception as exc:
            self._rollback(session, exc)
            if isinstance(exc, PvzError):
                logger.debug("Unit of work aborted: %s", exc)
            raise

        try:
            session.commit()
        except Exception as exc:
            logger.error("Unit of work commit failed: %s", exc, exc_info=True)
            self._rollback(session, exc)
            raise CommitFailure(f"Commit failed: {exc}") from exc

        return result

    def _rollback(self, session: Session, cause: BaseException) -> None:
        try:
            session.rollback()
        except Exception as rollback_exc:
            logger.critical(
                "Unit of work rollback failed after %s; storage state is unknown",
                type(cause).__name__,
                exc_info=True,
            )
            raise RollbackFailure(
                f"Rollback failed: {rollback_exc}",
                original_error=cause,
            ) from rollback_exc


def unit_of_work() -> UnitOfWork:
    """Coordinator bound to the app-context session."""
    return UnitOfWork()
