"""Small helpers shared by services that write to the database."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceError

LOGGER = logging.getLogger(__name__)


def commit_or_raise(db: Session, message: str) -> None:
    """Commit the session or roll back and raise ``PersistenceError``."""

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Database commit failed: %s", message)
        raise PersistenceError(message) from exc
