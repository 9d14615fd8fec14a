"""Translation of service errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import (
    ExpenseAlreadyPaidError,
    LavaRapidoError,
    NotFoundError,
    ServiceAlreadyFinishedError,
    ValidationError,
)

LOGGER = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Não foi possível concluir a operação. Tente novamente mais tarde."

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ExpenseAlreadyPaidError, status.HTTP_409_CONFLICT),
    (ServiceAlreadyFinishedError, status.HTTP_409_CONFLICT),
)


def http_error(exc: LavaRapidoError) -> HTTPException:
    """Return the HTTP exception matching a domain error."""

    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return HTTPException(status_code=status_code, detail=str(exc))
    LOGGER.error("Operation failed: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_FAILURE_MESSAGE
    )


def database_error(db: Session, exc: SQLAlchemyError, action: str) -> HTTPException:
    """Roll back after an unexpected database failure and hide the details."""

    db.rollback()
    LOGGER.exception("Database failure while %s", action, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_FAILURE_MESSAGE
    )
