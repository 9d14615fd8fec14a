"""Exceptions raised by the service layer and translated by the routers."""

from __future__ import annotations


class LavaRapidoError(RuntimeError):
    """Base class for domain errors."""


class ValidationError(LavaRapidoError):
    """Raised when user input breaks a business rule."""


class NotFoundError(LavaRapidoError):
    """Raised when the referenced record does not exist for the business."""


class PersistenceError(LavaRapidoError):
    """Raised when the database rejects a read or a write."""


class ExpenseAlreadyPaidError(LavaRapidoError):
    """Raised when a payment targets an expense that is no longer pending."""


class ServiceAlreadyFinishedError(LavaRapidoError):
    """Raised when finishing a car-wash service that was already finished."""
