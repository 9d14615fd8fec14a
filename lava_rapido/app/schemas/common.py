"""Shared schema definitions."""

from __future__ import annotations

from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ListResponse(BaseModel, Generic[T]):
    """Standard shape for unpaginated listings scoped to one business."""

    items: Sequence[T]
    total: int = Field(..., ge=0)
