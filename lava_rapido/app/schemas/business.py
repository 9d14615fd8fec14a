from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.business import MemberRole


class BusinessCreate(BaseModel):
    """Payload used by a user to open a new car wash."""

    name: str = Field(..., min_length=1, max_length=120, description="Business name")
    display_name: str = Field(
        ..., min_length=1, max_length=100, description="Name shown for the owner"
    )


class BusinessJoin(BaseModel):
    """Payload used by a partner to join an existing car wash."""

    code: str = Field(..., min_length=1, max_length=12, description="Invite code")
    display_name: str = Field(..., min_length=1, max_length=100)


class BusinessSettingsUpdate(BaseModel):
    commission_rate: Optional[Decimal] = Field(
        default=None, ge=0, le=1, description="Partner commission rate, e.g. 0.25"
    )


class MemberRead(BaseModel):
    id: str
    user_id: str
    display_name: str
    role: MemberRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BusinessRead(BaseModel):
    id: str
    name: str
    code: str
    commission_rate: Optional[Decimal] = None
    created_at: datetime
    members: List[MemberRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
