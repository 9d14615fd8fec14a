"""Models describing car-wash businesses and their members."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class MemberRole(str, enum.Enum):
    """Role a user holds inside a business."""

    OWNER = "owner"
    PARTNER = "partner"


MEMBER_ROLE_ENUM = SAEnum(
    MemberRole,
    name="member_role_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class Business(Base):
    """A single car-wash tenant; every record hangs from one business."""

    __tablename__ = "businesses"

    id = Column(GUID(), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    code = Column(String(12), nullable=False, unique=True)
    commission_rate = Column(Numeric(5, 4), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    members = relationship(
        "BusinessMember",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BusinessMember.created_at",
    )


class BusinessMember(Base):
    """User attached to a business as owner or partner."""

    __tablename__ = "business_members"
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="business_members_business_user_key"),
    )

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(64), nullable=False, index=True)
    display_name = Column(String(100), nullable=False)
    role = Column(MEMBER_ROLE_ENUM, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    business = relationship("Business", back_populates="members")
