"""Price grid of wash services per vehicle type."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint, func

from ..database import Base
from ..db_types import GUID, new_id
from .daily_service import VEHICLE_TYPE_ENUM


class ServicePrice(Base):
    """Price charged for a service on a vehicle type."""

    __tablename__ = "service_prices"
    __table_args__ = (
        UniqueConstraint(
            "business_id",
            "service_name",
            "vehicle_type",
            name="service_prices_business_service_vehicle_key",
        ),
    )

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    service_name = Column(String(100), nullable=False)
    vehicle_type = Column(VEHICLE_TYPE_ENUM, nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
