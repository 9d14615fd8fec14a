"""Car-wash services registered during the business day."""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    func,
)

from ..database import Base
from ..db_types import GUID, new_id


class ServiceStatus(str, enum.Enum):
    """Progress of a car in the wash queue."""

    PENDENTE = "pendente"
    FINALIZADO = "finalizado"


SERVICE_STATUS_ENUM = SAEnum(
    ServiceStatus,
    name="service_status_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class VehicleType(str, enum.Enum):
    """Vehicle sizes used to price services."""

    MOTO = "MOTO"
    RET = "RET"
    SEDAN = "SEDAN"
    SUV = "SUV"
    CAMINHONETE = "CAMINHONETE"
    OUTRO = "OUTRO"


VEHICLE_TYPE_ENUM = SAEnum(
    VehicleType,
    name="vehicle_type_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class DailyService(Base):
    """A wash performed for a client's car on a given day."""

    __tablename__ = "daily_services"
    __table_args__ = (CheckConstraint("value > 0", name="ck_daily_services_value_positive"),)

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    client_name = Column(String(100), nullable=False)
    client_phone = Column(String(20), nullable=False)
    car_make_model = Column(String(100), nullable=True)
    car_plate = Column(String(10), nullable=False)
    car_color = Column(String(50), nullable=True)
    vehicle_type = Column(VEHICLE_TYPE_ENUM, nullable=True)
    service_name = Column(String(100), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    service_date = Column(Date, nullable=False)
    status = Column(
        SERVICE_STATUS_ENUM,
        nullable=False,
        default=ServiceStatus.PENDENTE,
        server_default=ServiceStatus.PENDENTE.value,
    )
    created_by_member_id = Column(
        GUID(), ForeignKey("business_members.id", ondelete="SET NULL"), nullable=True
    )
    finished_by_member_id = Column(
        GUID(), ForeignKey("business_members.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("daily_services_business_date_idx", DailyService.business_id, DailyService.service_date)
