from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.daily_service import ServiceStatus, VehicleType
from .common import ListResponse

MAX_SERVICE_VALUE = Decimal("100000")


def _phone_with_digits(value: Optional[str]) -> Optional[str]:
    if value is not None and not any(char.isdigit() for char in value):
        raise ValueError("O telefone do cliente deve conter números.")
    return value


class DailyServiceCreate(BaseModel):
    """Car registered in the wash queue."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: str = Field(..., min_length=1, max_length=100)
    client_phone: str = Field(..., min_length=1, max_length=20)
    car_make_model: str = Field(..., min_length=1, max_length=100)
    car_plate: str = Field(..., min_length=1, max_length=10)
    car_color: Optional[str] = Field(default=None, max_length=50)
    vehicle_type: VehicleType
    service_name: str = Field(..., min_length=1, max_length=100)
    value: Decimal = Field(..., gt=0, le=MAX_SERVICE_VALUE)

    _check_phone = field_validator("client_phone")(_phone_with_digits)


class DailyServiceUpdate(BaseModel):
    """Corrections to a car already in the queue. Only sent fields change."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    client_phone: Optional[str] = Field(default=None, min_length=1, max_length=20)
    car_make_model: Optional[str] = Field(default=None, min_length=1, max_length=100)
    car_plate: Optional[str] = Field(default=None, min_length=1, max_length=10)
    car_color: Optional[str] = Field(default=None, max_length=50)
    vehicle_type: Optional[VehicleType] = None
    service_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    value: Optional[Decimal] = Field(default=None, gt=0, le=MAX_SERVICE_VALUE)

    _check_phone = field_validator("client_phone")(_phone_with_digits)


class DailyServiceRead(BaseModel):
    id: str
    client_name: str
    client_phone: str
    car_make_model: Optional[str] = None
    car_plate: str
    car_color: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    service_name: str
    value: Decimal
    service_date: date
    status: ServiceStatus
    created_by_member_id: Optional[str] = None
    finished_by_member_id: Optional[str] = None
    created_by_name: Optional[str] = None
    finished_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DailyServiceListResponse(ListResponse[DailyServiceRead]):
    service_date: date
    has_pending: bool


class FinishServiceResponse(BaseModel):
    service: DailyServiceRead
    whatsapp_url: str


class PickupReminder(BaseModel):
    service_id: str
    client_name: str
    car_plate: str
    whatsapp_url: str


class PickupReminderListResponse(ListResponse[PickupReminder]):
    pass
