from __future__ import annotations

from decimal import Decimal
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.daily_service import VehicleType
from .common import ListResponse


class ServicePriceRead(BaseModel):
    service_name: str
    vehicle_type: VehicleType
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class ServicePriceListResponse(ListResponse[ServicePriceRead]):
    pass


class ServicePriceUpdate(BaseModel):
    """New prices for one vehicle type keyed by service name."""

    prices: Dict[str, Decimal] = Field(..., min_length=1)

    @field_validator("prices")
    @classmethod
    def _validate_prices(cls, value: Dict[str, Decimal]) -> Dict[str, Decimal]:
        for service_name, price in value.items():
            if price < 0:
                raise ValueError(f"O preço de {service_name} não pode ser negativo.")
        return value


class ServiceQuote(BaseModel):
    service_name: str
    vehicle_type: VehicleType
    price: Decimal
