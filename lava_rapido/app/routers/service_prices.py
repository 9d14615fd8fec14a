"""Router exposing the service price grid."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import MemberIdentity, get_current_member, require_owner
from ..services import ServicePriceService
from .errors import http_error

router = APIRouter()


@router.get("", response_model=schemas.ServicePriceListResponse)
def list_service_prices(
    vehicle_type: Optional[models.VehicleType] = Query(None, description="Filter by vehicle"),
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ServicePriceListResponse:
    items = ServicePriceService.list_prices(db, member.business_id, vehicle_type)
    return schemas.ServicePriceListResponse(items=items, total=len(items))


@router.get("/quote", response_model=schemas.ServiceQuote)
def quote_service(
    service_name: str = Query(..., min_length=1),
    vehicle_type: models.VehicleType = Query(...),
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ServiceQuote:
    """Price suggested when registering a car in the queue."""

    try:
        price = ServicePriceService.quote(db, member.business_id, service_name, vehicle_type)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return schemas.ServiceQuote(service_name=service_name, vehicle_type=vehicle_type, price=price)


@router.put("/{vehicle_type}", response_model=schemas.ServicePriceListResponse)
def update_service_prices(
    vehicle_type: models.VehicleType,
    payload: schemas.ServicePriceUpdate,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(require_owner),
) -> schemas.ServicePriceListResponse:
    try:
        items = ServicePriceService.update_prices(
            db, member.business_id, vehicle_type, payload.prices
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return schemas.ServicePriceListResponse(items=items, total=len(items))
