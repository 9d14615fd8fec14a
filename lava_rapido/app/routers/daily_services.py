"""Router exposing the daily wash queue."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..clock import Clock, get_clock
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import MemberIdentity, get_current_member
from ..services import BusinessService, DailyServiceService
from .errors import http_error

router = APIRouter()


def _with_names(service: models.DailyService, db: Session) -> schemas.DailyServiceRead:
    names = BusinessService.member_names(
        db, [service.created_by_member_id, service.finished_by_member_id]
    )
    row = schemas.DailyServiceRead.model_validate(service)
    row.created_by_name = names.get(service.created_by_member_id)
    row.finished_by_name = names.get(service.finished_by_member_id)
    return row


@router.get("", response_model=schemas.DailyServiceListResponse)
def list_services(
    day: Optional[date] = Query(None, description="Service day, defaults to today"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.DailyServiceListResponse:
    selected = day or clock.today()
    services = DailyServiceService.list_for_day(db, member.business_id, selected)
    names = BusinessService.member_names(
        db,
        [service.created_by_member_id for service in services]
        + [service.finished_by_member_id for service in services],
    )
    items = []
    for service in services:
        row = schemas.DailyServiceRead.model_validate(service)
        row.created_by_name = names.get(service.created_by_member_id)
        row.finished_by_name = names.get(service.finished_by_member_id)
        items.append(row)
    return schemas.DailyServiceListResponse(
        items=items,
        total=len(items),
        service_date=selected,
        has_pending=any(item.status == models.ServiceStatus.PENDENTE for item in items),
    )


@router.post("", response_model=schemas.DailyServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    payload: schemas.DailyServiceCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.DailyServiceRead:
    try:
        service = DailyServiceService.create_service(
            db, member.business_id, payload, today=clock.today(), member_id=member.member_id
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return _with_names(service, db)


@router.get("/pickup-reminders", response_model=schemas.PickupReminderListResponse)
def list_pickup_reminders(
    day: Optional[date] = Query(None, description="Service day, defaults to today"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.PickupReminderListResponse:
    try:
        business = BusinessService.get_business(db, member.business_id)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    items = DailyServiceService.pickup_reminder_links(db, business, day or clock.today())
    return schemas.PickupReminderListResponse(items=items, total=len(items))


@router.post("/{service_id}/finish", response_model=schemas.FinishServiceResponse)
def finish_service(
    service_id: str,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.FinishServiceResponse:
    try:
        business = BusinessService.get_business(db, member.business_id)
        service, url = DailyServiceService.finish_service(
            db, business, service_id, member_id=member.member_id
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return schemas.FinishServiceResponse(service=_with_names(service, db), whatsapp_url=url)


@router.patch("/{service_id}", response_model=schemas.DailyServiceRead)
def update_service(
    service_id: str,
    payload: schemas.DailyServiceUpdate,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.DailyServiceRead:
    try:
        service = DailyServiceService.update_service(db, member.business_id, service_id, payload)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return _with_names(service, db)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    service_id: str,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> None:
    try:
        DailyServiceService.delete_service(db, member.business_id, service_id)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
