"""Router exposing business provisioning and membership."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import (
    AuthenticatedUser,
    MemberIdentity,
    get_current_member,
    get_current_user,
    require_owner,
)
from ..services import BusinessService
from .errors import database_error, http_error

router = APIRouter()


@router.post("", response_model=schemas.BusinessRead, status_code=status.HTTP_201_CREATED)
def create_business(
    payload: schemas.BusinessCreate,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.BusinessRead:
    """Open a new car wash with the caller as owner."""

    try:
        return BusinessService.create_business(db, user_id=user.user_id, data=payload)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "creating a business") from exc


@router.post("/join", response_model=schemas.BusinessRead)
def join_business(
    payload: schemas.BusinessJoin,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> schemas.BusinessRead:
    try:
        return BusinessService.join_business(db, user_id=user.user_id, data=payload)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "joining a business") from exc


@router.get("/me", response_model=schemas.BusinessRead)
def read_my_business(
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.BusinessRead:
    try:
        return BusinessService.get_business(db, member.business_id)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc


@router.patch("/me", response_model=schemas.BusinessRead)
def update_my_business(
    payload: schemas.BusinessSettingsUpdate,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(require_owner),
) -> schemas.BusinessRead:
    try:
        business = BusinessService.get_business(db, member.business_id)
        return BusinessService.update_settings(db, business, payload)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
