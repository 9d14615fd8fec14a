"""Router exposing the recurring bill templates."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import MemberIdentity, get_current_member, require_owner
from ..services import ExpenseTypeService
from .errors import http_error

router = APIRouter()


@router.get("", response_model=schemas.ExpenseTypeListResponse)
def list_expense_types(
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ExpenseTypeListResponse:
    items = ExpenseTypeService.list_types(db, member.business_id)
    return schemas.ExpenseTypeListResponse(items=items, total=len(items))


@router.patch("/{expense_type_id}", response_model=schemas.ExpenseTypeRead)
def update_expense_type(
    expense_type_id: str,
    payload: schemas.ExpenseTypeUpdate,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(require_owner),
) -> schemas.ExpenseTypeRead:
    try:
        return ExpenseTypeService.update_type(db, member.business_id, expense_type_id, payload)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc


@router.put("", response_model=schemas.ExpenseTypeListResponse)
def update_expense_types(
    payload: schemas.ExpenseTypeBulkUpdate,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(require_owner),
) -> schemas.ExpenseTypeListResponse:
    """Save the admin settings table; either every row changes or none does."""

    try:
        items = ExpenseTypeService.update_types(db, member.business_id, payload.items)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    return schemas.ExpenseTypeListResponse(items=items, total=len(items))
