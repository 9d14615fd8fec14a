"""Router exposing the monthly expense ledger."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..clock import Clock, get_clock, month_key
from ..database import get_db
from ..errors import LavaRapidoError
from ..security import MemberIdentity, get_current_member
from ..services import BusinessService, ExpenseReminderService, ExpenseService
from .errors import database_error, http_error

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _to_read(expense: models.Expense, names: Dict[str, str]) -> schemas.ExpenseRead:
    row = schemas.ExpenseRead.model_validate(expense)
    if expense.expense_type is not None:
        row.due_day = expense.expense_type.due_day
        row.default_value = expense.expense_type.default_value
    row.created_by_name = names.get(expense.created_by_member_id)
    row.paid_by_name = names.get(expense.paid_by_member_id)
    return row


@router.get("", response_model=schemas.ExpenseListResponse)
def list_expenses(
    month_year: Optional[str] = Query(None, description="Month to list, YYYY-MM"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ExpenseListResponse:
    """Return the month's expenses, creating the recurring ones that are due."""

    today = clock.today()
    selected = month_year or month_key(today)
    try:
        created = ExpenseService.ensure_recurring_instances(
            db, member.business_id, selected, today
        )
        expenses = ExpenseService.list_expenses(db, member.business_id, selected)
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "listing expenses") from exc

    names = BusinessService.member_names(
        db,
        [expense.created_by_member_id for expense in expenses]
        + [expense.paid_by_member_id for expense in expenses],
    )
    items = [_to_read(expense, names) for expense in expenses]
    return schemas.ExpenseListResponse(
        items=items, total=len(items), month_year=selected, generated=len(created)
    )


@router.post("", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: schemas.AdHocExpenseCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ExpenseRead:
    try:
        business = BusinessService.get_business(db, member.business_id)
        expense = ExpenseService.add_ad_hoc_expense(
            db,
            member.business_id,
            payload,
            today=clock.today(),
            member_id=member.member_id,
            settings=BusinessService.financial_settings(business),
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    names = BusinessService.member_names(db, [member.member_id])
    return _to_read(expense, names)


@router.get("/reminders", response_model=schemas.ExpenseReminderListResponse)
def list_due_reminders(
    days_ahead: int = Query(3, ge=0, le=31, description="Days ahead to look for due bills"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ExpenseReminderListResponse:
    """Bills due soon that have not been shown to this member yet today."""

    today = clock.today()
    try:
        due = ExpenseReminderService.due_reminders(
            db, member.business_id, today, days_ahead=days_ahead, member_id=member.member_id
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    items = [
        schemas.ExpenseReminderRead(
            expense_id=item.expense_id,
            name=item.name,
            category=item.category,
            due_date=item.due_date,
            overdue=item.overdue,
            default_value=item.default_value,
        )
        for item in due
    ]
    return schemas.ExpenseReminderListResponse(items=items, total=len(items), shown_date=today)


@router.post("/{expense_id}/pay", response_model=schemas.ExpenseRead)
def pay_expense(
    expense_id: str,
    payload: schemas.ExpensePayment,
    db: Session = Depends(get_db),
    member: MemberIdentity = Depends(get_current_member),
) -> schemas.ExpenseRead:
    try:
        expense = ExpenseService.pay_expense(
            db, member.business_id, expense_id, payload, member_id=member.member_id
        )
    except LavaRapidoError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        raise database_error(db, exc, "paying an expense") from exc
    names = BusinessService.member_names(
        db, [expense.created_by_member_id, expense.paid_by_member_id]
    )
    return _to_read(expense, names)
