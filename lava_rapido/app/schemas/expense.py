from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.expense import ExpenseStatus
from .common import ListResponse


class ExpenseTypeRead(BaseModel):
    """Recurring bill template as stored."""

    id: str
    name: str
    is_fixed: bool
    default_value: Optional[Decimal] = None
    available_day: int
    due_day: int

    model_config = ConfigDict(from_attributes=True)


class ExpenseTypeUpdate(BaseModel):
    """Editable fields of a recurring bill template."""

    default_value: Optional[Decimal] = Field(default=None, ge=0)
    available_day: Optional[int] = Field(
        default=None, ge=1, le=31, description="First day of the month the bill may be recorded"
    )
    due_day: Optional[int] = Field(
        default=None, ge=1, le=31, description="Day of the month the bill should be paid"
    )


class ExpenseTypeBulkItem(ExpenseTypeUpdate):
    id: str


class ExpenseTypeBulkUpdate(BaseModel):
    items: List[ExpenseTypeBulkItem] = Field(..., min_length=1)


class ExpenseTypeListResponse(ListResponse[ExpenseTypeRead]):
    pass


class AdHocExpenseCreate(BaseModel):
    """Free-form expense entered from the expenses screen.

    Fields are deliberately lenient; the ledger applies the business rules in a
    fixed order so the first broken rule is the one reported.
    """

    value: Optional[Decimal] = Field(default=None, description="Amount of the expense")
    category: Optional[str] = Field(default=None, description="Expense category")
    description: Optional[str] = None
    status: ExpenseStatus = ExpenseStatus.PENDENTE
    due_date: Optional[date] = Field(
        default=None, description="Deadline, required for pending expenses"
    )


class ExpensePayment(BaseModel):
    """Data captured when a pending expense is paid."""

    amount_paid: Decimal = Field(..., gt=0, description="Amount actually paid")
    paid_at: date = Field(..., description="Payment date")
    description: Optional[str] = None


class ExpenseRead(BaseModel):
    id: str
    expense_type_id: Optional[str] = None
    name: str
    category: Optional[str] = None
    month_year: str
    is_recurring: bool
    status: ExpenseStatus
    due_date: Optional[date] = None
    due_day: Optional[int] = None
    default_value: Optional[Decimal] = None
    amount_paid: Optional[Decimal] = None
    paid_at: Optional[date] = None
    description: Optional[str] = None
    created_by_member_id: Optional[str] = None
    paid_by_member_id: Optional[str] = None
    created_by_name: Optional[str] = None
    paid_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListResponse(ListResponse[ExpenseRead]):
    month_year: str
    generated: int = Field(default=0, ge=0, description="Recurring entries created by this request")


class ExpenseReminderRead(BaseModel):
    expense_id: str
    name: str
    category: Optional[str] = None
    due_date: date
    overdue: bool
    default_value: Optional[Decimal] = None


class ExpenseReminderListResponse(ListResponse[ExpenseReminderRead]):
    shown_date: date
