from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .daily_service import DailyServiceRead


class MonthlyReport(BaseModel):
    """Revenue, expense and profit figures for a date range."""

    start_date: date
    end_date: date
    total_services: int = Field(..., ge=0)
    revenue: Decimal
    total_expenses: Decimal
    profit: Decimal
    partner_commission: Decimal
    commission_rate: Decimal


class PaidExpenseRead(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    amount_paid: Optional[Decimal] = None
    paid_at: Optional[date] = None
    description: Optional[str] = None
    paid_by_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class HistoryResponse(BaseModel):
    summary: MonthlyReport
    services: List[DailyServiceRead]
    expenses: List[PaidExpenseRead]
