"""Reporting aggregator for revenue, expenses, profit and commission."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import FinancialSettings
from ..errors import ValidationError
from .businesses import BusinessService
from .periods import PeriodService


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is None or end_date is None:
        raise ValidationError("Informe a data inicial e a data final")
    if start_date > end_date:
        raise ValidationError("A data inicial não pode ser posterior à data final")


class ReportService:
    """Summaries derived from services and paid expenses of a date range.

    Every service in the range counts towards revenue whatever its status, and
    an expense counts once it is ``pago`` with ``paid_at`` inside the range.
    All sums are exact ``Decimal`` arithmetic; the commission is not rounded.
    """

    @staticmethod
    def compute_summary(
        db: Session,
        business_id: str,
        start_date: Optional[date],
        end_date: Optional[date],
        settings: Optional[FinancialSettings] = None,
    ) -> schemas.MonthlyReport:
        _check_range(start_date, end_date)
        settings = settings or FinancialSettings.from_env()

        values = [
            row.value
            for row in ReportService._services_query(db, business_id, start_date, end_date)
            .with_entities(models.DailyService.value)
            .all()
        ]
        amounts = [
            row.amount_paid
            for row in ReportService._paid_expenses_query(db, business_id, start_date, end_date)
            .with_entities(models.Expense.amount_paid)
            .all()
        ]

        revenue = sum((Decimal(value) for value in values), Decimal("0"))
        total_expenses = sum(
            (Decimal(amount) for amount in amounts if amount is not None), Decimal("0")
        )
        return schemas.MonthlyReport(
            start_date=start_date,
            end_date=end_date,
            total_services=len(values),
            revenue=revenue,
            total_expenses=total_expenses,
            profit=revenue - total_expenses,
            partner_commission=revenue * settings.commission_rate,
            commission_rate=settings.commission_rate,
        )

    @staticmethod
    def current_month_summary(
        db: Session,
        business_id: str,
        today: date,
        settings: Optional[FinancialSettings] = None,
    ) -> schemas.MonthlyReport:
        start_date, end_date = PeriodService.month_bounds(today)
        return ReportService.compute_summary(db, business_id, start_date, end_date, settings)

    @staticmethod
    def history(
        db: Session,
        business_id: str,
        start_date: Optional[date],
        end_date: Optional[date],
        settings: Optional[FinancialSettings] = None,
    ) -> schemas.HistoryResponse:
        summary = ReportService.compute_summary(db, business_id, start_date, end_date, settings)

        services: List[models.DailyService] = (
            ReportService._services_query(db, business_id, start_date, end_date)
            .order_by(models.DailyService.service_date.desc(), models.DailyService.created_at.desc())
            .all()
        )
        expenses: List[models.Expense] = (
            ReportService._paid_expenses_query(db, business_id, start_date, end_date)
            .order_by(models.Expense.paid_at.desc(), models.Expense.name.asc())
            .all()
        )

        names = BusinessService.member_names(
            db,
            [service.created_by_member_id for service in services]
            + [service.finished_by_member_id for service in services]
            + [expense.paid_by_member_id for expense in expenses],
        )
        service_rows = []
        for service in services:
            row = schemas.DailyServiceRead.model_validate(service)
            row.created_by_name = names.get(service.created_by_member_id)
            row.finished_by_name = names.get(service.finished_by_member_id)
            service_rows.append(row)
        expense_rows = []
        for expense in expenses:
            row = schemas.PaidExpenseRead.model_validate(expense)
            row.paid_by_name = names.get(expense.paid_by_member_id)
            expense_rows.append(row)

        return schemas.HistoryResponse(summary=summary, services=service_rows, expenses=expense_rows)

    @staticmethod
    def _services_query(db: Session, business_id: str, start_date: date, end_date: date):
        return (
            db.query(models.DailyService)
            .filter(models.DailyService.business_id == business_id)
            .filter(models.DailyService.service_date >= start_date)
            .filter(models.DailyService.service_date <= end_date)
        )

    @staticmethod
    def _paid_expenses_query(db: Session, business_id: str, start_date: date, end_date: date):
        return (
            db.query(models.Expense)
            .filter(models.Expense.business_id == business_id)
            .filter(models.Expense.status == models.ExpenseStatus.PAGO)
            .filter(models.Expense.paid_at >= start_date)
            .filter(models.Expense.paid_at <= end_date)
        )
