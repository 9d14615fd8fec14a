"""Business logic for the monthly expense ledger."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..clock import month_key
from ..config import FinancialSettings
from ..errors import ExpenseAlreadyPaidError, NotFoundError, ValidationError
from .expense_types import ExpenseTypeService
from .periods import PeriodService
from .persistence import commit_or_raise

LOGGER = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def _clean_description(text: Optional[str], settings: FinancialSettings) -> Optional[str]:
    description = (text or "").strip() or None
    if description and len(description) > settings.max_description_length:
        raise ValidationError(
            f"A descrição deve ter no máximo {settings.max_description_length} caracteres"
        )
    return description


class ExpenseService:
    """Encapsulates the expense operations of a business."""

    @staticmethod
    def list_expenses(db: Session, business_id: str, month_year: str) -> List[models.Expense]:
        """Return the month's expenses, recurring ones first, then by name."""

        normalized, _, _ = PeriodService.normalize_period(month_year)
        return (
            db.query(models.Expense)
            .filter(models.Expense.business_id == business_id)
            .filter(models.Expense.month_year == normalized)
            .order_by(models.Expense.is_recurring.desc(), models.Expense.name.asc())
            .all()
        )

    @staticmethod
    def get_expense(db: Session, business_id: str, expense_id: str) -> Optional[models.Expense]:
        return (
            db.query(models.Expense)
            .filter(models.Expense.business_id == business_id)
            .filter(models.Expense.id == expense_id)
            .first()
        )

    @staticmethod
    def ensure_recurring_instances(
        db: Session,
        business_id: str,
        month_year: str,
        today: date,
    ) -> List[models.Expense]:
        """Create the missing recurring entries of the current month.

        Nothing is generated for past or future months, nor for bill types
        whose available day has not arrived yet. Running this twice, or from
        two sessions at once, never leaves duplicates behind: the unique key
        on (business, type, month) rejects the second insert and the loser
        keeps going with the remaining types.
        """

        normalized, _, _ = PeriodService.normalize_period(month_year)
        if normalized != month_key(today):
            return []

        eligible = [
            expense_type
            for expense_type in ExpenseTypeService.list_types(db, business_id)
            if today.day >= expense_type.available_day
        ]
        if not eligible:
            return []

        existing = ExpenseService._existing_type_ids(
            db, business_id, normalized, [expense_type.id for expense_type in eligible]
        )
        created: List[models.Expense] = []
        for expense_type in eligible:
            if expense_type.id in existing:
                continue
            expense = ExpenseService._insert_recurring_instance(db, expense_type, normalized)
            if expense is not None:
                created.append(expense)

        if created:
            commit_or_raise(db, "Erro ao gerar despesas recorrentes")
            LOGGER.info(
                "Generated %s recurring expenses for business %s in %s",
                len(created),
                business_id,
                normalized,
            )
        return created

    @staticmethod
    def _existing_type_ids(
        db: Session,
        business_id: str,
        month_year: str,
        type_ids: Iterable[str],
    ) -> Set[str]:
        rows = (
            db.query(models.Expense.expense_type_id)
            .filter(models.Expense.business_id == business_id)
            .filter(models.Expense.month_year == month_year)
            .filter(models.Expense.expense_type_id.in_(list(type_ids)))
            .all()
        )
        return {row.expense_type_id for row in rows}

    @staticmethod
    def _insert_recurring_instance(
        db: Session,
        expense_type: models.ExpenseType,
        month_year: str,
    ) -> Optional[models.Expense]:
        expense = models.Expense(
            business_id=expense_type.business_id,
            expense_type_id=expense_type.id,
            name=expense_type.name,
            month_year=month_year,
            is_recurring=True,
            status=models.ExpenseStatus.PENDENTE,
        )
        try:
            with db.begin_nested():
                db.add(expense)
        except IntegrityError:
            LOGGER.info(
                "Recurring expense %s for %s already exists; skipping",
                expense_type.name,
                month_year,
            )
            return None
        return expense

    @staticmethod
    def add_ad_hoc_expense(
        db: Session,
        business_id: str,
        data: schemas.AdHocExpenseCreate,
        *,
        today: date,
        member_id: Optional[str] = None,
        settings: Optional[FinancialSettings] = None,
    ) -> models.Expense:
        """Record a one-off expense in the current month.

        Rules are checked in a fixed order and the first failure is reported.
        """

        settings = settings or FinancialSettings.from_env()

        if data.value is None:
            raise ValidationError("Informe o valor da despesa")
        if data.value <= 0:
            raise ValidationError("O valor deve ser maior que zero")
        if data.value > settings.max_expense_amount:
            raise ValidationError("O valor não pode ultrapassar R$ 1.000.000,00")

        category = (data.category or "").strip()
        if not category:
            raise ValidationError("Selecione a categoria da despesa")
        if category not in settings.expense_categories:
            raise ValidationError(f"Categoria inválida: {category}")

        description = _clean_description(data.description, settings)

        is_paid = data.status == models.ExpenseStatus.PAGO
        if not is_paid and data.due_date is None:
            raise ValidationError("Preencha a data limite para despesas pendentes")

        expense = models.Expense(
            business_id=business_id,
            expense_type_id=None,
            name=category,
            category=category,
            month_year=month_key(today),
            is_recurring=False,
            status=data.status,
            description=description,
            created_by_member_id=member_id,
        )
        if is_paid:
            expense.amount_paid = _to_money(data.value)
            expense.paid_at = today
            expense.paid_by_member_id = member_id
        else:
            expense.due_date = data.due_date

        db.add(expense)
        commit_or_raise(db, "Erro ao adicionar despesa")
        db.refresh(expense)
        LOGGER.info(
            "Ad-hoc expense %s (%s) recorded for business %s",
            expense.id,
            expense.status.value,
            business_id,
        )
        return expense

    @staticmethod
    def pay_expense(
        db: Session,
        business_id: str,
        expense_id: str,
        data: schemas.ExpensePayment,
        *,
        member_id: Optional[str] = None,
        settings: Optional[FinancialSettings] = None,
    ) -> models.Expense:
        """Move a pending expense to ``pago``.

        The update only matches rows that are still pending, so of two
        concurrent payments exactly one wins and the other sees
        ``ExpenseAlreadyPaidError``.
        """

        settings = settings or FinancialSettings.from_env()
        description = _clean_description(data.description, settings)

        values = {
            models.Expense.status: models.ExpenseStatus.PAGO,
            models.Expense.amount_paid: _to_money(data.amount_paid),
            models.Expense.paid_at: data.paid_at,
            models.Expense.paid_by_member_id: member_id,
        }
        if description:
            values[models.Expense.description] = description

        updated = (
            db.query(models.Expense)
            .filter(models.Expense.business_id == business_id)
            .filter(models.Expense.id == expense_id)
            .filter(models.Expense.status == models.ExpenseStatus.PENDENTE)
            .update(values, synchronize_session=False)
        )
        if not updated:
            exists = ExpenseService.get_expense(db, business_id, expense_id)
            db.rollback()
            if exists is None:
                raise NotFoundError("Despesa não encontrada")
            raise ExpenseAlreadyPaidError("Esta despesa já foi paga")

        commit_or_raise(db, "Erro ao registrar pagamento")
        expense = ExpenseService.get_expense(db, business_id, expense_id)
        LOGGER.info("Expense %s paid for business %s", expense_id, business_id)
        return expense
