"""Reminders for pending bills that are due soon."""

from __future__ import annotations

import abc
import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..clock import Clock, SystemClock, month_key
from ..config import read_bool_env, read_int_env
from ..database import session_scope
from ..errors import ValidationError
from .expenses import ExpenseService
from .periods import PeriodService
from .persistence import commit_or_raise
from .scheduler_monitor import JOB_EXPENSE_REMINDERS, SchedulerMonitor

LOGGER = logging.getLogger(__name__)

DEFAULT_DAYS_AHEAD = 3


class ConfigurationError(RuntimeError):
    """Raised when a notification client cannot be configured."""


class NotificationError(RuntimeError):
    """Raised when the remote endpoint rejects a notification."""


@dataclass
class NotificationResult:
    """Outcome returned by a notification provider."""

    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class NotificationClient(abc.ABC):
    """Interface implemented by outbound notification providers."""

    channel: str

    @abc.abstractmethod
    def send_message(self, *, business_name: str, subject: str, plain_text: str) -> NotificationResult:
        """Deliver the message and return the delivery result."""


class ConsoleNotificationClient(NotificationClient):
    """Writes reminders to the log; used when no webhook is configured."""

    channel = "console"

    def __init__(self) -> None:
        self.records: list[dict[str, str]] = []

    def send_message(self, *, business_name: str, subject: str, plain_text: str) -> NotificationResult:
        self.records.append(
            {"business_name": business_name, "subject": subject, "plain_text": plain_text}
        )
        LOGGER.info("[console] %s: %s", business_name, plain_text.replace("\n", " "))
        return NotificationResult(success=True, status_code=200)


class WebhookNotificationClient(NotificationClient):
    """POST reminders as JSON to a chat or automation webhook."""

    channel = "webhook"

    def __init__(self, *, url: str | None, timeout: float = 10.0) -> None:
        if not url:
            raise ConfigurationError(
                "Falta a variável EXPENSE_REMINDER_WEBHOOK_URL para enviar lembretes."
            )
        self.url = url
        self.timeout = timeout

    def send_message(self, *, business_name: str, subject: str, plain_text: str) -> NotificationResult:
        payload = {"business": business_name, "subject": subject, "text": plain_text}
        try:
            response = httpx.post(self.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise NotificationError(f"Erro de rede ao contatar o webhook: {exc}") from exc

        if response.status_code >= 400:
            return NotificationResult(
                success=False, status_code=response.status_code, error=response.text
            )
        return NotificationResult(success=True, status_code=response.status_code)


@dataclass
class DueExpense:
    """Pending expense whose due date is inside the reminder window."""

    expense_id: str
    name: str
    category: Optional[str]
    due_date: date
    overdue: bool
    default_value: Optional[Decimal] = None


@dataclass
class ExpenseReminderSummary:
    """Aggregate statistics after a reminder run."""

    businesses: int = 0
    reminders: int = 0
    sent: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "businesses": self.businesses,
            "reminders": self.reminders,
            "sent": self.sent,
            "failed": self.failed,
        }


@dataclass
class _BusinessReminders:
    business: models.Business
    items: List[DueExpense] = field(default_factory=list)


class ExpenseReminderService:
    """Finds bills that are due soon and dispatches reminders."""

    @staticmethod
    def due_reminders(
        db: Session,
        business_id: str,
        today: date,
        *,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
        member_id: Optional[str] = None,
    ) -> List[DueExpense]:
        """Return pending expenses due within ``days_ahead`` days.

        When ``member_id`` is given each returned expense is marked as shown
        to that member for ``today`` and will not be returned to them again on
        the same day. Other members of the business still see it.
        """

        if days_ahead < 0:
            raise ValidationError("O número de dias deve ser maior ou igual a zero.")

        ExpenseService.ensure_recurring_instances(db, business_id, month_key(today), today)

        limit = today + timedelta(days=days_ahead)
        shown_today = set()
        if member_id is not None:
            shown_today = {
                row.expense_id
                for row in db.query(models.ExpenseReminder.expense_id)
                .filter(models.ExpenseReminder.member_id == member_id)
                .filter(models.ExpenseReminder.shown_date == today)
                .all()
            }

        due: List[DueExpense] = []
        for expense in ExpenseService.list_expenses(db, business_id, month_key(today)):
            if expense.status != models.ExpenseStatus.PENDENTE or expense.id in shown_today:
                continue
            due_date = ExpenseReminderService._due_date_for(expense, today)
            if due_date is None or due_date > limit:
                continue
            expense_type = expense.expense_type
            due.append(
                DueExpense(
                    expense_id=expense.id,
                    name=expense.name,
                    category=expense.category,
                    due_date=due_date,
                    overdue=due_date < today,
                    default_value=expense_type.default_value if expense_type else None,
                )
            )

        due.sort(key=lambda item: (item.due_date, item.name))
        if member_id is not None and due:
            ExpenseReminderService._mark_shown(db, business_id, member_id, due, today)
        return due

    @staticmethod
    def _due_date_for(expense: models.Expense, today: date) -> Optional[date]:
        if expense.due_date is not None:
            return expense.due_date
        if expense.expense_type is None:
            return None
        return PeriodService.clamp_day(today.year, today.month, expense.expense_type.due_day)

    @staticmethod
    def _mark_shown(
        db: Session, business_id: str, member_id: str, due: List[DueExpense], today: date
    ) -> None:
        for item in due:
            try:
                with db.begin_nested():
                    db.add(
                        models.ExpenseReminder(
                            business_id=business_id,
                            expense_id=item.expense_id,
                            member_id=member_id,
                            shown_date=today,
                        )
                    )
            except IntegrityError:
                LOGGER.debug(
                    "Reminder for expense %s already recorded for member %s on %s",
                    item.expense_id,
                    member_id,
                    today,
                )
        commit_or_raise(db, "Erro ao registrar lembretes")

    @staticmethod
    def send_reminders(
        db: Session,
        notification_client: NotificationClient,
        today: date,
        *,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
    ) -> ExpenseReminderSummary:
        """Send one message per business listing its bills due soon."""

        summary = ExpenseReminderSummary()
        batches = []
        for business in db.query(models.Business).order_by(models.Business.name).all():
            items = ExpenseReminderService.due_reminders(
                db, business.id, today, days_ahead=days_ahead
            )
            if items:
                batches.append(_BusinessReminders(business=business, items=items))

        for batch in batches:
            summary.businesses += 1
            summary.reminders += len(batch.items)
            subject, plain_text = ExpenseReminderService._compose_message(batch, today)
            try:
                result = notification_client.send_message(
                    business_name=batch.business.name, subject=subject, plain_text=plain_text
                )
            except NotificationError as exc:
                LOGGER.warning("Falha ao enviar lembretes para %s: %s", batch.business.name, exc)
                result = NotificationResult(success=False, error=str(exc))

            if result.success:
                summary.sent += 1
            else:
                summary.failed += 1
                LOGGER.warning(
                    "Lembrete recusado para %s (%s): %s",
                    batch.business.name,
                    result.status_code,
                    result.error,
                )
        return summary

    @staticmethod
    def _compose_message(batch: _BusinessReminders, today: date) -> tuple[str, str]:
        subject = f"Contas a pagar - {batch.business.name}"
        lines = [f"Contas pendentes em {today.strftime('%d/%m/%Y')}:", ""]
        for item in batch.items:
            state = "vencida" if item.overdue else "vence"
            lines.append(f"- {item.name}: {state} em {item.due_date.strftime('%d/%m/%Y')}")
        return subject, "\n".join(lines)


def build_notification_client_from_env(*, fallback_to_console: bool = True) -> NotificationClient:
    """Instantiate a notification client from environment variables."""

    transport = os.getenv("EXPENSE_REMINDER_TRANSPORT", "console").strip().lower()
    if transport == "webhook":
        try:
            return WebhookNotificationClient(url=os.getenv("EXPENSE_REMINDER_WEBHOOK_URL"))
        except ConfigurationError as exc:
            if not fallback_to_console:
                raise
            LOGGER.warning("%s; usando a saída pelo console.", exc)
    return ConsoleNotificationClient()


_reminder_thread: Optional[threading.Thread] = None
_reminder_stop = threading.Event()


def _seconds_until_next_run(now: datetime, run_hour: int, run_minute: int) -> float:
    scheduled_time = time(hour=run_hour, minute=run_minute, tzinfo=now.tzinfo)
    next_run = datetime.combine(now.date(), scheduled_time)
    if next_run <= now:
        next_run += timedelta(days=1)
    return max((next_run - now).total_seconds(), 60.0)


def _execute_reminder_cycle(clock: Clock, days_ahead: int) -> None:
    try:
        client = build_notification_client_from_env()
        with session_scope() as session:
            summary = ExpenseReminderService.send_reminders(
                session, client, clock.today(), days_ahead=days_ahead
            )
        if summary.reminders:
            LOGGER.info("Lembretes de despesas enviados: %s", summary.to_dict())
        else:
            LOGGER.info("Nenhuma despesa a lembrar nesta execução.")
    except Exception as exc:  # pragma: no cover - keeps the worker alive
        LOGGER.exception("Erro ao executar o ciclo de lembretes: %s", exc)
        SchedulerMonitor.record_error(JOB_EXPENSE_REMINDERS, str(exc))
    finally:
        SchedulerMonitor.record_tick(JOB_EXPENSE_REMINDERS)


def _reminder_worker() -> None:
    clock = SystemClock()
    days_ahead = read_int_env("EXPENSE_REMINDER_DAYS_AHEAD", DEFAULT_DAYS_AHEAD)
    run_hour = min(read_int_env("EXPENSE_REMINDER_RUN_HOUR", 8), 23)
    run_minute = min(read_int_env("EXPENSE_REMINDER_RUN_MINUTE", 0), 59)

    if read_bool_env("EXPENSE_REMINDER_RUN_ON_START", True):
        _execute_reminder_cycle(clock, days_ahead)

    while not _reminder_stop.is_set():
        wait_seconds = _seconds_until_next_run(clock.now(), run_hour, run_minute)
        if _reminder_stop.wait(wait_seconds):
            break
        _execute_reminder_cycle(clock, days_ahead)


def start_expense_reminder_scheduler() -> None:
    """Start the background worker that sends daily bill reminders."""

    if not read_bool_env("EXPENSE_REMINDER_SCHEDULER_ENABLED"):
        LOGGER.info(
            "Agendador de lembretes desativado. Defina EXPENSE_REMINDER_SCHEDULER_ENABLED=1 para ativá-lo."
        )
        SchedulerMonitor.set_job_enabled(JOB_EXPENSE_REMINDERS, False)
        return

    global _reminder_thread
    if _reminder_thread and _reminder_thread.is_alive():
        return

    SchedulerMonitor.set_job_enabled(JOB_EXPENSE_REMINDERS, True)
    _reminder_stop.clear()
    _reminder_thread = threading.Thread(target=_reminder_worker, daemon=True)
    _reminder_thread.start()
    LOGGER.info("Agendador de lembretes iniciado.")


def stop_expense_reminder_scheduler() -> None:
    """Stop the expense reminder background worker."""

    _reminder_stop.set()
    if _reminder_thread and _reminder_thread.is_alive():
        _reminder_thread.join(timeout=5)
        LOGGER.info("Agendador de lembretes parado.")
