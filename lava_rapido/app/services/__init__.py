"""Service layer encapsulating business logic for API routers."""

from .businesses import BusinessService
from .daily_services import DailyServiceService, whatsapp_url
from .expense_reminders import (
    ExpenseReminderService,
    build_notification_client_from_env,
    start_expense_reminder_scheduler,
    stop_expense_reminder_scheduler,
)
from .expense_types import ExpenseTypeService
from .expenses import ExpenseService
from .periods import PeriodService
from .reports import ReportService
from .service_prices import SERVICE_NAMES, ServicePriceService

__all__ = [
    "BusinessService",
    "DailyServiceService",
    "whatsapp_url",
    "ExpenseReminderService",
    "build_notification_client_from_env",
    "start_expense_reminder_scheduler",
    "stop_expense_reminder_scheduler",
    "ExpenseTypeService",
    "ExpenseService",
    "PeriodService",
    "ReportService",
    "SERVICE_NAMES",
    "ServicePriceService",
]
