"""Expose Pydantic schemas for convenient imports."""

from .business import (
    BusinessCreate,
    BusinessJoin,
    BusinessRead,
    BusinessSettingsUpdate,
    MemberRead,
)
from .common import ListResponse
from .daily_service import (
    DailyServiceCreate,
    DailyServiceListResponse,
    DailyServiceRead,
    DailyServiceUpdate,
    FinishServiceResponse,
    PickupReminder,
    PickupReminderListResponse,
)
from .expense import (
    AdHocExpenseCreate,
    ExpenseListResponse,
    ExpensePayment,
    ExpenseRead,
    ExpenseReminderListResponse,
    ExpenseReminderRead,
    ExpenseTypeBulkItem,
    ExpenseTypeBulkUpdate,
    ExpenseTypeListResponse,
    ExpenseTypeRead,
    ExpenseTypeUpdate,
)
from .report import HistoryResponse, MonthlyReport, PaidExpenseRead
from .service_price import (
    ServicePriceListResponse,
    ServicePriceRead,
    ServicePriceUpdate,
    ServiceQuote,
)

__all__ = [
    "BusinessCreate",
    "BusinessJoin",
    "BusinessRead",
    "BusinessSettingsUpdate",
    "MemberRead",
    "ListResponse",
    "DailyServiceCreate",
    "DailyServiceListResponse",
    "DailyServiceRead",
    "DailyServiceUpdate",
    "FinishServiceResponse",
    "PickupReminder",
    "PickupReminderListResponse",
    "AdHocExpenseCreate",
    "ExpenseListResponse",
    "ExpensePayment",
    "ExpenseRead",
    "ExpenseReminderListResponse",
    "ExpenseReminderRead",
    "ExpenseTypeBulkItem",
    "ExpenseTypeBulkUpdate",
    "ExpenseTypeListResponse",
    "ExpenseTypeRead",
    "ExpenseTypeUpdate",
    "HistoryResponse",
    "MonthlyReport",
    "PaidExpenseRead",
    "ServicePriceListResponse",
    "ServicePriceRead",
    "ServicePriceUpdate",
    "ServiceQuote",
]
