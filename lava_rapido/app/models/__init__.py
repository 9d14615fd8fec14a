"""Expose SQLAlchemy models for convenient imports."""

from .business import Business, BusinessMember, MemberRole
from .daily_service import DailyService, ServiceStatus, VehicleType
from .expense import Expense, ExpenseStatus, ExpenseType
from .expense_reminder import ExpenseReminder
from .service_price import ServicePrice

__all__ = [
    "Business",
    "BusinessMember",
    "MemberRole",
    "DailyService",
    "ServiceStatus",
    "VehicleType",
    "Expense",
    "ExpenseStatus",
    "ExpenseType",
    "ExpenseReminder",
    "ServicePrice",
]
