"""Routers package."""

from .businesses import router as businesses_router
from .daily_services import router as daily_services_router
from .expense_types import router as expense_types_router
from .expenses import router as expenses_router
from .reports import router as reports_router
from .service_prices import router as service_prices_router

__all__ = [
    "businesses_router",
    "daily_services_router",
    "expense_types_router",
    "expenses_router",
    "reports_router",
    "service_prices_router",
]
