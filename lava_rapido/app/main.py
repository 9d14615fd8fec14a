"""Expose the Lava Rápido FastAPI app and enforce local development CORS defaults."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Callable, Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import read_bool_env
from .migrations import run_database_migrations
from .routers import (
    businesses_router,
    daily_services_router,
    expense_types_router,
    expenses_router,
    reports_router,
    service_prices_router,
)
from .services.expense_reminders import (
    start_expense_reminder_scheduler,
    stop_expense_reminder_scheduler,
)
from .services.scheduler_monitor import JOB_EXPENSE_REMINDERS, SchedulerMonitor

LOGGER = logging.getLogger(__name__)

LOCAL_DEVELOPMENT_ORIGIN = "http://localhost:8080"
LOCAL_DEVELOPMENT_ORIGINS = {
    LOCAL_DEVELOPMENT_ORIGIN,
    "http://localhost:5173",
}
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

DEFAULT_ALLOWED_ORIGINS = {
    *LOCAL_DEVELOPMENT_ORIGINS,
    "http://127.0.0.1:8080",
    "http://0.0.0.0:8080",
    "http://127.0.0.1:5173",
    "http://0.0.0.0:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
}


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def _read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""

    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _load_allowed_origins_from_env() -> list[str]:
    raw_value = os.getenv("CORS_ALLOWED_ORIGINS")
    if not raw_value:
        return []
    return _read_allowed_origins(_split_raw_origins(raw_value))


def _resolve_allowed_origins() -> list[str]:
    env_origins = _load_allowed_origins_from_env()
    if env_origins:
        origins = list(env_origins)
    else:
        origins = _read_allowed_origins(DEFAULT_ALLOWED_ORIGINS)

    missing_dev_origins = [
        origin for origin in LOCAL_DEVELOPMENT_ORIGINS if origin not in origins
    ]
    if missing_dev_origins:
        # The dev server origins stay allowed even when the environment omits them.
        origins = _read_allowed_origins([*origins, *missing_dev_origins])

    return origins


def _maybe_start_job(env_flag: str, job_name: str, starter: Callable[[], None]) -> None:
    enabled = read_bool_env(env_flag, True)
    SchedulerMonitor.set_job_enabled(job_name, enabled)
    if not enabled:
        LOGGER.info("%s disabled via %s", job_name, env_flag)
        return
    starter()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_database_is_ready()
    start_background_jobs()
    try:
        yield
    finally:
        stop_background_jobs()


app = FastAPI(title="Lava Rápido Backoffice API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(businesses_router, prefix="/businesses", tags=["businesses"])
app.include_router(expense_types_router, prefix="/expense-types", tags=["expense-types"])
app.include_router(expenses_router, prefix="/expenses", tags=["expenses"])
app.include_router(daily_services_router, prefix="/services", tags=["services"])
app.include_router(service_prices_router, prefix="/service-prices", tags=["service-prices"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])


def ensure_database_is_ready() -> None:
    """Apply pending database migrations when the service starts."""

    if not read_bool_env("RUN_DATABASE_MIGRATIONS", True):
        LOGGER.info("Skipping database migrations (RUN_DATABASE_MIGRATIONS=0)")
        return
    LOGGER.info("Ensuring database schema is up to date before serving requests")
    run_database_migrations()


def start_background_jobs() -> None:
    """Start background tasks required by the service."""

    _maybe_start_job(
        env_flag="ENABLE_EXPENSE_REMINDERS",
        job_name=JOB_EXPENSE_REMINDERS,
        starter=start_expense_reminder_scheduler,
    )


@app.get("/", tags=["health"])
def read_root() -> dict[str, object]:
    """Return a simple health check response with background job status."""
    return {"status": "ok", "jobs": SchedulerMonitor.snapshot()}


def stop_background_jobs() -> None:
    """Ensure background tasks are stopped when the application shuts down."""

    stop_expense_reminder_scheduler()
