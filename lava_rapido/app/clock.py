"""Time source used by date dependent business rules."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import business_timezone_name

LOGGER = logging.getLogger(__name__)

BRAZIL_FALLBACK_OFFSET = timezone(timedelta(hours=-3))


class Clock(Protocol):
    def today(self) -> date:
        ...

    def now(self) -> datetime:
        ...


def _resolve_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        LOGGER.warning("Time zone %s not available; falling back to UTC-03:00", name)
        return BRAZIL_FALLBACK_OFFSET


class SystemClock:
    """Wall clock in the business time zone.

    Every member of a business sees the same "today" regardless of where the
    request comes from.
    """

    def __init__(self, zone_name: str | None = None) -> None:
        self.zone = _resolve_zone(zone_name or business_timezone_name())

    def now(self) -> datetime:
        return datetime.now(self.zone)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given day, used by tests and batch replays."""

    def __init__(self, current: date) -> None:
        self.current = current

    def now(self) -> datetime:
        return datetime.combine(self.current, datetime.min.time(), tzinfo=timezone.utc)

    def today(self) -> date:
        return self.current


def get_clock() -> Clock:
    """FastAPI dependency returning the system clock."""

    return SystemClock()


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")
