"""Helpers to work with monthly accounting periods."""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date

from ..errors import ValidationError


class PeriodService:
    """Utility helpers around ``YYYY-MM`` period keys."""

    VALID_PERIOD_PATTERN = re.compile(r"^\d{4}-\d{2}$")

    @staticmethod
    def normalize_period(period_key: str | None) -> tuple[str, date, date]:
        """Validate a period key and return it with its first and last day."""

        if not period_key or not PeriodService.VALID_PERIOD_PATTERN.match(period_key.strip()):
            raise ValidationError("Período inválido, use o formato AAAA-MM")

        year_str, month_str = period_key.strip().split("-", maxsplit=1)
        year = int(year_str)
        month = int(month_str)
        if month < 1 or month > 12 or year < 1:
            raise ValidationError("Período inválido, use o formato AAAA-MM")

        starts_on, ends_on = PeriodService.month_bounds(date(year, month, 1))
        return f"{year:04d}-{month:02d}", starts_on, ends_on

    @staticmethod
    def month_bounds(day: date) -> tuple[date, date]:
        _, last_day = monthrange(day.year, day.month)
        return day.replace(day=1), day.replace(day=last_day)

    @staticmethod
    def clamp_day(year: int, month: int, day_of_month: int) -> date:
        """Return ``day_of_month`` in the given month, capped at the month's last day."""

        _, last_day = monthrange(year, month)
        return date(year, month, min(max(day_of_month, 1), last_day))
