"""Environment driven settings shared by the service layer."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

COMMISSION_RATE_ENV = "PARTNER_COMMISSION_RATE"
BUSINESS_TIMEZONE_ENV = "BUSINESS_TIMEZONE"

DEFAULT_COMMISSION_RATE = Decimal("0.25")
DEFAULT_BUSINESS_TIMEZONE = "America/Sao_Paulo"


class ExpenseCategory(str, enum.Enum):
    """Built-in categories offered for ad-hoc expenses."""

    FUNCIONARIO = "Funcionário"
    ALIMENTACAO = "Alimentação"
    PRODUTOS = "Produtos"
    MANUTENCAO = "Manutenção"
    ESTRUTURA = "Estrutura"
    INVESTIMENTO = "Investimento"
    OUTROS = "Outros"


DEFAULT_EXPENSE_CATEGORIES: Tuple[str, ...] = tuple(category.value for category in ExpenseCategory)
MAX_EXPENSE_AMOUNT = Decimal("1000000")
MAX_DESCRIPTION_LENGTH = 500


def read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


def read_bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def read_decimal_env(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a decimal number") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return value


def business_timezone_name() -> str:
    return os.getenv(BUSINESS_TIMEZONE_ENV) or DEFAULT_BUSINESS_TIMEZONE


@dataclass(frozen=True)
class FinancialSettings:
    """Knobs used by the expense ledger and the reporting aggregator.

    Defaults reproduce the historical behaviour of the car wash; a business
    may override the commission rate through its own record.
    """

    commission_rate: Decimal = DEFAULT_COMMISSION_RATE
    expense_categories: Tuple[str, ...] = field(default=DEFAULT_EXPENSE_CATEGORIES)
    max_expense_amount: Decimal = MAX_EXPENSE_AMOUNT
    max_description_length: int = MAX_DESCRIPTION_LENGTH

    @classmethod
    def from_env(cls) -> "FinancialSettings":
        return cls(commission_rate=read_decimal_env(COMMISSION_RATE_ENV, DEFAULT_COMMISSION_RATE))

    def for_business(self, commission_override: Optional[Decimal]) -> "FinancialSettings":
        if commission_override is None:
            return self
        return replace(self, commission_rate=Decimal(str(commission_override)))
