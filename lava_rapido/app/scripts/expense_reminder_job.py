"""Command line entry-point to send expense reminders on demand."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from typing import Optional

from ..clock import SystemClock
from ..config import read_int_env
from ..database import session_scope
from ..services.expense_reminders import (
    DEFAULT_DAYS_AHEAD,
    ConfigurationError,
    ConsoleNotificationClient,
    ExpenseReminderService,
    NotificationClient,
    WebhookNotificationClient,
    build_notification_client_from_env,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Envia lembretes das contas pendentes que vencem nos próximos dias."
    )
    parser.add_argument(
        "--days-ahead",
        type=int,
        default=read_int_env("EXPENSE_REMINDER_DAYS_AHEAD", DEFAULT_DAYS_AHEAD),
        help="Quantidade de dias à frente para considerar contas a vencer (padrão: 3).",
    )
    parser.add_argument(
        "--transport",
        choices=["auto", "console", "webhook"],
        default="auto",
        help="Canal de envio das mensagens (auto=variáveis de ambiente).",
    )
    parser.add_argument(
        "--webhook-url",
        help="URL do webhook, sobrescreve EXPENSE_REMINDER_WEBHOOK_URL.",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Data de referência no formato AAAA-MM-DD (padrão: hoje no fuso do negócio).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Não envia mensagens, apenas registra a simulação no console.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mostra informações adicionais para depuração.",
    )
    return parser.parse_args(argv)


def _build_client(args: argparse.Namespace) -> NotificationClient:
    if args.dry_run:
        LOGGER.info("Execução em modo --dry-run: será usada a saída do console.")
        return ConsoleNotificationClient()

    if args.transport == "console":
        return ConsoleNotificationClient()

    if args.transport == "webhook" or args.webhook_url:
        try:
            return WebhookNotificationClient(
                url=args.webhook_url or os.getenv("EXPENSE_REMINDER_WEBHOOK_URL")
            )
        except ConfigurationError as exc:
            LOGGER.error("Configuração inválida do webhook: %s", exc)
            sys.exit(2)

    return build_notification_client_from_env()


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    client = _build_client(args)
    today = args.date or SystemClock().today()

    with session_scope() as session:
        summary = ExpenseReminderService.send_reminders(
            session, client, today, days_ahead=max(args.days_ahead, 0)
        )
        LOGGER.info("Resumo do envio: %s", summary.to_dict())

    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
