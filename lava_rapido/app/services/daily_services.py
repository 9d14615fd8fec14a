"""Wash queue: services registered and finished during the day."""

from __future__ import annotations

import logging
import re
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple
from urllib.parse import quote

from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import NotFoundError, ServiceAlreadyFinishedError, ValidationError
from .persistence import commit_or_raise

LOGGER = logging.getLogger(__name__)

WHATSAPP_BASE_URL = "https://wa.me/"
PICKUP_READY_MESSAGE = (
    "Olá! O serviço no seu carro está finalizado e ele está pronto para a retirada "
    "no {business_name}. Até breve!"
)
CLOSING_SOON_MESSAGE = (
    "Olá, estamos quase fechando! Pedimos que, caso você ainda não tenha buscado seu "
    "carro, se dirija ao {business_name} antes das 18:00. Obrigado!"
)

_NON_DIGITS = re.compile(r"\D+")
_REQUIRED_FIELDS = (
    "client_name",
    "client_phone",
    "car_make_model",
    "car_plate",
    "vehicle_type",
    "service_name",
    "value",
)


def whatsapp_url(phone: str, message: str) -> str:
    """Return a click-to-chat link for ``phone`` with ``message`` pre-filled."""

    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        raise ValidationError("Telefone do cliente inválido")
    return f"{WHATSAPP_BASE_URL}{digits}?text={quote(message)}"


class DailyServiceService:
    """Register, list and finish the cars in the wash queue."""

    @staticmethod
    def list_for_day(db: Session, business_id: str, day: date) -> List[models.DailyService]:
        return (
            db.query(models.DailyService)
            .filter(models.DailyService.business_id == business_id)
            .filter(models.DailyService.service_date == day)
            .order_by(models.DailyService.created_at.asc(), models.DailyService.id.asc())
            .all()
        )

    @staticmethod
    def get_service(db: Session, business_id: str, service_id: str) -> Optional[models.DailyService]:
        return (
            db.query(models.DailyService)
            .filter(models.DailyService.business_id == business_id)
            .filter(models.DailyService.id == service_id)
            .first()
        )

    @staticmethod
    def create_service(
        db: Session,
        business_id: str,
        data: schemas.DailyServiceCreate,
        *,
        today: date,
        member_id: Optional[str] = None,
    ) -> models.DailyService:
        service = models.DailyService(
            business_id=business_id,
            client_name=data.client_name,
            client_phone=data.client_phone,
            car_make_model=data.car_make_model,
            car_plate=data.car_plate.upper(),
            car_color=data.car_color or None,
            vehicle_type=data.vehicle_type,
            service_name=data.service_name,
            value=Decimal(data.value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            service_date=today,
            status=models.ServiceStatus.PENDENTE,
            created_by_member_id=member_id,
        )
        db.add(service)
        commit_or_raise(db, "Erro ao cadastrar serviço")
        db.refresh(service)
        LOGGER.info("Service %s registered for business %s", service.id, business_id)
        return service

    @staticmethod
    def update_service(
        db: Session,
        business_id: str,
        service_id: str,
        data: schemas.DailyServiceUpdate,
    ) -> models.DailyService:
        """Correct a registered car. Reports pick the new value up."""

        service = DailyServiceService.get_service(db, business_id, service_id)
        if service is None:
            raise NotFoundError("Serviço não encontrado")

        changes = data.model_dump(exclude_unset=True)
        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"O campo {field} não pode ficar vazio")
        if "car_plate" in changes:
            changes["car_plate"] = changes["car_plate"].upper()
        if "car_color" in changes:
            changes["car_color"] = changes["car_color"] or None
        if "value" in changes:
            changes["value"] = Decimal(changes["value"]).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        for field, value in changes.items():
            setattr(service, field, value)

        commit_or_raise(db, "Erro ao atualizar serviço")
        db.refresh(service)
        LOGGER.info("Service %s updated for business %s", service_id, business_id)
        return service

    @staticmethod
    def delete_service(db: Session, business_id: str, service_id: str) -> None:
        service = DailyServiceService.get_service(db, business_id, service_id)
        if service is None:
            raise NotFoundError("Serviço não encontrado")
        db.delete(service)
        commit_or_raise(db, "Erro ao excluir serviço")
        LOGGER.info("Service %s deleted for business %s", service_id, business_id)

    @staticmethod
    def finish_service(
        db: Session,
        business: models.Business,
        service_id: str,
        *,
        member_id: Optional[str] = None,
    ) -> Tuple[models.DailyService, str]:
        """Mark a pending service as finished and build the pick-up message link.

        The link is built before the status changes, so a service whose phone
        cannot be used stays pending.
        """

        service = DailyServiceService.get_service(db, business.id, service_id)
        if service is None:
            raise NotFoundError("Serviço não encontrado")
        if service.status == models.ServiceStatus.FINALIZADO:
            raise ServiceAlreadyFinishedError("Este serviço já foi finalizado")
        url = whatsapp_url(
            service.client_phone, PICKUP_READY_MESSAGE.format(business_name=business.name)
        )

        updated = (
            db.query(models.DailyService)
            .filter(models.DailyService.business_id == business.id)
            .filter(models.DailyService.id == service_id)
            .filter(models.DailyService.status == models.ServiceStatus.PENDENTE)
            .update(
                {
                    models.DailyService.status: models.ServiceStatus.FINALIZADO,
                    models.DailyService.finished_by_member_id: member_id,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            db.rollback()
            raise ServiceAlreadyFinishedError("Este serviço já foi finalizado")

        commit_or_raise(db, "Erro ao finalizar serviço")
        db.refresh(service)
        LOGGER.info("Service %s finished for business %s", service_id, business.id)
        return service, url

    @staticmethod
    def pickup_reminder_links(
        db: Session, business: models.Business, day: date
    ) -> List[schemas.PickupReminder]:
        """Closing-time messages for the finished cars of ``day``."""

        message = CLOSING_SOON_MESSAGE.format(business_name=business.name)
        reminders = []
        for service in DailyServiceService.list_for_day(db, business.id, day):
            if service.status != models.ServiceStatus.FINALIZADO:
                continue
            try:
                url = whatsapp_url(service.client_phone, message)
            except ValidationError:
                LOGGER.warning("Service %s has no usable phone; skipping reminder", service.id)
                continue
            reminders.append(
                schemas.PickupReminder(
                    service_id=service.id,
                    client_name=service.client_name,
                    car_plate=service.car_plate,
                    whatsapp_url=url,
                )
            )
        return reminders
