"""Price grid of the wash services offered by a business."""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from .. import models
from ..errors import NotFoundError, ValidationError
from .persistence import commit_or_raise

LOGGER = logging.getLogger(__name__)

SERVICE_NAMES = (
    "Lavagem Completa",
    "Lavagem Interna",
    "Lavagem Externa",
    "Lavagem Completa + Cera",
    "Lavagem Motor",
    "Lavagem Externa + Cera",
    "Vitrificação",
    "Hidratação de Bancos",
)


class ServicePriceService:
    @staticmethod
    def list_prices(
        db: Session, business_id: str, vehicle_type: Optional[models.VehicleType] = None
    ) -> List[models.ServicePrice]:
        query = db.query(models.ServicePrice).filter(
            models.ServicePrice.business_id == business_id
        )
        if vehicle_type is not None:
            query = query.filter(models.ServicePrice.vehicle_type == vehicle_type)
        return query.order_by(
            models.ServicePrice.vehicle_type.asc(), models.ServicePrice.service_name.asc()
        ).all()

    @staticmethod
    def update_prices(
        db: Session,
        business_id: str,
        vehicle_type: models.VehicleType,
        prices: Mapping[str, Decimal],
    ) -> List[models.ServicePrice]:
        """Save every price of one vehicle type, all or nothing."""

        unknown = sorted(name for name in prices if name not in SERVICE_NAMES)
        if unknown:
            raise ValidationError(f"Serviço desconhecido: {', '.join(unknown)}")
        for service_name, price in prices.items():
            if price < 0:
                raise ValidationError(f"O preço de {service_name} não pode ser negativo.")

        current = {
            row.service_name: row
            for row in ServicePriceService.list_prices(db, business_id, vehicle_type)
        }
        for service_name, price in prices.items():
            row = current.get(service_name)
            if row is None:
                row = models.ServicePrice(
                    business_id=business_id,
                    service_name=service_name,
                    vehicle_type=vehicle_type,
                )
            row.price = Decimal(price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            db.add(row)

        commit_or_raise(db, "Erro ao salvar preços")
        LOGGER.info(
            "Updated %s prices for %s in business %s", len(prices), vehicle_type.value, business_id
        )
        return ServicePriceService.list_prices(db, business_id, vehicle_type)

    @staticmethod
    def initialize_defaults(db: Session, business_id: str) -> int:
        """Seed a zero price for each missing service and vehicle type.

        The caller owns the transaction.
        """

        existing = {
            (row.service_name, row.vehicle_type)
            for row in db.query(models.ServicePrice.service_name, models.ServicePrice.vehicle_type)
            .filter(models.ServicePrice.business_id == business_id)
            .all()
        }
        created = 0
        for vehicle_type in models.VehicleType:
            for service_name in SERVICE_NAMES:
                if (service_name, vehicle_type) in existing:
                    continue
                db.add(
                    models.ServicePrice(
                        business_id=business_id,
                        service_name=service_name,
                        vehicle_type=vehicle_type,
                        price=Decimal("0"),
                    )
                )
                created += 1
        db.flush()
        return created

    @staticmethod
    def quote(
        db: Session, business_id: str, service_name: str, vehicle_type: models.VehicleType
    ) -> Decimal:
        row = (
            db.query(models.ServicePrice)
            .filter(models.ServicePrice.business_id == business_id)
            .filter(models.ServicePrice.service_name == service_name)
            .filter(models.ServicePrice.vehicle_type == vehicle_type)
            .first()
        )
        if row is None:
            raise NotFoundError("Preço não cadastrado para este serviço")
        return Decimal(row.price)
