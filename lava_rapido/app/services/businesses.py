"""Provisioning of car-wash businesses and their members."""

from __future__ import annotations

import logging
import secrets
import string
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import FinancialSettings
from ..errors import NotFoundError, ValidationError
from .expense_types import ExpenseTypeService
from .persistence import commit_or_raise
from .service_prices import ServicePriceService

LOGGER = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8


class BusinessService:
    """Create businesses, attach members and resolve audit names."""

    @staticmethod
    def get_member_by_user(db: Session, user_id: str) -> Optional[models.BusinessMember]:
        return (
            db.query(models.BusinessMember)
            .filter(models.BusinessMember.user_id == user_id)
            .order_by(models.BusinessMember.created_at.asc())
            .first()
        )

    @staticmethod
    def get_business(db: Session, business_id: str) -> models.Business:
        business = db.query(models.Business).filter(models.Business.id == business_id).first()
        if business is None:
            raise NotFoundError("Lava rápido não encontrado")
        return business

    @staticmethod
    def create_business(
        db: Session, *, user_id: str, data: schemas.BusinessCreate
    ) -> models.Business:
        """Open a business with its owner and default catalogs in one transaction."""

        if BusinessService.get_member_by_user(db, user_id) is not None:
            raise ValidationError("Usuário já pertence a um lava rápido")

        business = models.Business(name=data.name.strip(), code=BusinessService._generate_code(db))
        db.add(business)
        db.flush()
        db.add(
            models.BusinessMember(
                business_id=business.id,
                user_id=user_id,
                display_name=data.display_name.strip(),
                role=models.MemberRole.OWNER,
            )
        )
        ExpenseTypeService.initialize_defaults(db, business.id)
        ServicePriceService.initialize_defaults(db, business.id)
        commit_or_raise(db, "Erro ao criar o lava rápido")
        db.refresh(business)
        LOGGER.info("Business %s created by user %s", business.id, user_id)
        return business

    @staticmethod
    def join_business(
        db: Session, *, user_id: str, data: schemas.BusinessJoin
    ) -> models.Business:
        if BusinessService.get_member_by_user(db, user_id) is not None:
            raise ValidationError("Usuário já pertence a um lava rápido")

        code = data.code.strip().upper()
        business = db.query(models.Business).filter(models.Business.code == code).first()
        if business is None:
            raise NotFoundError("Código de convite inválido")

        db.add(
            models.BusinessMember(
                business_id=business.id,
                user_id=user_id,
                display_name=data.display_name.strip(),
                role=models.MemberRole.PARTNER,
            )
        )
        commit_or_raise(db, "Erro ao entrar no lava rápido")
        db.refresh(business)
        LOGGER.info("User %s joined business %s as partner", user_id, business.id)
        return business

    @staticmethod
    def update_settings(
        db: Session, business: models.Business, data: schemas.BusinessSettingsUpdate
    ) -> models.Business:
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(business, field, value)
        db.add(business)
        commit_or_raise(db, "Erro ao salvar configurações")
        db.refresh(business)
        return business

    @staticmethod
    def financial_settings(business: models.Business) -> FinancialSettings:
        return FinancialSettings.from_env().for_business(business.commission_rate)

    @staticmethod
    def member_names(db: Session, member_ids: Iterable[Optional[str]]) -> Dict[str, str]:
        """Resolve display names for many members with a single query."""

        wanted = {member_id for member_id in member_ids if member_id}
        if not wanted:
            return {}
        rows = (
            db.query(models.BusinessMember.id, models.BusinessMember.display_name)
            .filter(models.BusinessMember.id.in_(wanted))
            .all()
        )
        return {row.id: row.display_name for row in rows}

    @staticmethod
    def _generate_code(db: Session) -> str:
        while True:
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            taken = db.query(models.Business.id).filter(models.Business.code == code).first()
            if not taken:
                return code
