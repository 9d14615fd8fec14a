"""Registry of recurring bill templates per business."""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import NotFoundError
from .persistence import commit_or_raise

LOGGER = logging.getLogger(__name__)

DEFAULT_EXPENSE_TYPES = (
    {"name": "Aluguel", "is_fixed": True, "default_value": None, "available_day": 1, "due_day": 10},
    {"name": "Luz", "is_fixed": False, "default_value": None, "available_day": 5, "due_day": 15},
    {"name": "Água", "is_fixed": False, "default_value": None, "available_day": 5, "due_day": 15},
)

_EDITABLE_FIELDS = ("default_value", "available_day", "due_day")


class ExpenseTypeService:
    """Read and edit the recurring bill templates of a business."""

    @staticmethod
    def list_types(db: Session, business_id: str) -> List[models.ExpenseType]:
        return (
            db.query(models.ExpenseType)
            .filter(models.ExpenseType.business_id == business_id)
            .order_by(models.ExpenseType.name.asc())
            .all()
        )

    @staticmethod
    def get_type(db: Session, business_id: str, type_id: str) -> Optional[models.ExpenseType]:
        return (
            db.query(models.ExpenseType)
            .filter(models.ExpenseType.business_id == business_id)
            .filter(models.ExpenseType.id == type_id)
            .first()
        )

    @staticmethod
    def update_type(
        db: Session,
        business_id: str,
        type_id: str,
        data: schemas.ExpenseTypeUpdate,
    ) -> models.ExpenseType:
        expense_type = ExpenseTypeService._apply_update(db, business_id, type_id, data)
        commit_or_raise(db, "Erro ao atualizar configurações")
        db.refresh(expense_type)
        return expense_type

    @staticmethod
    def update_types(
        db: Session,
        business_id: str,
        items: Iterable[schemas.ExpenseTypeBulkItem],
    ) -> List[models.ExpenseType]:
        """Apply the admin bulk save as a single transaction."""

        updated = []
        try:
            for item in items:
                updated.append(ExpenseTypeService._apply_update(db, business_id, item.id, item))
        except NotFoundError:
            db.rollback()
            raise
        commit_or_raise(db, "Erro ao atualizar configurações")
        LOGGER.info("Updated %s expense types for business %s", len(updated), business_id)
        return ExpenseTypeService.list_types(db, business_id)

    @staticmethod
    def initialize_defaults(db: Session, business_id: str) -> int:
        """Seed the default bill templates when the business has none.

        The caller owns the transaction.
        """

        has_types = (
            db.query(models.ExpenseType.id)
            .filter(models.ExpenseType.business_id == business_id)
            .first()
        )
        if has_types:
            return 0
        for template in DEFAULT_EXPENSE_TYPES:
            db.add(models.ExpenseType(business_id=business_id, **template))
        db.flush()
        return len(DEFAULT_EXPENSE_TYPES)

    @staticmethod
    def _apply_update(
        db: Session,
        business_id: str,
        type_id: str,
        data: schemas.ExpenseTypeUpdate,
    ) -> models.ExpenseType:
        expense_type = ExpenseTypeService.get_type(db, business_id, type_id)
        if expense_type is None:
            raise NotFoundError("Tipo de despesa não encontrado")

        update_data = data.model_dump(exclude_unset=True, include=set(_EDITABLE_FIELDS))
        if update_data.get("default_value") is not None:
            update_data["default_value"] = Decimal(update_data["default_value"]).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        for field, value in update_data.items():
            setattr(expense_type, field, value)
        db.add(expense_type)
        return expense_type
