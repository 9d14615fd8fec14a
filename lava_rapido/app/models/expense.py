"""SQLAlchemy model definitions for recurring bill templates and expenses."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class ExpenseStatus(str, enum.Enum):
    """Payment status of an expense; ``pendente`` only ever moves to ``pago``."""

    PENDENTE = "pendente"
    PAGO = "pago"


EXPENSE_STATUS_ENUM = SAEnum(
    ExpenseStatus,
    name="expense_status_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
    validate_strings=True,
)


class ExpenseType(Base):
    """Template of a monthly bill such as rent or electricity."""

    __tablename__ = "expense_types"
    __table_args__ = (
        UniqueConstraint("business_id", "name", name="expense_types_business_name_key"),
        CheckConstraint(
            "available_day BETWEEN 1 AND 31", name="ck_expense_types_available_day_range"
        ),
        CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_expense_types_due_day_range"),
    )

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    name = Column(String(100), nullable=False)
    is_fixed = Column(Boolean, nullable=False, default=False, server_default="0")
    default_value = Column(Numeric(12, 2), nullable=True)
    available_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    expenses = relationship("Expense", back_populates="expense_type")


class Expense(Base):
    """One billing-period instance of an expense, recurring or ad-hoc."""

    __tablename__ = "expenses"
    __table_args__ = (
        # Ad-hoc rows carry a NULL type and never collide with each other.
        UniqueConstraint(
            "business_id",
            "expense_type_id",
            "month_year",
            name="expenses_business_type_month_key",
        ),
        CheckConstraint(
            "amount_paid IS NULL OR amount_paid > 0", name="ck_expenses_amount_paid_positive"
        ),
    )

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    expense_type_id = Column(
        GUID(), ForeignKey("expense_types.id", ondelete="SET NULL"), nullable=True
    )
    name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=True)
    month_year = Column(String(7), nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=False, server_default="0")
    status = Column(
        EXPENSE_STATUS_ENUM,
        nullable=False,
        default=ExpenseStatus.PENDENTE,
        server_default=ExpenseStatus.PENDENTE.value,
    )
    due_date = Column(Date, nullable=True)
    amount_paid = Column(Numeric(12, 2), nullable=True)
    paid_at = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_by_member_id = Column(
        GUID(), ForeignKey("business_members.id", ondelete="SET NULL"), nullable=True
    )
    paid_by_member_id = Column(
        GUID(), ForeignKey("business_members.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    expense_type = relationship("ExpenseType", back_populates="expenses")


Index("expenses_business_month_idx", Expense.business_id, Expense.month_year)
Index("expenses_business_paid_at_idx", Expense.business_id, Expense.status, Expense.paid_at)
