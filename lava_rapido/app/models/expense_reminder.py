"""Record of the days on which a pending expense was shown to a member."""

from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..db_types import GUID, new_id


class ExpenseReminder(Base):
    """One reminder per expense, member and day."""

    __tablename__ = "expense_reminders"
    __table_args__ = (
        UniqueConstraint(
            "expense_id",
            "member_id",
            "shown_date",
            name="expense_reminders_expense_member_day_key",
        ),
    )

    id = Column(GUID(), primary_key=True, default=new_id)
    business_id = Column(
        GUID(), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    expense_id = Column(
        GUID(), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False
    )
    member_id = Column(
        GUID(), ForeignKey("business_members.id", ondelete="CASCADE"), nullable=False
    )
    shown_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    expense = relationship("Expense")
