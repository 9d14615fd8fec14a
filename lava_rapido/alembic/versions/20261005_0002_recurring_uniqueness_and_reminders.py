"""Enforce one recurring expense per type and month; track shown reminders."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20261005_0002"
down_revision = "20260901_0001"
branch_labels = None
depends_on = None


def _uuid_type():
    bind = op.get_bind()
    dialect = bind.dialect.name if bind else "sqlite"
    if dialect == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.CHAR(length=36)


def upgrade() -> None:
    uuid_type = _uuid_type()

    with op.batch_alter_table("expenses") as batch_op:
        batch_op.create_unique_constraint(
            "expenses_business_type_month_key",
            ["business_id", "expense_type_id", "month_year"],
        )

    op.create_table(
        "expense_reminders",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "expense_id",
            uuid_type,
            sa.ForeignKey("expenses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shown_date", sa.Date(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("expense_id", "shown_date", name="expense_reminders_expense_day_key"),
    )


def downgrade() -> None:
    op.drop_table("expense_reminders")
    with op.batch_alter_table("expenses") as batch_op:
        batch_op.drop_constraint("expenses_business_type_month_key", type_="unique")
