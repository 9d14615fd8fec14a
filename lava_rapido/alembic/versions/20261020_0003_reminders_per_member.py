"""Track shown reminders per member instead of per business."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20261020_0003"
down_revision = "20261005_0002"
branch_labels = None
depends_on = None


def _uuid_type():
    bind = op.get_bind()
    dialect = bind.dialect.name if bind else "sqlite"
    if dialect == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.CHAR(length=36)


def upgrade() -> None:
    # Markers only hide bills for the current day and cannot be attributed
    # to a member, so they are discarded.
    op.execute(sa.text("DELETE FROM expense_reminders"))
    with op.batch_alter_table("expense_reminders") as batch_op:
        batch_op.add_column(sa.Column("member_id", _uuid_type(), nullable=False))
        batch_op.create_foreign_key(
            "expense_reminders_member_id_fkey",
            "business_members",
            ["member_id"],
            ["id"],
            ondelete="CASCADE",
        )
        batch_op.drop_constraint("expense_reminders_expense_day_key", type_="unique")
        batch_op.create_unique_constraint(
            "expense_reminders_expense_member_day_key",
            ["expense_id", "member_id", "shown_date"],
        )


def downgrade() -> None:
    op.execute(sa.text("DELETE FROM expense_reminders"))
    with op.batch_alter_table("expense_reminders") as batch_op:
        batch_op.drop_constraint("expense_reminders_expense_member_day_key", type_="unique")
        batch_op.drop_constraint("expense_reminders_member_id_fkey", type_="foreignkey")
        batch_op.drop_column("member_id")
        batch_op.create_unique_constraint(
            "expense_reminders_expense_day_key", ["expense_id", "shown_date"]
        )
