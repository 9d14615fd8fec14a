"""Create businesses, expense ledger, wash queue and price grid tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "20260901_0001"
down_revision = None
branch_labels = None
depends_on = None


def _uuid_type():
    bind = op.get_bind()
    dialect = bind.dialect.name if bind else "sqlite"
    if dialect == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.CHAR(length=36)


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade() -> None:
    uuid_type = _uuid_type()

    op.create_table(
        "businesses",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("code", sa.String(length=12), nullable=False, unique=True),
        sa.Column("commission_rate", sa.Numeric(5, 4), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )

    op.create_table(
        "business_members",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("role", _enum("member_role_enum", "owner", "partner"), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("business_id", "user_id", name="business_members_business_user_key"),
    )
    op.create_index("ix_business_members_user_id", "business_members", ["user_id"])

    op.create_table(
        "expense_types",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("is_fixed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("default_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("available_day", sa.Integer(), nullable=False),
        sa.Column("due_day", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("business_id", "name", name="expense_types_business_name_key"),
        sa.CheckConstraint(
            "available_day BETWEEN 1 AND 31", name="ck_expense_types_available_day_range"
        ),
        sa.CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_expense_types_due_day_range"),
    )

    op.create_table(
        "expenses",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "expense_type_id",
            uuid_type,
            sa.ForeignKey("expense_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("month_year", sa.String(length=7), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "status",
            _enum("expense_status_enum", "pendente", "pago"),
            nullable=False,
            server_default="pendente",
        ),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("amount_paid", sa.Numeric(12, 2), nullable=True),
        sa.Column("paid_at", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_by_member_id",
            uuid_type,
            sa.ForeignKey("business_members.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "paid_by_member_id",
            uuid_type,
            sa.ForeignKey("business_members.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "amount_paid IS NULL OR amount_paid > 0", name="ck_expenses_amount_paid_positive"
        ),
    )
    op.create_index("expenses_business_month_idx", "expenses", ["business_id", "month_year"])
    op.create_index(
        "expenses_business_paid_at_idx", "expenses", ["business_id", "status", "paid_at"]
    )

    vehicle_type_enum = _enum(
        "vehicle_type_enum", "MOTO", "RET", "SEDAN", "SUV", "CAMINHONETE", "OUTRO"
    )

    op.create_table(
        "daily_services",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("client_name", sa.String(length=100), nullable=False),
        sa.Column("client_phone", sa.String(length=20), nullable=False),
        sa.Column("car_make_model", sa.String(length=100), nullable=True),
        sa.Column("car_plate", sa.String(length=10), nullable=False),
        sa.Column("car_color", sa.String(length=50), nullable=True),
        sa.Column("vehicle_type", vehicle_type_enum, nullable=True),
        sa.Column("service_name", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column(
            "status",
            _enum("service_status_enum", "pendente", "finalizado"),
            nullable=False,
            server_default="pendente",
        ),
        sa.Column(
            "created_by_member_id",
            uuid_type,
            sa.ForeignKey("business_members.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "finished_by_member_id",
            uuid_type,
            sa.ForeignKey("business_members.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint("value > 0", name="ck_daily_services_value_positive"),
    )
    op.create_index(
        "daily_services_business_date_idx", "daily_services", ["business_id", "service_date"]
    )

    op.create_table(
        "service_prices",
        sa.Column("id", uuid_type, primary_key=True),
        sa.Column(
            "business_id",
            uuid_type,
            sa.ForeignKey("businesses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("service_name", sa.String(length=100), nullable=False),
        sa.Column("vehicle_type", vehicle_type_enum, nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint(
            "business_id",
            "service_name",
            "vehicle_type",
            name="service_prices_business_service_vehicle_key",
        ),
    )


def downgrade() -> None:
    op.drop_table("service_prices")
    op.drop_index("daily_services_business_date_idx", table_name="daily_services")
    op.drop_table("daily_services")
    op.drop_index("expenses_business_paid_at_idx", table_name="expenses")
    op.drop_index("expenses_business_month_idx", table_name="expenses")
    op.drop_table("expenses")
    op.drop_table("expense_types")
    op.drop_index("ix_business_members_user_id", table_name="business_members")
    op.drop_table("business_members")
    op.drop_table("businesses")
