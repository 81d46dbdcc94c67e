"""Initial timeclock schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

attendance_day_type = postgresql.ENUM(
    "PRESENT",
    "HOME_OFFICE",
    "HOLIDAY",
    "MEDICAL_LEAVE",
    "VACATION",
    "OTHER_LEAVE",
    name="attendance_day_type",
    create_type=False,
)
attendance_lifecycle_state = postgresql.ENUM(
    "OPEN",
    "CLOSED",
    name="attendance_lifecycle_state",
    create_type=False,
)


def upgrade() -> None:
    bind = op.get_bind()
    attendance_day_type.create(bind, checkfirst=True)
    attendance_lifecycle_state.create(bind, checkfirst=True)

    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("position", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_employees_username", "employees", ["username"], unique=True)

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("day_date", sa.Date(), nullable=False),
        sa.Column("check_in", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out", sa.DateTime(timezone=True), nullable=True),
        sa.Column("day_type", attendance_day_type, nullable=False, server_default=sa.text("'PRESENT'")),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column(
            "lifecycle_state",
            attendance_lifecycle_state,
            nullable=False,
            server_default=sa.text("'OPEN'"),
        ),
        sa.Column("expected_hours", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("employee_id", "day_date", name="uq_attendance_records_employee_day"),
    )
    op.create_index(
        "ix_attendance_records_employee_day",
        "attendance_records",
        ["employee_id", "day_date"],
        unique=False,
    )
    op.create_index("ix_attendance_records_day_date", "attendance_records", ["day_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_attendance_records_day_date", table_name="attendance_records")
    op.drop_index("ix_attendance_records_employee_day", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("ix_employees_username", table_name="employees")
    op.drop_table("employees")

    bind = op.get_bind()
    attendance_lifecycle_state.drop(bind, checkfirst=True)
    attendance_day_type.drop(bind, checkfirst=True)
