"""create special hours, lab preference, open elective and section timetable tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "special_hours_configs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("special_type", sa.String(length=40), nullable=False),
        sa.Column("total_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("saturday_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("weekdays_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("saturday_periods", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("weekdays_periods", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("department", "year", "special_type", name="uq_special_hours_configs_identity"),
    )
    op.create_index("ix_special_hours_configs_department", "special_hours_configs", ["department"], unique=False)

    op.create_table(
        "lab_preferences",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("morning_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("morning_start", sa.Integer(), nullable=True),
        sa.Column("evening_two_hour_start_at_5", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("priority", sa.Integer(), nullable=True),
        sa.UniqueConstraint("department", "year", "section", "subject_id", name="uq_lab_preferences_identity"),
    )
    op.create_index("ix_lab_preferences_department", "lab_preferences", ["department"], unique=False)

    op.create_table(
        "open_elective_budgets",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("hours", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("department", "year", name="uq_open_elective_budgets_identity"),
    )
    op.create_index("ix_open_elective_budgets_department", "open_elective_budgets", ["department"], unique=False)

    op.create_table(
        "section_timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False),
        sa.Column("year", sa.String(length=20), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column("grid", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("department", "year", "section", name="uq_section_timetables_identity"),
    )
    op.create_index("ix_section_timetables_department", "section_timetables", ["department"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_section_timetables_department", table_name="section_timetables")
    op.drop_table("section_timetables")
    op.drop_index("ix_open_elective_budgets_department", table_name="open_elective_budgets")
    op.drop_table("open_elective_budgets")
    op.drop_index("ix_lab_preferences_department", table_name="lab_preferences")
    op.drop_table("lab_preferences")
    op.drop_index("ix_special_hours_configs_department", table_name="special_hours_configs")
    op.drop_table("special_hours_configs")
