# alembic/versions/001_initial_schema.py
"""Initial schema - users, instruments, maintenance log, bookings, comments, email templates

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00.000000

Enum columns are VARCHAR + CHECK so the same schema runs on SQLite and
PostgreSQL. bookings.instrument_id carries no foreign key: bookings keep
their history after an instrument leaves the roster.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from labbook.core.enums import ApprovalState, InstrumentStatus, ProgressState, RoleName

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(enum_class, name: str) -> sa.Enum:
    return sa.Enum(
        *[member.value for member in enum_class],
        name=name,
        native_enum=False,
        create_constraint=True,
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", _enum(RoleName, "user_role"), nullable=False),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("email_notifications", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("booking_reminders", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "instruments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("type", sa.String(100), nullable=False, server_default=""),
        sa.Column("model", sa.String(255), nullable=True),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("specifications", sa.Text(), nullable=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("status", _enum(InstrumentStatus, "instrument_status"), nullable=False),
        sa.Column("calibration_due", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_instruments_id", "instruments", ["id"])

    op.create_table(
        "instrument_maintenance",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "instrument_id",
            sa.String(26),
            sa.ForeignKey("instruments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("performed_on", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_instrument_maintenance_instrument_id", "instrument_maintenance", ["instrument_id"]
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("instrument_id", sa.String(26), nullable=False),
        sa.Column("instrument_name", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("purpose", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column(
            "approval_state", _enum(ApprovalState, "booking_approval_state"), nullable=False
        ),
        sa.Column(
            "progress_state", _enum(ProgressState, "booking_progress_state"), nullable=False
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.CheckConstraint('"end" > start', name="check_booking_end_after_start"),
        sa.CheckConstraint("version >= 1", name="check_booking_version_positive"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_instrument_id", "bookings", ["instrument_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_instrument_start", "bookings", ["instrument_id", "start"])

    op.create_table(
        "booking_comments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "booking_id",
            sa.String(26),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(26), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_booking_comments_id", "booking_comments", ["id"])
    op.create_index("ix_booking_comments_booking_id", "booking_comments", ["booking_id"])

    op.create_table(
        "email_templates",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("template_type", sa.String(64), nullable=False, unique=True),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_email_templates_template_type", "email_templates", ["template_type"])


def downgrade() -> None:
    op.drop_table("email_templates")
    op.drop_table("booking_comments")
    op.drop_table("bookings")
    op.drop_table("instrument_maintenance")
    op.drop_table("instruments")
    op.drop_table("users")
