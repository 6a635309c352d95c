"""Initial schema: bookings with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guest_name", sa.String(255), nullable=False),
        sa.Column("unit_id", sa.String(100), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("number_of_nights", sa.Integer(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("number_of_nights > 0", name="check_booking_nights_positive"),
        sa.CheckConstraint("check_out_date > check_in_date", name="check_booking_checkout_after_checkin"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    # Guest rules look bookings up by name, across all units
    op.create_index("ix_bookings_guest_name", "bookings", ["guest_name"])
    op.create_index("ix_bookings_unit_id", "bookings", ["unit_id"])
    # Availability scans read every booking of one unit in check-in order
    op.create_index("ix_bookings_unit_check_in", "bookings", ["unit_id", "check_in_date"])


def downgrade() -> None:
    op.drop_table("bookings")
