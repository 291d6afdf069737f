"""Shift lifecycle: restaurants, worker_profiles, shifts, shift_bids, shift_swaps, time_off_requests,
availability_blocks, shift_templates, notifications

Revision ID: 001
Revises:
Create Date: 2026-10-18

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
        "restaurants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(200), nullable=False, comment="Display name"),
        sa.Column("owner_email", sa.String(255), nullable=False, comment="Owner login e-mail"),
        sa.Column("address", sa.String(500), nullable=True, comment="Street address"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_restaurants_owner_email"), "restaurants", ["owner_email"], unique=True)

    op.create_table(
        "worker_profiles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False, comment="Worker login e-mail"),
        sa.Column("full_name", sa.String(100), nullable=False, comment="Name shown to managers"),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_worker_profiles_user_email"), "worker_profiles", ["user_email"], unique=True)

    op.create_table(
        "shifts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("job_type", sa.String(50), nullable=False, comment="Server / Bartender / Line Cook ..."),
        sa.Column("shift_date", sa.Date(), nullable=False, comment="Work date"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True, comment="Offered hourly rate"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="open", comment="open / assigned / bidding / completed"),
        sa.Column("allow_bidding", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("assigned_worker_id", sa.Integer(), nullable=True),
        sa.Column("assigned_worker_name", sa.String(100), nullable=True),
        sa.Column("bids_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("parent_shift_id", sa.Integer(), nullable=True, comment="First shift of a recurring series"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1", comment="Optimistic lock revision"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_worker_id"], ["worker_profiles.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_shift_id"], ["shifts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shifts_restaurant_id"), "shifts", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_shifts_shift_date"), "shifts", ["shift_date"], unique=False)
    op.create_index(op.f("ix_shifts_status"), "shifts", ["status"], unique=False)
    op.create_index(op.f("ix_shifts_assigned_worker_id"), "shifts", ["assigned_worker_id"], unique=False)
    op.create_index(op.f("ix_shifts_parent_shift_id"), "shifts", ["parent_shift_id"], unique=False)

    op.create_table(
        "shift_bids",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("worker_id", sa.Integer(), nullable=False),
        sa.Column("worker_name", sa.String(100), nullable=False),
        sa.Column("bid_amount", sa.Numeric(10, 2), nullable=False, comment="Requested hourly rate"),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", comment="pending / accepted / rejected"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["worker_id"], ["worker_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("shift_id", "worker_id", name="uq_shift_bid_worker"),
    )
    op.create_index(op.f("ix_shift_bids_shift_id"), "shift_bids", ["shift_id"], unique=False)
    op.create_index(op.f("ix_shift_bids_worker_id"), "shift_bids", ["worker_id"], unique=False)
    op.create_index(op.f("ix_shift_bids_status"), "shift_bids", ["status"], unique=False)

    op.create_table(
        "shift_swaps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("shift_id", sa.Integer(), nullable=False),
        sa.Column("requesting_worker_id", sa.Integer(), nullable=False),
        sa.Column("target_worker_name", sa.String(100), nullable=True, comment="Named colleague; empty for open swaps"),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("shift_date", sa.Date(), nullable=False, comment="Snapshot of the shift date"),
        sa.Column("shift_time", sa.String(20), nullable=False, comment="Snapshot, HH:MM - HH:MM"),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("is_open_swap", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending_manager", comment="pending_manager / approved / rejected"),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["requesting_worker_id"], ["worker_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_swaps_shift_id"), "shift_swaps", ["shift_id"], unique=False)
    op.create_index(op.f("ix_shift_swaps_requesting_worker_id"), "shift_swaps", ["requesting_worker_id"], unique=False)
    op.create_index(op.f("ix_shift_swaps_restaurant_id"), "shift_swaps", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_shift_swaps_status"), "shift_swaps", ["status"], unique=False)

    op.create_table(
        "time_off_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("worker_id", sa.Integer(), nullable=False),
        sa.Column("worker_name", sa.String(100), nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("is_all_day", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", comment="pending / approved / rejected"),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["worker_id"], ["worker_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_time_off_requests_worker_id"), "time_off_requests", ["worker_id"], unique=False)
    op.create_index(op.f("ix_time_off_requests_restaurant_id"), "time_off_requests", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_time_off_requests_start_date"), "time_off_requests", ["start_date"], unique=False)
    op.create_index(op.f("ix_time_off_requests_end_date"), "time_off_requests", ["end_date"], unique=False)
    op.create_index(op.f("ix_time_off_requests_status"), "time_off_requests", ["status"], unique=False)

    op.create_table(
        "availability_blocks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("worker_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.String(20), nullable=False, comment="monday..sunday"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.true(), comment="Repeats every week"),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.false(), comment="True = unavailable window"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["worker_id"], ["worker_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_availability_blocks_worker_id"), "availability_blocks", ["worker_id"], unique=False)

    op.create_table(
        "shift_templates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("template_name", sa.String(100), nullable=False),
        sa.Column("job_type", sa.String(50), nullable=False),
        sa.Column("shift_type", sa.String(20), nullable=False, server_default="flexible", comment="morning / afternoon / evening / night / flexible"),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("days_of_week", sa.JSON(), nullable=False, comment="monday..sunday"),
        sa.Column("positions_needed", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shift_templates_restaurant_id"), "shift_templates", ["restaurant_id"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("recipient_type", sa.String(20), nullable=False, comment="worker / restaurant"),
        sa.Column("recipient_id", sa.Integer(), nullable=False, comment="worker_profiles.id or restaurants.id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False, comment="bid_update / swap_update / time_off_update ..."),
        sa.Column("related_entity_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_recipient_id"), "notifications", ["recipient_id"], unique=False)
    op.create_index(op.f("ix_notifications_is_read"), "notifications", ["is_read"], unique=False)


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("shift_templates")
    op.drop_table("availability_blocks")
    op.drop_table("time_off_requests")
    op.drop_table("shift_swaps")
    op.drop_table("shift_bids")
    op.drop_table("shifts")
    op.drop_table("worker_profiles")
    op.drop_table("restaurants")
