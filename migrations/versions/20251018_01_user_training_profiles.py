"""Physiology profile table."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20251018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_training_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(length=100), nullable=False),
        sa.Column("resting_heart_rate", sa.Float(), nullable=True),
        sa.Column("max_heart_rate", sa.Float(), nullable=True),
        sa.Column("max_hr_estimated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("resting_hr_estimated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("estimation_method", sa.String(length=20), nullable=False, server_default="user-input"),
        sa.Column("body_weight", sa.Float(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("age", sa.Float(), nullable=True),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("fitness_level", sa.String(length=20), nullable=True),
        sa.Column("running_experience", sa.Float(), nullable=True),
        sa.Column("weekly_mileage", sa.Float(), nullable=True),
        sa.Column("data_freshness", sa.String(length=10), nullable=False, server_default="fresh"),
        sa.Column("data_quality", sa.String(length=10), nullable=False, server_default="high"),
        sa.Column("validation_errors", sa.JSON(), nullable=True),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_update_reminder", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_user_training_profiles_user_id",
        "user_training_profiles",
        ["user_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_user_training_profiles_user_id", table_name="user_training_profiles")
    op.drop_table("user_training_profiles")
