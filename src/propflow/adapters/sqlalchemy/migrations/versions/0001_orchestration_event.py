"""Create the orchestration_event table.

Revision ID: 0001_orchestration_event
Revises:
Create Date: 2024-05-01 00:00:00+00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_orchestration_event"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orchestration_event",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.String(), nullable=False),
        sa.Column("action_key", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(), nullable=False),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_orchestration_event"),
        sa.UniqueConstraint(
            "property_id",
            "action_key",
            "action_type",
            name="uq_orchestration_event_identity",
        ),
    )
    op.create_index(
        "ix_orchestration_event_property",
        "orchestration_event",
        ["property_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_orchestration_event_property", table_name="orchestration_event")
    op.drop_table("orchestration_event")
