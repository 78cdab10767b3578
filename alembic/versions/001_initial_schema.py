"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

MEMORY_TYPES = ("fact", "preference", "event", "mood", "goal", "trait", "relationship")
MEMORY_SOURCES = ("explicit", "inferred", "corrected")
BIG_FIVE_TRAITS = ("openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism")


def upgrade() -> None:
    # ── memories ──
    op.create_table(
        "memories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("type", sa.Enum(*MEMORY_TYPES, name="memorytype", native_enum=False, length=32), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("source", sa.Enum(*MEMORY_SOURCES, name="memorysource", native_enum=False, length=32), nullable=False),
        sa.Column("confidence", sa.Float, nullable=False),
        sa.Column("category", sa.String(128), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("access_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("source_session_id", sa.Uuid(), nullable=True),
        sa.Column("source_message_id", sa.Uuid(), nullable=True),
        sa.Column("related_memory_ids", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("confidence >= 0.0 AND confidence <= 1.0", name="ck_memories_confidence_range"),
        sa.CheckConstraint("access_count >= 0", name="ck_memories_access_count"),
    )
    op.create_index("ix_memories_type", "memories", ["type"])
    op.create_index("ix_memories_is_active", "memories", ["is_active"])

    # ── personality_profiles ──
    op.create_table(
        "personality_profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        *[sa.Column(trait, sa.Float, nullable=True) for trait in BIG_FIVE_TRAITS],
        sa.Column("custom_traits", sa.JSON, nullable=False),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("summary_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        *[
            sa.CheckConstraint(
                f"{trait} IS NULL OR ({trait} >= 0.0 AND {trait} <= 1.0)",
                name=f"ck_personality_profiles_{trait}_range",
            )
            for trait in BIG_FIVE_TRAITS
        ],
    )

    # ── memory_events ──
    op.create_table(
        "memory_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_type", sa.String(128), nullable=False),
        sa.Column("level", sa.String(16), nullable=False),
        sa.Column("memory_id", sa.Uuid(), nullable=True),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_memory_events_event_type", "memory_events", ["event_type"])
    op.create_index("ix_memory_events_memory_id", "memory_events", ["memory_id"])


def downgrade() -> None:
    for table in ["memory_events", "personality_profiles", "memories"]:
        op.drop_table(table)
