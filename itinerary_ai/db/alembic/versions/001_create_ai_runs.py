"""create ai_runs table

Revision ID: 001
Revises:
Create Date: 2025-02-03 09:00:00.000000

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_INDEXED_COLUMNS = ("created_at", "request_id", "user_id", "trip_id", "task_type", "provider")


def upgrade() -> None:
    """Create ai_runs telemetry table."""
    op.create_table(
        "ai_runs",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        sa.Column("request_id", sa.String(128), nullable=True),
        sa.Column("user_id", sa.String(128), nullable=True),
        sa.Column("trip_id", sa.String(128), nullable=True),
        sa.Column("task_type", sa.String(64), nullable=True),
        sa.Column("prompt_hash", sa.String(64), nullable=True),
        sa.Column("prompt_length", sa.Integer, nullable=True),
        sa.Column("provider", sa.String(16), nullable=True),
        sa.Column("provider_name", sa.String(64), nullable=True),
        sa.Column("fallback_used", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cache_memory_hit", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("cache_redis_hit", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("total_ms", sa.Integer, nullable=True),
        sa.Column("provider_ms", sa.Integer, nullable=True),
        sa.Column("parse_ms", sa.Integer, nullable=True),
        sa.Column("json_valid", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("json_repaired", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("schema_errors_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("days_count", sa.Integer, nullable=True),
        sa.Column("activities_count", sa.Integer, nullable=True),
        sa.Column("poi_count", sa.Integer, nullable=True),
        sa.Column("poi_dropped_count", sa.Integer, nullable=True),
        sa.Column("response_length", sa.Integer, nullable=True),
        sa.Column("currency_hint", sa.String(3), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    for column in _INDEXED_COLUMNS:
        op.create_index(f"idx_ai_runs_{column}", "ai_runs", [column])


def downgrade() -> None:
    """Drop ai_runs telemetry table."""
    for column in reversed(_INDEXED_COLUMNS):
        op.drop_index(f"idx_ai_runs_{column}", table_name="ai_runs")
    op.drop_table("ai_runs")
