"""Initial playlist engine schema

Revision ID: initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "initial_schema"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create playlist network, campaign and package tables."""
    json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

    # Create playlist_network table
    op.create_table(
        "playlist_network",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("playlist_name", sa.String(255), nullable=False),
        sa.Column("genre", sa.String(100), nullable=False, server_default="General"),
        sa.Column("playlist_link", sa.String(500), nullable=True),
        sa.Column("max_songs", sa.Integer(), nullable=True, server_default="25"),
        sa.Column("cached_song_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("health_status", sa.String(20), nullable=False, server_default="unknown"),
        sa.Column("health_last_checked", sa.DateTime(timezone=True), nullable=True),
        sa.Column("health_error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "health_status IN ('active', 'public', 'private', 'removed', 'error', 'unknown')",
            name="ck_playlist_health_status",
        ),
    )
    op.create_index("idx_playlist_network_genre", "playlist_network", ["genre"])
    op.create_index("idx_playlist_network_active", "playlist_network", ["is_active"])

    # Create marketing_campaigns table
    op.create_table(
        "marketing_campaigns",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("order_id", sa.String(100), nullable=True),
        sa.Column("package_name", sa.String(100), nullable=True),
        sa.Column("song_link", sa.String(500), nullable=True),
        sa.Column("track_id", sa.String(100), nullable=True),
        sa.Column("genre", sa.String(100), nullable=False, server_default="General"),
        sa.Column("playlists_needed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("playlist_assignments", json_type, nullable=False),
        sa.Column("direct_streams_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("playlists_added_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("playlists_added_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("playlist_streams", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("campaign_status", sa.String(20), nullable=False, server_default="Action Needed"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "campaign_status IN ('Action Needed', 'Running', 'Removal Needed', 'Completed')",
            name="ck_campaign_status",
        ),
    )
    op.create_index(
        "idx_marketing_campaigns_track_status", "marketing_campaigns", ["track_id", "campaign_status"]
    )
    op.create_index("idx_marketing_campaigns_status", "marketing_campaigns", ["campaign_status"])

    # Create campaign_packages table
    op.create_table(
        "campaign_packages",
        sa.Column("package_name", sa.String(100), nullable=False),
        sa.Column("playlist_assignments_needed", sa.Integer(), nullable=False),
        sa.Column("playlist_streams", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("package_name"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("campaign_packages")
    op.drop_index("idx_marketing_campaigns_status", table_name="marketing_campaigns")
    op.drop_index("idx_marketing_campaigns_track_status", table_name="marketing_campaigns")
    op.drop_table("marketing_campaigns")
    op.drop_index("idx_playlist_network_active", table_name="playlist_network")
    op.drop_index("idx_playlist_network_genre", table_name="playlist_network")
    op.drop_table("playlist_network")
