"""SQLAlchemy models for database schema."""

import logging
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from src.core.database.json_type import JSONType

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models using SQLAlchemy 2.0 declarative style."""

    pass


class PlaylistResource(Base):
    """A playlist in the network that campaigns are placed on."""

    __tablename__ = "playlist_network"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    playlist_name: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    playlist_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    max_songs: Mapped[int | None] = mapped_column(Integer, nullable=True, default=25)
    cached_song_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    health_status: Mapped[str] = mapped_column(String(20), nullable=False, default="unknown")
    health_last_checked: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    health_error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "health_status IN ('active', 'public', 'private', 'removed', 'error', 'unknown')",
            name="ck_playlist_health_status",
        ),
        Index("idx_playlist_network_genre", "genre"),
        Index("idx_playlist_network_active", "is_active"),
    )


class MarketingCampaign(Base):
    """A campaign and its playlist assignments.

    ``playlist_assignments`` holds an ordered JSON array of
    ``{"id", "name", "genre"}`` objects; sentinel ids mark unfilled or removed slots.
    """

    __tablename__ = "marketing_campaigns"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    package_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    song_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    track_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    genre: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    playlists_needed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    playlist_assignments: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)
    direct_streams_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    playlists_added_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    playlists_added_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    playlist_streams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    removed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    campaign_status: Mapped[str] = mapped_column(String(20), nullable=False, default="Action Needed")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "campaign_status IN ('Action Needed', 'Running', 'Removal Needed', 'Completed')",
            name="ck_campaign_status",
        ),
        Index("idx_marketing_campaigns_track_status", "track_id", "campaign_status"),
        Index("idx_marketing_campaigns_status", "campaign_status"),
    )


class CampaignPackage(Base):
    """Requirements of a package tier."""

    __tablename__ = "campaign_packages"

    package_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    playlist_assignments_needed: Mapped[int] = mapped_column(Integer, nullable=False)
    playlist_streams: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
