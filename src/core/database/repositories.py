"""SQLAlchemy implementations of the engine's store interfaces.

Each method opens its own session through ``get_db_session`` and converts ORM
rows into the pydantic domain types before the session closes. SQLAlchemy errors
are re-raised as ``StoreError`` so the engine sees one failure type for store I/O.
"""

import logging
from collections import Counter
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.config import get_config
from src.core.database.database_session import get_db_session
from src.core.database.models import MarketingCampaign, PlaylistResource
from src.core.schemas import (
    SENTINEL_RESOURCE_IDS,
    Assignment,
    Campaign,
    CampaignStatus,
    HealthStatus,
    Resource,
)
from src.core.stores import (
    CampaignNotFoundError,
    CampaignStore,
    ResourceCatalogStore,
    ResourceNotFoundError,
    StoreError,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@contextmanager
def _store_session(operation: str) -> Generator[Session, None, None]:
    try:
        with get_db_session() as session:
            yield session
    except SQLAlchemyError as e:
        raise StoreError(f"{operation} failed: {e}") from e
    except RuntimeError as e:
        # Unconfigured database or circuit breaker open
        raise StoreError(f"{operation} failed: {e}") from e


def _assignment_from_json(entry: dict) -> Assignment:
    # Slots without a playlist id keep their position as empty slots
    if not entry.get("id"):
        return Assignment.empty()
    return Assignment(
        resource_id=str(entry["id"]),
        name=entry.get("name") or "",
        genre=entry.get("genre") or "",
    )


def _assignment_to_json(assignment: Assignment) -> dict:
    return {"id": assignment.resource_id, "name": assignment.name, "genre": assignment.genre}


def campaign_from_row(row: MarketingCampaign) -> Campaign:
    assignments = [_assignment_from_json(entry) for entry in (row.playlist_assignments or [])]
    return Campaign(
        id=row.id,
        order_id=row.order_id,
        package_tier=row.package_name,
        track_reference=row.song_link,
        track_identity=row.track_id,
        genre=row.genre,
        slots_needed=row.playlists_needed,
        assignments=assignments,
        direct_confirmed=row.direct_streams_confirmed,
        slots_confirmed=row.playlists_added_confirmed,
        slots_started_at=_as_utc(row.playlists_added_at),
        target_volume=row.playlist_streams,
        removed_at=_as_utc(row.removed_at),
        status=CampaignStatus(row.campaign_status),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _apply_campaign(row: MarketingCampaign, campaign: Campaign) -> None:
    row.order_id = campaign.order_id
    row.package_name = campaign.package_tier
    row.song_link = campaign.track_reference
    row.track_id = campaign.track_identity
    row.genre = campaign.genre.value
    row.playlists_needed = campaign.slots_needed
    row.playlist_assignments = [_assignment_to_json(a) for a in campaign.assignments]
    row.direct_streams_confirmed = campaign.direct_confirmed
    row.playlists_added_confirmed = campaign.slots_confirmed
    row.playlists_added_at = campaign.slots_started_at
    row.playlist_streams = campaign.target_volume
    row.removed_at = campaign.removed_at
    row.campaign_status = campaign.status.value
    if campaign.created_at is not None:
        row.created_at = campaign.created_at


def resource_from_row(row: PlaylistResource, default_capacity: int) -> Resource:
    try:
        health_status = HealthStatus(row.health_status)
    except ValueError:
        logger.warning(f"Playlist {row.id} has unknown health status {row.health_status!r}")
        health_status = HealthStatus.UNKNOWN

    return Resource(
        id=row.id,
        name=row.playlist_name,
        genre=row.genre,
        reference=row.playlist_link,
        capacity=row.max_songs if row.max_songs is not None else default_capacity,
        utilization=row.cached_song_count or 0,
        is_active=row.is_active,
        health_status=health_status,
        health_checked_at=_as_utc(row.health_last_checked),
        health_error=row.health_error_message,
    )


class SqlCampaignStore(CampaignStore):
    """Campaigns in the ``marketing_campaigns`` table."""

    def get(self, campaign_id: str) -> Campaign:
        with _store_session("campaign lookup") as session:
            row = session.get(MarketingCampaign, campaign_id)
            if row is None:
                raise CampaignNotFoundError(campaign_id)
            return campaign_from_row(row)

    def save(self, campaign: Campaign) -> None:
        with _store_session("campaign save") as session:
            row = session.get(MarketingCampaign, campaign.id)
            if row is None:
                row = MarketingCampaign(id=campaign.id)
                session.add(row)
            _apply_campaign(row, campaign)
            session.commit()

    def list_running_by_track(self, track_identity: str, exclude_id: str | None = None) -> list[Campaign]:
        with _store_session("running campaign lookup") as session:
            stmt = select(MarketingCampaign).where(
                MarketingCampaign.track_id == track_identity,
                MarketingCampaign.campaign_status == CampaignStatus.RUNNING.value,
            )
            if exclude_id:
                stmt = stmt.where(MarketingCampaign.id != exclude_id)
            stmt = stmt.order_by(MarketingCampaign.created_at, MarketingCampaign.id)
            return [campaign_from_row(row) for row in session.scalars(stmt).all()]

    def list_all(self) -> list[Campaign]:
        with _store_session("campaign listing") as session:
            stmt = select(MarketingCampaign).order_by(MarketingCampaign.created_at, MarketingCampaign.id)
            return [campaign_from_row(row) for row in session.scalars(stmt).all()]

    def reserved_occupancy(self) -> dict[str, int]:
        with _store_session("occupancy scan") as session:
            stmt = select(MarketingCampaign.playlist_assignments).where(MarketingCampaign.removed_at.is_(None))
            counts: Counter[str] = Counter()
            for assignments in session.scalars(stmt).all():
                ids = {str(entry["id"]) for entry in (assignments or []) if entry.get("id")}
                counts.update(ids - SENTINEL_RESOURCE_IDS)
            return dict(counts)


class SqlResourceCatalogStore(ResourceCatalogStore):
    """Playlists in the ``playlist_network`` table."""

    def __init__(self, default_capacity: int | None = None):
        self.default_capacity = default_capacity or get_config().engine.default_capacity

    def list_active(self) -> list[Resource]:
        with _store_session("playlist catalog fetch") as session:
            stmt = (
                select(PlaylistResource)
                .where(PlaylistResource.is_active.is_(True))
                .order_by(PlaylistResource.playlist_name, PlaylistResource.id)
            )
            return [resource_from_row(row, self.default_capacity) for row in session.scalars(stmt).all()]

    def get(self, resource_id: str) -> Resource:
        with _store_session("playlist lookup") as session:
            row = session.get(PlaylistResource, resource_id)
            if row is None:
                raise ResourceNotFoundError(resource_id)
            return resource_from_row(row, self.default_capacity)

    def update_health(
        self,
        resource_id: str,
        status: HealthStatus,
        checked_at: datetime,
        error_message: str | None = None,
    ) -> None:
        with _store_session("playlist health update") as session:
            row = session.get(PlaylistResource, resource_id)
            if row is None:
                raise ResourceNotFoundError(resource_id)
            row.health_status = status.value
            row.health_last_checked = checked_at
            row.health_error_message = error_message
            session.commit()

    def update_utilization(self, resource_id: str, count: int) -> None:
        with _store_session("playlist utilization update") as session:
            row = session.get(PlaylistResource, resource_id)
            if row is None:
                raise ResourceNotFoundError(resource_id)
            row.cached_song_count = count
            session.commit()
