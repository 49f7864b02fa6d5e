"""Campaign orchestration.

Ties the engine components together for the administrative actions on a
campaign: creation, playlist assignment, manual slot edits, confirmations and
teardown. Every save recomputes the stored status from the derived lifecycle so
the ``campaign_status`` column never drifts from the confirmations and progress.

Allocation and the save that follows it run under the allocator's per-track lock.
"""

import logging
from datetime import UTC, datetime

from src.core.genres import Genre, resolve_genre
from src.core.schemas import (
    EMPTY_RESOURCE_ID,
    REMOVED_RESOURCE_ID,
    Assignment,
    Campaign,
    CampaignStatus,
    CampaignView,
)
from src.core.stores import (
    CampaignNotFoundError,
    CampaignStore,
    PackageCatalog,
    ResourceCatalogStore,
)
from src.core.track_identity import extract_track_id
from src.services.assignment_allocator import AssignmentAllocator
from src.services.campaign_state import DuplicateBookingError, InvalidTransitionError, derive_status
from src.services.duplicate_protection import DuplicateProtectionResolver
from src.services.health_monitor import HealthMonitor
from src.services.progress_simulator import compute_progress
from src.services.resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)

REMOVABLE_STATUSES = (CampaignStatus.RUNNING, CampaignStatus.REMOVAL_NEEDED)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def build_view(campaign: Campaign, now: datetime) -> CampaignView:
    """Campaign with its live status, streams and removal date."""
    progress = compute_progress(campaign, now)
    return CampaignView(
        campaign=campaign,
        status=derive_status(campaign, progress),
        streams_accrued=progress.streams_accrued,
        removal_date=progress.removal_date,
    )


class CampaignService:
    """Administrative operations on campaigns.

    Args:
        campaign_store: Campaign persistence
        resource_store: Playlist catalog persistence
        package_catalog: Slots and stream targets per package tier
        allocator: Allocator to use; built from the stores when omitted
        health_monitor: Passed to the default allocator for inline health refresh
    """

    def __init__(
        self,
        campaign_store: CampaignStore,
        resource_store: ResourceCatalogStore,
        package_catalog: PackageCatalog,
        allocator: AssignmentAllocator | None = None,
        health_monitor: HealthMonitor | None = None,
    ):
        self.campaign_store = campaign_store
        self.resource_store = resource_store
        self.package_catalog = package_catalog
        self.resolver = DuplicateProtectionResolver(campaign_store)
        self.allocator = allocator or AssignmentAllocator(
            ResourceCatalog(resource_store), self.resolver, health_monitor=health_monitor
        )

    # Persistence helpers

    def _running_conflicts(self, campaign: Campaign) -> dict[str, set[str]]:
        """Playlists this campaign shares with running campaigns of the same track."""
        if not campaign.track_identity:
            return {}
        own = set(campaign.real_resource_ids)
        conflicts = {}
        for other in self.campaign_store.list_running_by_track(campaign.track_identity, exclude_id=campaign.id):
            shared = own & set(other.real_resource_ids)
            if shared:
                conflicts[other.id] = shared
        return conflicts

    def _save(self, campaign: Campaign, now: datetime) -> Campaign:
        """Recompute the stored status and persist.

        Callers hold the campaign's track lock whenever the save can move it into
        Running.

        Raises:
            DuplicateBookingError: If the campaign would start running on a playlist
                a running campaign of the same track already holds
        """
        view = build_view(campaign, now)
        if view.status == CampaignStatus.RUNNING and campaign.status != CampaignStatus.RUNNING:
            conflicts = self._running_conflicts(campaign)
            if conflicts:
                raise DuplicateBookingError(campaign.id, conflicts)
        if view.status != campaign.status:
            logger.info(f"Campaign {campaign.id} status: {campaign.status.value} -> {view.status.value}")
        campaign.status = view.status
        campaign.updated_at = now
        self.campaign_store.save(campaign)
        return campaign

    def _lock_key(self, campaign_id: str) -> str:
        campaign = self.campaign_store.get(campaign_id)
        return campaign.track_identity or campaign.id

    def _occupancy_without(self, campaign: Campaign) -> dict[str, int]:
        occupancy = self.campaign_store.reserved_occupancy()
        if campaign.removed_at is None:
            for resource_id in set(campaign.real_resource_ids):
                if occupancy.get(resource_id, 0) > 0:
                    occupancy[resource_id] -= 1
        return occupancy

    # Creation and assignment

    def create_campaign(
        self,
        campaign_id: str,
        package_tier: str,
        track_reference: str | None,
        genre: Genre | str | None = None,
        order_id: str | None = None,
        now: datetime | None = None,
    ) -> Campaign:
        """Create a campaign in Action Needed with no assignments.

        Raises:
            ValueError: If a campaign with this id already exists
        """
        now = now or _utcnow()
        try:
            self.campaign_store.get(campaign_id)
        except CampaignNotFoundError:
            pass
        else:
            raise ValueError(f"Campaign {campaign_id} already exists")

        track_identity = extract_track_id(track_reference) if track_reference else None
        if track_reference and track_identity is None:
            logger.warning(f"Could not parse track reference for campaign {campaign_id}: {track_reference}")

        campaign = Campaign(
            id=campaign_id,
            order_id=order_id,
            package_tier=package_tier,
            track_reference=track_reference,
            track_identity=track_identity,
            genre=resolve_genre(genre),
            slots_needed=self.package_catalog.slots_needed_for(package_tier),
            target_volume=self.package_catalog.target_volume_for(package_tier),
            created_at=now,
        )
        logger.info(
            f"Created campaign {campaign_id} ({package_tier}, {campaign.genre.value}, "
            f"{campaign.slots_needed} slot(s), target {campaign.target_volume})"
        )
        return self._save(campaign, now)

    def assign_playlists(self, campaign_id: str, now: datetime | None = None) -> Campaign:
        """Allocate playlists for a campaign that has none yet.

        Campaigns that already have assignments are returned unchanged.

        Raises:
            CampaignNotFoundError: If the campaign does not exist
            InvalidTransitionError: If the campaign is already completed
            StoreError: If stores cannot be read or written
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if campaign.assignments:
                logger.debug(f"Campaign {campaign_id} already has assignments, skipping")
                return campaign
            if campaign.removed_at is not None:
                raise InvalidTransitionError(campaign_id, CampaignStatus.COMPLETED, "assign playlists to")

            campaign.assignments = self.allocator.allocate(
                campaign.genre,
                campaign.slots_needed,
                campaign.track_identity,
                exclude_campaign_id=campaign.id,
                occupancy=self.campaign_store.reserved_occupancy(),
            )
            return self._save(campaign, now)

    def assign_all_pending(self, now: datetime | None = None) -> dict[str, int]:
        """Assign playlists to every open campaign without assignments.

        Per-campaign failures are logged and counted; a failure to list campaigns
        propagates.

        Returns:
            Counts of ``assigned`` and ``failed`` campaigns
        """
        now = now or _utcnow()
        pending = [c for c in self.campaign_store.list_all() if not c.assignments and c.removed_at is None]
        results = {"assigned": 0, "failed": 0}

        for campaign in pending:
            try:
                self.assign_playlists(campaign.id, now)
                results["assigned"] += 1
            except Exception as e:
                logger.error(f"Failed to assign playlists to campaign {campaign.id}: {e}", exc_info=True)
                results["failed"] += 1

        logger.info(f"Bulk assignment: {results['assigned']} assigned, {results['failed']} failed")
        return results

    def change_genre(self, campaign_id: str, genre: Genre | str | None, now: datetime | None = None) -> Campaign:
        """Switch the campaign's genre and re-resolve its playlists.

        The campaign's own placements are not treated as duplicates.

        Raises:
            CampaignNotFoundError: If the campaign does not exist
            InvalidTransitionError: If the campaign is already completed
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if campaign.removed_at is not None:
                raise InvalidTransitionError(campaign_id, CampaignStatus.COMPLETED, "change genre of")

            old_genre = campaign.genre
            campaign.genre = resolve_genre(genre)
            campaign.assignments = self.allocator.allocate(
                campaign.genre,
                campaign.slots_needed,
                campaign.track_identity,
                exclude_campaign_id=campaign.id,
                occupancy=self._occupancy_without(campaign),
            )
            logger.info(f"Campaign {campaign_id} genre changed: {old_genre.value} -> {campaign.genre.value}")
            return self._save(campaign, now)

    def replace_assignment(
        self, campaign_id: str, index: int, resource_id: str, now: datetime | None = None
    ) -> Campaign:
        """Put a specific playlist, or the ``removed``/``empty`` marker, into one slot.

        Raises:
            CampaignNotFoundError: If the campaign does not exist
            ResourceNotFoundError: If the playlist does not exist
            IndexError: If ``index`` is not an existing slot
            ValueError: If the playlist is inactive or already in another slot
            DuplicateBookingError: If a running campaign of the same track holds the playlist
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if not 0 <= index < len(campaign.assignments):
                raise IndexError(f"Campaign {campaign_id} has no slot {index}")

            if resource_id == REMOVED_RESOURCE_ID:
                replacement = Assignment.removed()
            elif resource_id == EMPTY_RESOURCE_ID:
                replacement = Assignment.empty()
            else:
                resource = self.resource_store.get(resource_id)
                if not resource.is_active:
                    raise ValueError(f"Playlist {resource_id} is not active")
                others = [a.resource_id for i, a in enumerate(campaign.assignments) if i != index]
                if resource_id in others:
                    raise ValueError(f"Playlist {resource_id} is already assigned to campaign {campaign_id}")
                excluded = self.resolver.excluded_resource_ids(campaign.track_identity, campaign.id)
                if resource_id in excluded:
                    raise DuplicateBookingError(campaign_id, {"running": {resource_id}})
                replacement = Assignment.for_resource(resource)

            previous = campaign.assignments[index]
            assignments = list(campaign.assignments)
            assignments[index] = replacement
            campaign.assignments = assignments
            logger.info(
                f"Campaign {campaign_id} slot {index}: {previous.resource_id} -> {replacement.resource_id}"
            )
            return self._save(campaign, now)

    def reset_assignments(self, campaign_id: str, now: datetime | None = None) -> Campaign:
        """Clear the assignments of a campaign that has not started.

        Raises:
            InvalidTransitionError: If slots were already confirmed
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if campaign.slots_started_at is not None:
                view = build_view(campaign, now)
                raise InvalidTransitionError(campaign_id, view.status, "reset assignments of")
            campaign.assignments = []
            logger.info(f"Cleared assignments of campaign {campaign_id}")
            return self._save(campaign, now)

    # Lifecycle

    def confirm_direct(self, campaign_id: str, now: datetime | None = None) -> Campaign:
        """Record that direct streams were delivered.

        Raises:
            DuplicateBookingError: If this confirmation would start the campaign on a
                playlist a running campaign of the same track holds
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if campaign.direct_confirmed:
                return campaign
            campaign.direct_confirmed = True
            return self._save(campaign, now)

    def confirm_slots(self, campaign_id: str, now: datetime | None = None) -> Campaign:
        """Record that the campaign was added to its playlists and start the clock.

        ``slots_started_at`` is set only the first time.

        Raises:
            InvalidTransitionError: If the campaign is already completed
            DuplicateBookingError: If a running campaign of the same track holds
                one of this campaign's playlists
        """
        now = now or _utcnow()
        with self.allocator.track_lock(self._lock_key(campaign_id)):
            campaign = self.campaign_store.get(campaign_id)
            if campaign.removed_at is not None:
                raise InvalidTransitionError(campaign_id, CampaignStatus.COMPLETED, "confirm slots of")
            if campaign.slots_confirmed and campaign.slots_started_at is not None:
                return campaign

            conflicts = self._running_conflicts(campaign)
            if conflicts:
                raise DuplicateBookingError(campaign_id, conflicts)

            campaign.slots_confirmed = True
            if campaign.slots_started_at is None:
                campaign.slots_started_at = now
            logger.info(f"Campaign {campaign_id} slots confirmed at {campaign.slots_started_at.isoformat()}")
            return self._save(campaign, now)

    def confirm_removal(self, campaign_id: str, now: datetime | None = None) -> Campaign:
        """Record that the campaign was taken off its playlists.

        Repeated calls leave the original ``removed_at`` untouched.

        Raises:
            InvalidTransitionError: If the campaign is not Running or Removal Needed
        """
        now = now or _utcnow()
        campaign = self.campaign_store.get(campaign_id)
        if campaign.removed_at is not None:
            return campaign

        status = build_view(campaign, now).status
        if status not in REMOVABLE_STATUSES:
            raise InvalidTransitionError(campaign_id, status, "confirm removal of")

        campaign.removed_at = now
        logger.info(f"Campaign {campaign_id} removed from playlists")
        return self._save(campaign, now)

    def refresh_statuses(self, now: datetime | None = None) -> int:
        """Re-save campaigns whose stored status no longer matches the derived one.

        A campaign that would start running on a playlist already held by a running
        campaign of the same track keeps its stored status and is logged.

        Returns:
            Number of campaigns updated
        """
        now = now or _utcnow()
        updated = 0
        for listed in self.campaign_store.list_all():
            if build_view(listed, now).status == listed.status:
                continue
            with self.allocator.track_lock(listed.track_identity or listed.id):
                campaign = self.campaign_store.get(listed.id)
                if build_view(campaign, now).status == campaign.status:
                    continue
                try:
                    self._save(campaign, now)
                except DuplicateBookingError as e:
                    logger.error(f"Status of campaign {campaign.id} not refreshed: {e}")
                    continue
                updated += 1
        if updated:
            logger.info(f"Refreshed status of {updated} campaign(s)")
        return updated

    def campaign_overview(self, now: datetime | None = None) -> list[CampaignView]:
        """Every campaign with its live status, streams and removal date."""
        now = now or _utcnow()
        return [build_view(campaign, now) for campaign in self.campaign_store.list_all()]
