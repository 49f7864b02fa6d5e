"""Playlist assignment allocator.

Picks the playlists a campaign will occupy. Selection is greedy and
deterministic:

1. refresh stale health data (bounded, when a monitor is wired in)
2. exclude playlists the same track already holds through a running campaign
3. genre matches, ordered by name
4. ``General`` playlists for whatever is still missing
5. ``empty`` placeholders until the requested length is reached

Shortfall is never an error: the result always has exactly ``slots_needed``
entries, real playlists first. Store failures propagate.
"""

import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from src.core.genres import Genre, resolve_genre
from src.core.schemas import Assignment
from src.services.duplicate_protection import DuplicateProtectionResolver
from src.services.health_monitor import HealthMonitor
from src.services.resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)


class AssignmentAllocator:
    """Allocates playlists to campaigns.

    Args:
        catalog: Source of assignable playlists
        resolver: Duplicate protection for the campaign's track
        health_monitor: Refreshed before each allocation; pass None when a
            background scheduler keeps health data fresh
    """

    def __init__(
        self,
        catalog: ResourceCatalog,
        resolver: DuplicateProtectionResolver,
        health_monitor: HealthMonitor | None = None,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.health_monitor = health_monitor
        # key -> [lock, number of holders and waiters]
        self._track_locks: dict[str, list] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def track_lock(self, key: str) -> Iterator[None]:
        """Serialize allocate-and-save for one track.

        Callers hold this around ``allocate`` and the subsequent campaign save so
        two campaigns of the same track cannot both claim a playlist that neither
        has written yet. Campaigns without a track identity lock on their own id.
        The entry for a key is dropped once nobody holds or waits for it.
        """
        with self._registry_lock:
            entry = self._track_locks.get(key)
            if entry is None:
                entry = self._track_locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._registry_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._track_locks[key]

    def allocate(
        self,
        genre: Genre | str | None,
        slots_needed: int,
        track_identity: str | None,
        exclude_campaign_id: str | None = None,
        occupancy: Mapping[str, int] | None = None,
    ) -> list[Assignment]:
        """Select playlists for a campaign.

        Args:
            genre: Requested genre; unmapped values fall back to ``General``
            slots_needed: Exact length of the returned list
            track_identity: Normalized track id for duplicate protection
            exclude_campaign_id: Campaign whose own placements are not exclusions
            occupancy: Optional per-playlist count of campaigns already holding a slot

        Returns:
            ``slots_needed`` assignments with no repeated playlist

        Raises:
            StoreError: If the catalog or campaigns cannot be read
        """
        if slots_needed <= 0:
            return []

        if self.health_monitor is not None:
            self.health_monitor.refresh_stale()

        genre = resolve_genre(genre)
        excluded = self.resolver.excluded_resource_ids(track_identity, exclude_campaign_id)

        selected: list[Assignment] = []
        taken: set[str] = set(excluded)

        tiers = [genre] if genre == Genre.GENERAL else [genre, Genre.GENERAL]
        for tier in tiers:
            if len(selected) >= slots_needed:
                break
            for resource in self.catalog.list_assignable(tier, occupancy):
                if resource.id in taken:
                    continue
                selected.append(Assignment.for_resource(resource))
                taken.add(resource.id)
                if len(selected) >= slots_needed:
                    break

        real_count = len(selected)
        while len(selected) < slots_needed:
            selected.append(Assignment.empty())

        if real_count < slots_needed:
            logger.warning(
                f"Only {real_count} of {slots_needed} {genre.value} playlist(s) available "
                f"(track {track_identity}); padded with empty slots"
            )
        else:
            logger.info(f"Allocated {real_count} {genre.value} playlist(s) for track {track_identity}")
        return selected
