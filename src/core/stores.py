"""Store interfaces the engine depends on.

The engine never talks to a database directly. Services take these interfaces in
their constructors; ``src.core.database.repositories`` provides the SQLAlchemy
implementations and the tests provide in-memory ones.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from src.core.schemas import Campaign, HealthStatus, Resource


class StoreError(Exception):
    """A backing store could not be read or written.

    Raised for infrastructure failures. Callers must retry or alert; the engine
    never continues with partial data after one of these.
    """

    pass


class CampaignNotFoundError(Exception):
    """No campaign exists with the requested id."""

    pass


class ResourceNotFoundError(Exception):
    """No playlist exists with the requested id."""

    pass


class CampaignStore(ABC):
    """Persistence of campaigns and their assignments."""

    @abstractmethod
    def get(self, campaign_id: str) -> Campaign:
        """Return the campaign or raise CampaignNotFoundError."""

    @abstractmethod
    def save(self, campaign: Campaign) -> None:
        """Insert or update the campaign."""

    @abstractmethod
    def list_running_by_track(self, track_identity: str, exclude_id: str | None = None) -> list[Campaign]:
        """Running campaigns promoting ``track_identity``, optionally without one campaign."""

    @abstractmethod
    def list_all(self) -> list[Campaign]:
        """All campaigns, oldest first."""

    @abstractmethod
    def reserved_occupancy(self) -> dict[str, int]:
        """Per playlist id, the number of non-completed campaigns holding a slot on it."""


class ResourceCatalogStore(ABC):
    """Persistence of the playlist network."""

    @abstractmethod
    def list_active(self) -> list[Resource]:
        """All administratively active playlists."""

    @abstractmethod
    def get(self, resource_id: str) -> Resource:
        """Return the playlist or raise ResourceNotFoundError."""

    @abstractmethod
    def update_health(
        self,
        resource_id: str,
        status: HealthStatus,
        checked_at: datetime,
        error_message: str | None = None,
    ) -> None:
        """Record the outcome of a health probe."""

    @abstractmethod
    def update_utilization(self, resource_id: str, count: int) -> None:
        """Record the current occupant count reported by the external source."""


class PackageCatalog(ABC):
    """Lookup of package tier requirements."""

    @abstractmethod
    def slots_needed_for(self, package_tier: str) -> int:
        """Number of playlists a campaign of this tier occupies."""

    @abstractmethod
    def target_volume_for(self, package_tier: str) -> int:
        """Playlist streams a campaign of this tier must reach."""
