"""Domain types for playlist assignment and campaign progress.

These pydantic models are what the services pass around. The SQLAlchemy models in
``src.core.database.models`` are converted to and from them by the repositories,
so nothing outside ``src.core.database`` touches ORM rows.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.core.genres import Genre, match_genre, resolve_genre

EMPTY_RESOURCE_ID = "empty"
REMOVED_RESOURCE_ID = "removed"
SENTINEL_RESOURCE_IDS = frozenset({EMPTY_RESOURCE_ID, REMOVED_RESOURCE_ID})


class HealthStatus(str, Enum):
    """Result of the last external probe of a playlist."""

    ACTIVE = "active"
    PUBLIC = "public"
    PRIVATE = "private"
    REMOVED = "removed"
    ERROR = "error"
    UNKNOWN = "unknown"

    @property
    def is_healthy(self) -> bool:
        return self in (HealthStatus.ACTIVE, HealthStatus.PUBLIC)


class CampaignStatus(str, Enum):
    """Campaign lifecycle states, in order."""

    ACTION_NEEDED = "Action Needed"
    RUNNING = "Running"
    REMOVAL_NEEDED = "Removal Needed"
    COMPLETED = "Completed"


class EngineBaseModel(BaseModel):
    """Base model for engine types: validates on assignment and rejects unknown fields."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")


class Resource(EngineBaseModel):
    """A playlist that campaigns can occupy."""

    id: str = Field(..., min_length=1, description="Opaque playlist identifier")
    name: str = Field(..., description="Display label, also the allocation sort key")
    genre: Genre | None = Field(default=Genre.GENERAL, description="Genre bucket, None for unknown tags")
    genre_tag: str = Field(default="", description="Genre exactly as tagged on the playlist")
    reference: str | None = Field(default=None, description="External playlist link used for health probes")
    capacity: int = Field(default=25, ge=0, description="Maximum concurrent occupants")
    utilization: int = Field(default=0, ge=0, description="Cached occupant count, refreshed out-of-band")
    is_active: bool = Field(default=True, description="Administrative on/off switch")
    health_status: HealthStatus = Field(default=HealthStatus.UNKNOWN)
    health_checked_at: datetime | None = None
    health_error: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _split_genre_tag(cls, data):
        if isinstance(data, dict) and "genre" in data:
            raw = data["genre"]
            tag = raw.value if isinstance(raw, Genre) else str(raw or "").strip()
            data = {**data, "genre": match_genre(raw), "genre_tag": data.get("genre_tag") or tag}
        return data

    @property
    def genre_label(self) -> str:
        return self.genre.value if self.genre is not None else self.genre_tag

    @property
    def is_assignable(self) -> bool:
        """Healthy and not yet full."""
        return self.health_status.is_healthy and self.utilization < self.capacity


class Assignment(EngineBaseModel):
    """One slot of a campaign, bound to a playlist or to a sentinel placeholder."""

    resource_id: str
    name: str
    genre: str

    @classmethod
    def for_resource(cls, resource: Resource) -> "Assignment":
        return cls(resource_id=resource.id, name=resource.name, genre=resource.genre_label)

    @classmethod
    def empty(cls) -> "Assignment":
        return cls(resource_id=EMPTY_RESOURCE_ID, name="Empty Slot", genre=EMPTY_RESOURCE_ID)

    @classmethod
    def removed(cls) -> "Assignment":
        return cls(resource_id=REMOVED_RESOURCE_ID, name="Removed", genre=REMOVED_RESOURCE_ID)

    @property
    def is_real(self) -> bool:
        return self.resource_id not in SENTINEL_RESOURCE_IDS


class Campaign(EngineBaseModel):
    """A marketing campaign promoting one track across several playlists."""

    id: str = Field(..., min_length=1)
    order_id: str | None = None
    package_tier: str | None = None
    track_reference: str | None = Field(default=None, description="Raw external track URL")
    track_identity: str | None = Field(default=None, description="Normalized track id, None if unparseable")
    genre: Genre = Genre.GENERAL
    slots_needed: int = Field(default=0, ge=0)
    assignments: list[Assignment] = Field(default_factory=list)
    direct_confirmed: bool = False
    slots_confirmed: bool = False
    slots_started_at: datetime | None = None
    target_volume: int = Field(default=0, ge=0)
    removed_at: datetime | None = None
    status: CampaignStatus = CampaignStatus.ACTION_NEEDED
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("genre", mode="before")
    @classmethod
    def _coerce_genre(cls, v):
        return resolve_genre(v)

    @field_validator("track_identity", mode="before")
    @classmethod
    def _blank_identity_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def real_assignments(self) -> list[Assignment]:
        return [a for a in self.assignments if a.is_real]

    @property
    def real_resource_ids(self) -> list[str]:
        return [a.resource_id for a in self.assignments if a.is_real]


class ProbeResult(BaseModel):
    """What an external prober reports about one playlist."""

    is_reachable: bool
    is_public: bool | None = None
    occupancy_count: int | None = Field(default=None, ge=0)
    error_message: str | None = None
    is_removed: bool = False


class CampaignProgress(BaseModel):
    """Simulated progress of a campaign at a given instant."""

    streams_accrued: int = Field(default=0, ge=0)
    removal_date: date | None = None


class CampaignView(BaseModel):
    """A campaign together with its live derived values."""

    campaign: Campaign
    status: CampaignStatus
    streams_accrued: int
    removal_date: date | None = None

    @property
    def progress_percent(self) -> float:
        if self.campaign.target_volume <= 0:
            return 100.0
        return round(self.streams_accrued * 100.0 / self.campaign.target_volume, 1)


class HealthRefreshSummary(BaseModel):
    """Outcome of one bounded health refresh."""

    checked: int = 0
    healthy: int = 0
    unhealthy: int = 0
    failed: int = 0
    resource_ids: list[str] = Field(default_factory=list)


class ResourceUtilization(BaseModel):
    """Occupancy of a playlist and when the next slot frees up."""

    resource_id: str
    name: str
    genre: str
    capacity: int
    occupied: int
    occupancy_percent: float
    health_status: HealthStatus
    next_available: date | None = Field(default=None, description="None means a slot is open now")
    campaign_ids: list[str] = Field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return self.occupied >= self.capacity
