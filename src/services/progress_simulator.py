"""Simulated stream progress of a campaign.

Each real playlist assignment delivers a fixed number of streams per day from the
moment slots are confirmed. Progress and the projected removal date are derived
on every call from the current assignments and are never stored, so a change to
the assignment list moves the removal date immediately.

All arithmetic is done on integer microseconds to keep stream counts exact.
"""

from datetime import UTC, datetime, timedelta

from src.core.config import get_config
from src.core.schemas import Campaign, CampaignProgress

MICROSECONDS_PER_DAY = 86400 * 1_000_000


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def elapsed_microseconds(start: datetime, now: datetime) -> int:
    """Whole microseconds from ``start`` to ``now``, zero if ``now`` is earlier."""
    elapsed = (_aware(now) - _aware(start)) // timedelta(microseconds=1)
    return max(elapsed, 0)


def compute_progress(campaign: Campaign, now: datetime, streams_per_day: int | None = None) -> CampaignProgress:
    """Streams accrued by ``now`` and the projected removal date.

    Args:
        campaign: Campaign to simulate
        now: Instant to evaluate at
        streams_per_day: Streams per playlist per day (default: configured rate)

    Returns:
        ``CampaignProgress`` with streams capped at the target volume; zero
        streams and no removal date when slots are not confirmed or no real
        playlist is assigned
    """
    if not campaign.slots_confirmed or campaign.slots_started_at is None:
        return CampaignProgress()

    assigned = len(campaign.real_assignments)
    if assigned == 0:
        return CampaignProgress()

    if streams_per_day is None:
        streams_per_day = get_config().engine.streams_per_resource_per_day
    daily_rate = assigned * streams_per_day

    elapsed = elapsed_microseconds(campaign.slots_started_at, now)
    streams = min(elapsed * daily_rate // MICROSECONDS_PER_DAY, campaign.target_volume)

    days_to_target = -(-campaign.target_volume // daily_rate)
    removal_date = (campaign.slots_started_at + timedelta(days=days_to_target)).date()

    return CampaignProgress(streams_accrued=streams, removal_date=removal_date)
