"""Playlist utilization report.

For every active playlist: how full it is and, when full, the earliest date one
of its campaigns is due to come off. Removal dates are derived live from the
current assignments, like everywhere else in the engine.
"""

import logging
from collections import defaultdict
from datetime import date, datetime

from src.core.schemas import ResourceUtilization
from src.core.stores import CampaignStore, ResourceCatalogStore
from src.services.progress_simulator import compute_progress

logger = logging.getLogger(__name__)


def build_utilization_report(
    resource_store: ResourceCatalogStore,
    campaign_store: CampaignStore,
    now: datetime,
) -> list[ResourceUtilization]:
    """Occupancy and next available slot per active playlist, ordered by name.

    Occupancy is the larger of the cached occupant count and the number of open
    campaigns assigned to the playlist, capped at 100%.

    Raises:
        StoreError: If playlists or campaigns cannot be read
    """
    holders: dict[str, list[str]] = defaultdict(list)
    removal_dates: dict[str, list[date]] = defaultdict(list)

    for campaign in campaign_store.list_all():
        if campaign.removed_at is not None:
            continue
        removal_date = compute_progress(campaign, now).removal_date
        for resource_id in set(campaign.real_resource_ids):
            holders[resource_id].append(campaign.id)
            if removal_date is not None:
                removal_dates[resource_id].append(removal_date)

    report = []
    for resource in resource_store.list_active():
        campaign_ids = sorted(holders.get(resource.id, []))
        occupied = max(resource.utilization, len(campaign_ids))
        if resource.capacity > 0:
            percent = min(occupied * 100.0 / resource.capacity, 100.0)
        else:
            percent = 0.0

        next_available = None
        if occupied >= resource.capacity and removal_dates.get(resource.id):
            next_available = min(removal_dates[resource.id])

        report.append(
            ResourceUtilization(
                resource_id=resource.id,
                name=resource.name,
                genre=resource.genre_label,
                capacity=resource.capacity,
                occupied=occupied,
                occupancy_percent=round(percent, 1),
                health_status=resource.health_status,
                next_available=next_available,
                campaign_ids=campaign_ids,
            )
        )

    report.sort(key=lambda row: (row.name, row.resource_id))
    full = sum(1 for row in report if row.is_full)
    logger.info(f"Utilization report: {len(report)} playlist(s), {full} full")
    return report
