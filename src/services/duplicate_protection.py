"""Duplicate protection for tracks promoted by several campaigns."""

import logging

from src.core.stores import CampaignStore

logger = logging.getLogger(__name__)


class DuplicateProtectionResolver:
    """Finds playlists a track already occupies through another running campaign."""

    def __init__(self, campaign_store: CampaignStore):
        self.campaign_store = campaign_store

    def excluded_resource_ids(self, track_identity: str | None, exclude_campaign_id: str | None = None) -> set[str]:
        """Playlist ids held by running campaigns promoting the same track.

        Args:
            track_identity: Normalized track id; without one no protection is possible
            exclude_campaign_id: Campaign to leave out, typically the one being re-resolved

        Raises:
            StoreError: If running campaigns cannot be listed
        """
        if not track_identity or not track_identity.strip():
            return set()

        excluded: set[str] = set()
        for campaign in self.campaign_store.list_running_by_track(track_identity, exclude_id=exclude_campaign_id):
            if campaign.id == exclude_campaign_id:
                continue
            excluded.update(campaign.real_resource_ids)

        if excluded:
            logger.info(f"Track {track_identity} already placed on {len(excluded)} playlist(s); excluding them")
        return excluded
