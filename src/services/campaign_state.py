"""Campaign lifecycle.

Status is derived, never tracked independently::

    Action Needed -> Running -> Removal Needed -> Completed

A campaign is Running once both confirmations are in, needs removal once its
simulated streams reach the target, and is Completed once torn down. A missing
confirmation always yields Action Needed.
"""

from src.core.schemas import Campaign, CampaignProgress, CampaignStatus


class InvalidTransitionError(Exception):
    """The requested lifecycle action is not allowed from the campaign's current status."""

    def __init__(self, campaign_id: str, status: CampaignStatus, action: str):
        self.campaign_id = campaign_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} campaign {campaign_id} in status '{status.value}'")


class DuplicateBookingError(Exception):
    """Starting the campaign would put its track on a playlist twice."""

    def __init__(self, campaign_id: str, conflicts: dict[str, set[str]]):
        self.campaign_id = campaign_id
        self.conflicts = conflicts
        details = ", ".join(f"{other} ({', '.join(sorted(ids))})" for other, ids in sorted(conflicts.items()))
        super().__init__(
            f"Campaign {campaign_id} shares playlists with running campaign(s) of the same track: {details}"
        )


def derive_status(campaign: Campaign, progress: CampaignProgress) -> CampaignStatus:
    """Lifecycle status implied by the confirmations, teardown and progress."""
    if not campaign.direct_confirmed or not campaign.slots_confirmed:
        return CampaignStatus.ACTION_NEEDED
    if campaign.removed_at is not None:
        return CampaignStatus.COMPLETED
    if progress.streams_accrued >= campaign.target_volume:
        return CampaignStatus.REMOVAL_NEEDED
    return CampaignStatus.RUNNING
