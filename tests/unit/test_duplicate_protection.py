"""Unit tests for duplicate protection."""

from datetime import UTC, datetime

import pytest

from src.core.schemas import CampaignStatus
from src.services.duplicate_protection import DuplicateProtectionResolver
from tests.fixtures import CampaignFactory, InMemoryCampaignStore


@pytest.fixture
def resolver():
    store = InMemoryCampaignStore(
        [
            CampaignFactory.running(campaign_id="A", track_identity="abc123", resource_ids=["R7", "empty"]),
            CampaignFactory.running(campaign_id="B", track_identity="abc123", resource_ids=["R8", "removed"]),
            CampaignFactory.running(campaign_id="C", track_identity="other", resource_ids=["R9"]),
            CampaignFactory.create(campaign_id="D", track_identity="abc123", resource_ids=["R10"]),
            CampaignFactory.running(
                campaign_id="E",
                track_identity="abc123",
                resource_ids=["R11"],
                removed_at=datetime(2026, 1, 1, tzinfo=UTC),
                status=CampaignStatus.COMPLETED,
            ),
        ]
    )
    return DuplicateProtectionResolver(store)


def test_union_of_running_campaigns_for_track(resolver):
    assert resolver.excluded_resource_ids("abc123") == {"R7", "R8"}


def test_excludes_one_campaign(resolver):
    assert resolver.excluded_resource_ids("abc123", exclude_campaign_id="A") == {"R8"}


def test_other_tracks_do_not_count(resolver):
    assert resolver.excluded_resource_ids("other") == {"R9"}
    assert resolver.excluded_resource_ids("unknown") == set()


@pytest.mark.parametrize("identity", [None, "", "   "])
def test_missing_identity_gives_no_exclusions(resolver, identity):
    assert resolver.excluded_resource_ids(identity) == set()
