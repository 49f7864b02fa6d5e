"""Unit tests for the playlist utilization report."""

from datetime import UTC, date, datetime, timedelta

from src.core.genres import Genre
from src.services.utilization_report import build_utilization_report
from tests.fixtures import CampaignFactory, InMemoryCampaignStore, InMemoryResourceStore, ResourceFactory

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def test_open_playlist_has_no_next_available():
    resources = InMemoryResourceStore([ResourceFactory.create("a", name="A", capacity=4, utilization=1)])
    campaigns = InMemoryCampaignStore([CampaignFactory.running(campaign_id="c1", resource_ids=["a"], started_at=NOW)])

    [row] = build_utilization_report(resources, campaigns, NOW)

    assert row.occupied == 1
    assert row.occupancy_percent == 25.0
    assert row.next_available is None
    assert row.campaign_ids == ["c1"]
    assert not row.is_full


def test_full_playlist_reports_earliest_live_removal_date():
    resources = InMemoryResourceStore([ResourceFactory.create("a", name="A", genre=Genre.POP, capacity=2)])
    campaigns = InMemoryCampaignStore(
        [
            # 1 playlist, 2000 streams -> 4 days
            CampaignFactory.running(campaign_id="c1", resource_ids=["a"], target_volume=2000, started_at=NOW),
            # 2 playlists, 2000 streams -> 2 days, started a day later
            CampaignFactory.running(
                campaign_id="c2", resource_ids=["a", "b"], target_volume=2000, started_at=NOW + timedelta(days=1)
            ),
        ]
    )

    [row] = build_utilization_report(resources, campaigns, NOW)

    assert row.is_full
    assert row.occupancy_percent == 100.0
    assert row.next_available == date(2026, 3, 13)
    assert row.campaign_ids == ["c1", "c2"]


def test_completed_campaigns_do_not_occupy():
    resources = InMemoryResourceStore([ResourceFactory.create("a", name="A", capacity=1)])
    campaigns = InMemoryCampaignStore(
        [CampaignFactory.running(campaign_id="old", resource_ids=["a"], removed_at=NOW - timedelta(days=1))]
    )

    [row] = build_utilization_report(resources, campaigns, NOW)

    assert row.occupied == 0
    assert row.campaign_ids == []


def test_cached_count_can_exceed_campaigns_and_percent_is_capped():
    resources = InMemoryResourceStore([ResourceFactory.create("a", name="A", capacity=10, utilization=14)])

    [row] = build_utilization_report(resources, InMemoryCampaignStore(), NOW)

    assert row.occupied == 14
    assert row.occupancy_percent == 100.0
    # Full but no campaign of ours is due to leave
    assert row.next_available is None


def test_rows_are_ordered_and_inactive_skipped():
    resources = InMemoryResourceStore(
        [
            ResourceFactory.create("z", name="Zeta"),
            ResourceFactory.create("a", name="Alpha"),
            ResourceFactory.create("x", name="Off", is_active=False),
        ]
    )

    rows = build_utilization_report(resources, InMemoryCampaignStore(), NOW)

    assert [row.resource_id for row in rows] == ["a", "z"]
