"""Unit tests for simulated campaign progress."""

from datetime import UTC, date, datetime, timedelta

import pytest

from src.services.progress_simulator import compute_progress, elapsed_microseconds
from tests.fixtures import CampaignFactory

START = datetime(2026, 3, 1, 15, 30, tzinfo=UTC)


def running_campaign(resource_ids, target_volume, started_at=START):
    return CampaignFactory.running(
        started_at=started_at, resource_ids=resource_ids, target_volume=target_volume, slots_needed=len(resource_ids)
    )


class TestComputeProgress:
    def test_four_days_three_playlists(self):
        campaign = running_campaign(["a", "b", "c"], 9000)

        progress = compute_progress(campaign, START + timedelta(days=4))

        assert progress.streams_accrued == 6000
        assert progress.removal_date == date(2026, 3, 7)

    def test_not_confirmed_has_no_progress(self):
        campaign = CampaignFactory.create(resource_ids=["a"], target_volume=1000, slots_started_at=START)

        progress = compute_progress(campaign, START + timedelta(days=10))

        assert progress.streams_accrued == 0
        assert progress.removal_date is None

    def test_confirmed_without_start_has_no_progress(self):
        campaign = CampaignFactory.create(resource_ids=["a"], slots_confirmed=True, direct_confirmed=True)

        progress = compute_progress(campaign, START)

        assert progress.streams_accrued == 0
        assert progress.removal_date is None

    def test_only_placeholders_has_no_removal_date(self):
        campaign = running_campaign(["empty", "removed"], 2000)

        progress = compute_progress(campaign, START + timedelta(days=30))

        assert progress.streams_accrued == 0
        assert progress.removal_date is None

    def test_partial_day_is_floored(self):
        campaign = running_campaign(["a"], 10_000)

        # 500 streams per day -> 20.83 streams per hour
        progress = compute_progress(campaign, START + timedelta(hours=1))

        assert progress.streams_accrued == 20

    def test_now_before_start_counts_as_zero(self):
        campaign = running_campaign(["a", "b"], 4000)

        progress = compute_progress(campaign, START - timedelta(hours=5))

        assert progress.streams_accrued == 0
        assert progress.removal_date == date(2026, 3, 5)

    def test_capped_at_target(self):
        campaign = running_campaign(["a", "b"], 4000)

        progress = compute_progress(campaign, START + timedelta(days=365))

        assert progress.streams_accrued == 4000

    def test_removal_date_rounds_days_up(self):
        campaign = running_campaign(["a", "b", "c"], 9001)

        assert compute_progress(campaign, START).removal_date == date(2026, 3, 8)

    def test_removal_date_follows_assignment_count(self):
        campaign = running_campaign(["a", "b", "c"], 9000)
        before = compute_progress(campaign, START).removal_date

        campaign.assignments = campaign.assignments[:2]
        after = compute_progress(campaign, START).removal_date

        assert before == date(2026, 3, 7)
        assert after == date(2026, 3, 10)

    def test_naive_start_is_treated_as_utc(self):
        campaign = running_campaign(["a"], 1000, started_at=datetime(2026, 3, 1, 0, 0))

        progress = compute_progress(campaign, datetime(2026, 3, 2, 0, 0, tzinfo=UTC))

        assert progress.streams_accrued == 500

    def test_custom_rate(self):
        campaign = running_campaign(["a"], 10_000)

        progress = compute_progress(campaign, START + timedelta(days=1), streams_per_day=1000)

        assert progress.streams_accrued == 1000
        assert progress.removal_date == date(2026, 3, 11)

    @pytest.mark.parametrize("hours", [1, 7, 23, 48, 95, 300])
    def test_monotonic_and_bounded(self, hours):
        campaign = running_campaign(["a", "b", "c"], 9000)

        earlier = compute_progress(campaign, START + timedelta(hours=hours))
        later = compute_progress(campaign, START + timedelta(hours=hours, minutes=1))

        assert earlier.streams_accrued <= later.streams_accrued <= campaign.target_volume


class TestElapsedMicroseconds:
    def test_exact(self):
        assert elapsed_microseconds(START, START + timedelta(seconds=1, microseconds=5)) == 1_000_005

    def test_negative_clamped(self):
        assert elapsed_microseconds(START, START - timedelta(days=1)) == 0
