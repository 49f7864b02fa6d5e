"""Tests for the engine's domain types."""

import pytest
from pydantic import ValidationError

from src.core.genres import Genre
from src.core.schemas import (
    EMPTY_RESOURCE_ID,
    Assignment,
    Campaign,
    CampaignStatus,
    CampaignView,
    HealthStatus,
    Resource,
)
from tests.fixtures import CampaignFactory, ResourceFactory


class TestResource:
    @pytest.mark.parametrize(
        "status,assignable",
        [
            (HealthStatus.ACTIVE, True),
            (HealthStatus.PUBLIC, True),
            (HealthStatus.PRIVATE, False),
            (HealthStatus.REMOVED, False),
            (HealthStatus.ERROR, False),
            (HealthStatus.UNKNOWN, False),
        ],
    )
    def test_assignable_depends_on_health(self, status, assignable):
        assert ResourceFactory.create(health_status=status).is_assignable is assignable

    def test_full_playlist_is_not_assignable(self):
        assert not ResourceFactory.create(capacity=3, utilization=3).is_assignable
        assert ResourceFactory.create(capacity=3, utilization=2).is_assignable

    def test_genre_string_is_resolved(self):
        resource = Resource(id="p1", name="Beats", genre="hip hop")

        assert resource.genre is Genre.HIP_HOP
        assert resource.genre_tag == "hip hop"
        assert resource.genre_label == "Hip-Hop/Rap"

    def test_unmapped_genre_keeps_its_tag_and_is_not_general(self):
        resource = Resource(id="p1", name="Lo-fi", genre="Indie")

        assert resource.genre is None
        assert resource.genre_tag == "Indie"
        assert Assignment.for_resource(resource).genre == "Indie"

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            Resource(id="p1", name="x", followers=10)

    def test_negative_utilization_is_rejected(self):
        with pytest.raises(ValidationError):
            Resource(id="p1", name="x", utilization=-1)


class TestAssignment:
    def test_sentinels_are_not_real(self):
        assert not Assignment.empty().is_real
        assert not Assignment.removed().is_real
        assert Assignment.empty().resource_id == EMPTY_RESOURCE_ID

    def test_for_resource_copies_label_and_genre(self):
        resource = ResourceFactory.create("p1", name="Indie Picks", genre=Genre.FOLK)

        assignment = Assignment.for_resource(resource)

        assert assignment == Assignment(resource_id="p1", name="Indie Picks", genre="Folk")


class TestCampaign:
    def test_real_resource_ids_skip_sentinels(self):
        campaign = CampaignFactory.create(resource_ids=["a", "empty", "b", "removed"])

        assert campaign.real_resource_ids == ["a", "b"]
        assert len(campaign.real_assignments) == 2

    def test_blank_track_identity_becomes_none(self):
        assert Campaign(id="c1", track_identity="  ").track_identity is None

    def test_defaults(self):
        campaign = Campaign(id="c1")

        assert campaign.status == CampaignStatus.ACTION_NEEDED
        assert campaign.genre is Genre.GENERAL
        assert campaign.assignments == []


class TestCampaignView:
    def test_progress_percent(self):
        view = CampaignView(
            campaign=CampaignFactory.create(target_volume=3000),
            status=CampaignStatus.RUNNING,
            streams_accrued=1000,
        )

        assert view.progress_percent == 33.3

    def test_zero_target_is_complete(self):
        view = CampaignView(
            campaign=CampaignFactory.create(target_volume=0),
            status=CampaignStatus.REMOVAL_NEEDED,
            streams_accrued=0,
        )

        assert view.progress_percent == 100.0
