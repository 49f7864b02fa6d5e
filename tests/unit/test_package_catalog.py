"""Unit tests for package tier lookup."""

from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.core.database.models import CampaignPackage
from src.services.package_catalog import PackageTier, PackageTierCatalog, normalize_package_name


def mock_session_returning(row):
    session = MagicMock()
    session.__enter__ = MagicMock(return_value=session)
    session.__exit__ = MagicMock(return_value=None)
    session.scalars.return_value.first.return_value = row
    return session


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("legendary", "LEGENDARY"),
        (" Momentum ", "MOMENTUM"),
        ("ULTRA", "LEGENDARY"),
        ("diamond", "UNSTOPPABLE"),
        ("Starter", "BREAKTHROUGH"),
        ("test campaign", "BREAKTHROUGH"),
        (None, ""),
    ],
)
def test_normalize_package_name(raw, expected):
    assert normalize_package_name(raw) == expected


def test_uses_database_row():
    row = CampaignPackage(package_name="DOMINATE", playlist_assignments_needed=5, playlist_streams=12000)

    with patch("src.services.package_catalog.get_db_session", return_value=mock_session_returning(row)):
        catalog = PackageTierCatalog()
        assert catalog.slots_needed_for("dominate") == 5
        assert catalog.target_volume_for("dominate") == 12000


@pytest.mark.parametrize(
    "tier,expected",
    [
        ("LEGENDARY", PackageTier(4, 40000)),
        ("UNSTOPPABLE", PackageTier(4, 20000)),
        ("DOMINATE", PackageTier(3, 9000)),
        ("MOMENTUM", PackageTier(2, 4000)),
        ("BREAKTHROUGH", PackageTier(2, 2000)),
        ("ULTRA", PackageTier(4, 40000)),
        ("STARTER", PackageTier(2, 2000)),
        ("PLATINUM", PackageTier(2, 3000)),
    ],
)
def test_falls_back_when_row_missing(tier, expected):
    with patch("src.services.package_catalog.get_db_session", return_value=mock_session_returning(None)):
        assert PackageTierCatalog().get_tier(tier) == expected


def test_falls_back_when_database_fails():
    with patch(
        "src.services.package_catalog.get_db_session",
        side_effect=OperationalError("SELECT", {}, Exception("connection refused")),
    ):
        assert PackageTierCatalog().get_tier("MOMENTUM") == PackageTier(2, 4000)
