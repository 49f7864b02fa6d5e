"""
Global pytest configuration and fixtures for all tests.

This file provides fixtures available to all test modules.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures import (  # noqa: E402
    CampaignFactory,
    InMemoryCampaignStore,
    InMemoryResourceStore,
    ResourceFactory,
    StaticPackageCatalog,
)


@pytest.fixture(autouse=True, scope="function")
def test_environment(monkeypatch, request):
    """Configure test environment variables without global pollution."""
    from src.core.config import reset_config

    # Integration tests bring their own database
    is_integration_test = "integration" in str(request.fspath)
    if not is_integration_test and "DATABASE_URL" in os.environ:
        monkeypatch.delenv("DATABASE_URL", raising=False)

    # No real credentials and no probe pacing in tests
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIFY_CLIENT_SECRET", raising=False)
    monkeypatch.setenv("PLAYLIST_ENGINE_PROBE_DELAY_SECONDS", "0")
    reset_config()

    yield

    # Cleanup: Reset config and engine so module-level state does not leak
    reset_config()
    try:
        from src.core.database.database_session import reset_engine, reset_health_state

        reset_engine()
        reset_health_state()
    except Exception:
        # Ignore errors during cleanup (e.g., if module not yet loaded)
        pass


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def resource_factory():
    """Provide playlist factory."""
    return ResourceFactory


@pytest.fixture
def campaign_factory():
    """Provide campaign factory."""
    return CampaignFactory


# ============================================================================
# In-memory Store Fixtures
# ============================================================================


@pytest.fixture
def resource_store():
    """Provide an empty in-memory playlist catalog."""
    return InMemoryResourceStore()


@pytest.fixture
def campaign_store():
    """Provide an empty in-memory campaign store."""
    return InMemoryCampaignStore()


@pytest.fixture
def package_catalog():
    """Provide a package catalog with fixed tiers."""
    return StaticPackageCatalog()
