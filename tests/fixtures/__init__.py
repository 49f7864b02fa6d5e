"""
Test fixtures for the playlist campaign engine.

This module provides reusable test data and in-memory stores for testing.
"""

from .factories import CampaignFactory, ResourceFactory
from .mocks import FailingResourceStore, InMemoryCampaignStore, InMemoryResourceStore, StaticPackageCatalog

__all__ = [
    # Factories
    "ResourceFactory",
    "CampaignFactory",
    # Mocks
    "InMemoryCampaignStore",
    "InMemoryResourceStore",
    "FailingResourceStore",
    "StaticPackageCatalog",
]
