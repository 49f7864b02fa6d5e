"""Package tier lookup.

Tiers come from the ``campaign_packages`` table. Legacy tier names are mapped to
their current equivalents first, and a built-in table covers tiers that have no
row yet so that campaign creation never blocks on package configuration.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select

from src.core.database.database_session import get_db_session
from src.core.database.models import CampaignPackage
from src.core.stores import PackageCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageTier:
    slots_needed: int
    target_volume: int


DEFAULT_PACKAGE_TIERS: dict[str, PackageTier] = {
    "LEGENDARY": PackageTier(slots_needed=4, target_volume=40000),
    "UNSTOPPABLE": PackageTier(slots_needed=4, target_volume=20000),
    "DOMINATE": PackageTier(slots_needed=3, target_volume=9000),
    "MOMENTUM": PackageTier(slots_needed=2, target_volume=4000),
    "BREAKTHROUGH": PackageTier(slots_needed=2, target_volume=2000),
}

UNKNOWN_PACKAGE_TIER = PackageTier(slots_needed=2, target_volume=3000)

LEGACY_PACKAGE_NAMES: dict[str, str] = {
    "ULTRA": "LEGENDARY",
    "DIAMOND": "UNSTOPPABLE",
    "STARTER": "BREAKTHROUGH",
    "TEST CAMPAIGN": "BREAKTHROUGH",
}


def normalize_package_name(package_tier: str | None) -> str:
    """Upper-case the tier name and map legacy names to current ones."""
    name = (package_tier or "").strip().upper()
    return LEGACY_PACKAGE_NAMES.get(name, name)


class PackageTierCatalog(PackageCatalog):
    """Package catalog backed by the ``campaign_packages`` table."""

    def get_tier(self, package_tier: str | None) -> PackageTier:
        name = normalize_package_name(package_tier)

        try:
            with get_db_session() as session:
                row = session.scalars(select(CampaignPackage).where(CampaignPackage.package_name == name)).first()
                if row is not None:
                    return PackageTier(
                        slots_needed=row.playlist_assignments_needed,
                        target_volume=row.playlist_streams,
                    )
        except Exception as e:
            logger.error(f"Error fetching package configuration for {package_tier} (mapped to {name}): {e}")

        tier = DEFAULT_PACKAGE_TIERS.get(name, UNKNOWN_PACKAGE_TIER)
        logger.warning(f"Using fallback package data for {package_tier!r}: {tier}")
        return tier

    def slots_needed_for(self, package_tier: str) -> int:
        return self.get_tier(package_tier).slots_needed

    def target_volume_for(self, package_tier: str) -> int:
        return self.get_tier(package_tier).target_volume
