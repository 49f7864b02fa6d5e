import logging

from sqlalchemy import select

from src.core.database.database_session import get_db_session, get_engine
from src.core.database.models import Base, CampaignPackage
from src.services.package_catalog import DEFAULT_PACKAGE_TIERS

logger = logging.getLogger(__name__)


def create_tables() -> None:
    """Create any missing tables. Production schemas are managed by alembic."""
    Base.metadata.create_all(get_engine())


def seed_package_tiers() -> int:
    """Insert the built-in package tiers that are not in the database yet.

    Returns:
        Number of tiers inserted
    """
    inserted = 0
    with get_db_session() as session:
        existing = set(session.scalars(select(CampaignPackage.package_name)).all())
        for name, tier in DEFAULT_PACKAGE_TIERS.items():
            if name in existing:
                continue
            session.add(
                CampaignPackage(
                    package_name=name,
                    playlist_assignments_needed=tier.slots_needed,
                    playlist_streams=tier.target_volume,
                )
            )
            inserted += 1
        session.commit()

    if inserted:
        logger.info(f"Seeded {inserted} package tier(s)")
    return inserted


def init_db() -> None:
    """Initialize the database: tables first, then the package tiers."""
    create_tables()
    seed_package_tiers()
