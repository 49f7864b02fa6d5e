"""
Integration test specific fixtures.

These fixtures are for tests that exercise the SQLAlchemy repositories. They run
against an in-memory SQLite database unless DATABASE_URL points at PostgreSQL.
"""

import os

import pytest


@pytest.fixture(scope="function")
def integration_db(monkeypatch):
    """Provide a fresh database with all tables created."""
    from src.core.config import reset_config
    from src.core.database.database import create_tables
    from src.core.database.database_session import get_engine, reset_engine, reset_health_state
    from src.core.database.models import Base

    database_url = os.environ.get("DATABASE_URL", "")
    if not database_url.startswith("postgresql"):
        monkeypatch.setenv("DATABASE_URL", "sqlite://")

    reset_config()
    reset_engine()
    reset_health_state()
    create_tables()

    yield get_engine()

    Base.metadata.drop_all(get_engine())
    reset_engine()


@pytest.fixture
def seed_playlists(integration_db):
    """Insert playlist rows and return a callable to add more."""
    from src.core.database.database_session import get_db_session
    from src.core.database.models import PlaylistResource

    def _seed(*resources):
        with get_db_session() as session:
            for resource in resources:
                session.add(
                    PlaylistResource(
                        id=resource.id,
                        playlist_name=resource.name,
                        genre=resource.genre_tag or resource.genre_label,
                        playlist_link=resource.reference,
                        max_songs=resource.capacity,
                        cached_song_count=resource.utilization,
                        is_active=resource.is_active,
                        health_status=resource.health_status.value,
                        health_last_checked=resource.health_checked_at,
                    )
                )
            session.commit()

    return _seed
