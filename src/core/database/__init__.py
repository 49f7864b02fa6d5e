"""Database module for the playlist campaign engine.

Key components:
- database.py: Table creation and package tier seeding
- database_session.py: Engine and session handling
- json_type.py: JSON column type (JSONB on PostgreSQL)
- models.py: SQLAlchemy ORM models
- repositories.py: SQLAlchemy implementations of the engine's store interfaces
"""
