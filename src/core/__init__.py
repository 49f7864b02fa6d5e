"""
Core components of the playlist campaign engine.

This module contains:
- Domain types and enums (schemas.py, genres.py)
- Store interfaces (stores.py)
- Configuration and logging (config.py, logging_config.py)
- Reference parsing (track_identity.py)
- Persistence (database/)
"""
