"""
Service modules for the playlist campaign engine.

This package contains the engine components (catalog, health monitor, duplicate
protection, allocator, progress simulator, state machine) and the orchestration
services built on top of them.
"""
