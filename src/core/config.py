"""Configuration management for the playlist campaign engine.

Provides Pydantic-based configuration classes for type-safe, validated configuration
management using environment variables.
"""

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Allocation, health probing and progress simulation settings."""

    health_max_age_seconds: int = Field(
        default=3600, ge=0, description="Resources probed longer ago than this are considered stale"
    )
    health_batch_size: int = Field(default=20, ge=1, description="Maximum resources probed per refresh call")
    probe_delay_seconds: float = Field(default=0.2, ge=0, description="Fixed delay between probe submissions")
    probe_timeout_seconds: float = Field(default=8.0, gt=0, description="Timeout for a single external probe")
    probe_max_workers: int = Field(default=5, ge=1, le=10, description="Concurrent probes per refresh call")
    health_check_interval_seconds: int = Field(
        default=900, ge=1, description="Cadence of the background health scheduler"
    )
    streams_per_resource_per_day: int = Field(
        default=500, ge=1, description="Simulated streams one playlist delivers per day"
    )
    default_capacity: int = Field(default=25, ge=1, description="Capacity used when a playlist has none recorded")

    model_config = SettingsConfigDict(env_prefix="PLAYLIST_ENGINE_", case_sensitive=False)


class SpotifyConfig(BaseSettings):
    """Spotify Web API credentials for playlist health probing."""

    client_id: str = Field(default="", description="Spotify client id (client credentials flow)")
    client_secret: str = Field(default="", description="Spotify client secret")
    api_base_url: str = Field(default="https://api.spotify.com/v1", description="Spotify Web API base URL")
    token_url: str = Field(default="https://accounts.spotify.com/api/token", description="Spotify token endpoint")

    model_config = SettingsConfigDict(env_prefix="SPOTIFY_", case_sensitive=False)

    @field_validator("api_base_url", "token_url")
    @classmethod
    def validate_https(cls, v):
        """Spotify endpoints must be https URLs."""
        if not v.startswith("https://"):
            raise ValueError("Spotify endpoints must use https://")
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class DatabaseConfig(BaseSettings):
    """Database configuration."""

    url: str | None = Field(default=None, description="Database connection URL")
    query_timeout: int = Field(default=30, description="Statement timeout in seconds (PostgreSQL only)")
    connect_timeout: int = Field(default=10, description="Connection timeout in seconds")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")

    model_config = SettingsConfigDict(env_prefix="DATABASE_", case_sensitive=False)


class AppConfig(BaseSettings):
    """Main application configuration."""

    debug: bool = Field(default=False, description="Enable debug mode")
    environment: str = Field(default="development", description="Environment: production, staging, or development")

    engine: EngineConfig = Field(default_factory=EngineConfig)
    spotify: SpotifyConfig = Field(default_factory=SpotifyConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)


# Global configuration instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None


def validate_configuration() -> None:
    """Validate all configuration at startup.

    Raises:
        RuntimeError: If configuration validation fails
    """
    try:
        config = get_config()

        print("✅ Configuration validation passed")
        print(f"   Database: {'✅ Configured' if config.database.url else '❌ Not configured'}")
        spotify_status = "✅ Configured" if config.spotify.is_configured else "⚪ Not configured (mock prober only)"
        print(f"   Spotify: {spotify_status}")
        print(
            f"   Health refresh: batch {config.engine.health_batch_size}, "
            f"max age {config.engine.health_max_age_seconds}s, {config.engine.probe_max_workers} workers"
        )

    except Exception as e:
        raise RuntimeError(f"Configuration validation failed: {str(e)}") from e


def is_production() -> bool:
    """Check if running in production environment.

    Returns:
        bool: True if ENVIRONMENT=production, False otherwise
    """
    return os.getenv("ENVIRONMENT", "development").lower() == "production"
