from .base import PlaylistHealthProber as PlaylistHealthProber
from .base import ProbeError as ProbeError
from .mock_prober import MockPlaylistProber
from .spotify import SpotifyPlaylistProber

# Map of prober type strings to prober classes
PROBER_REGISTRY = {
    "spotify": SpotifyPlaylistProber,
    "mock": MockPlaylistProber,
}


def get_prober(prober_type: str | None = None) -> PlaylistHealthProber:
    """Factory function to get the appropriate prober instance.

    Without an explicit type, Spotify is used when credentials are configured and
    the mock prober otherwise.
    """
    if prober_type is None:
        from src.core.config import get_config

        prober_type = "spotify" if get_config().spotify.is_configured else "mock"

    prober_class = PROBER_REGISTRY.get(prober_type.lower())
    if not prober_class:
        raise ValueError(f"Unknown prober type: {prober_type}")
    return prober_class()
