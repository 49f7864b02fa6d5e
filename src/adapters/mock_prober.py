"""Mock playlist prober for development and tests without Spotify credentials."""

import logging

from src.adapters.base import PlaylistHealthProber, ProbeError
from src.core.schemas import ProbeResult

logger = logging.getLogger(__name__)


class MockPlaylistProber(PlaylistHealthProber):
    """Returns canned probe results.

    Args:
        results: Per-reference results; references not listed get ``default``
        failures: References whose probe raises ``ProbeError``
        default: Result for unlisted references (public, occupancy unknown)
    """

    prober_name = "mock"

    def __init__(
        self,
        results: dict[str, ProbeResult] | None = None,
        failures: set[str] | None = None,
        default: ProbeResult | None = None,
    ):
        self.results = dict(results or {})
        self.failures = set(failures or ())
        self.default = default or ProbeResult(is_reachable=True, is_public=True)
        self.probed: list[str] = []

    def probe(self, reference: str) -> ProbeResult:
        self.probed.append(reference)
        if reference in self.failures:
            raise ProbeError(f"Simulated probe failure for {reference}")
        result = self.results.get(reference, self.default)
        logger.debug(f"Mock probe {reference}: {result}")
        return result
