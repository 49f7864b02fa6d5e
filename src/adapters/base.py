from abc import ABC, abstractmethod

from src.core.schemas import ProbeResult


class ProbeError(Exception):
    """A probe could not produce an answer (transport failure, unexpected response)."""

    pass


class PlaylistHealthProber(ABC):
    """Abstract base class for external playlist health probers.

    Implementations must return within their configured timeout. Failures may be
    reported either as a ``ProbeResult`` with ``is_reachable=False`` or by raising;
    the health monitor records both as an ``error`` status.
    """

    prober_name: str = "base"

    @abstractmethod
    def probe(self, reference: str) -> ProbeResult:
        """Look up the playlist behind ``reference`` (an external link)."""

    def close(self) -> None:
        """Release any network resources held by the prober."""
        return None
