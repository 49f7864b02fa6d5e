import pytest

from src.adapters import PROBER_REGISTRY, get_prober
from src.adapters.base import PlaylistHealthProber, ProbeError
from src.adapters.mock_prober import MockPlaylistProber
from src.adapters.spotify import SpotifyPlaylistProber
from src.core.schemas import ProbeResult

pytestmark = pytest.mark.unit


def test_registry_contains_all_probers():
    assert PROBER_REGISTRY == {"spotify": SpotifyPlaylistProber, "mock": MockPlaylistProber}
    assert all(issubclass(cls, PlaylistHealthProber) for cls in PROBER_REGISTRY.values())


def test_get_prober_defaults_to_mock_without_credentials():
    assert isinstance(get_prober(), MockPlaylistProber)


def test_get_prober_uses_spotify_when_configured(monkeypatch):
    from src.core.config import reset_config

    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    reset_config()

    prober = get_prober()
    try:
        assert isinstance(prober, SpotifyPlaylistProber)
    finally:
        prober.close()


def test_get_prober_explicit_type_is_case_insensitive():
    assert isinstance(get_prober("MOCK"), MockPlaylistProber)


def test_get_prober_rejects_unknown_type():
    with pytest.raises(ValueError, match="Unknown prober type"):
        get_prober("apple")


class TestMockPlaylistProber:
    def test_default_result(self):
        prober = MockPlaylistProber()

        result = prober.probe("https://open.spotify.com/playlist/abc")

        assert result == ProbeResult(is_reachable=True, is_public=True)
        assert prober.probed == ["https://open.spotify.com/playlist/abc"]

    def test_canned_results_and_failures(self):
        canned = ProbeResult(is_reachable=True, is_public=False, occupancy_count=4)
        prober = MockPlaylistProber(results={"a": canned}, failures={"b"})

        assert prober.probe("a") == canned
        with pytest.raises(ProbeError):
            prober.probe("b")
