"""Spotify Web API playlist prober.

Uses the client credentials flow; the access token is kept on the prober instance
until shortly before it expires. Each probe has one overall deadline that
retried requests share.
"""

import logging
import threading
import time

import httpx

from src.adapters.base import PlaylistHealthProber, ProbeError
from src.core.config import SpotifyConfig, get_config
from src.core.retry_utils import http_retry
from src.core.schemas import ProbeResult
from src.core.track_identity import extract_playlist_id

logger = logging.getLogger(__name__)

# Refresh the token this many seconds before Spotify says it expires
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class SpotifyPlaylistProber(PlaylistHealthProber):
    """Checks playlist visibility and track count through the Spotify Web API."""

    prober_name = "spotify"

    def __init__(
        self,
        config: SpotifyConfig | None = None,
        timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.config = config or get_config().spotify
        self.timeout_seconds = timeout_seconds or get_config().engine.probe_timeout_seconds
        self._client = client or httpx.Client(timeout=httpx.Timeout(self.timeout_seconds))
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    def probe(self, reference: str) -> ProbeResult:
        playlist_id = extract_playlist_id(reference)
        if not playlist_id:
            return ProbeResult(is_reachable=False, error_message=f"Invalid Spotify playlist reference: {reference}")

        deadline = time.monotonic() + self.timeout_seconds
        response = self._get_playlist(playlist_id, deadline)

        if response.status_code == 404:
            logger.info(f"Spotify playlist {playlist_id} not found")
            return ProbeResult(is_reachable=False, is_removed=True, error_message="Playlist not found (404)")

        if response.status_code == 401:
            # Token revoked early; drop it so the next probe fetches a new one
            with self._token_lock:
                self._token = None
            raise ProbeError("Spotify rejected the access token (401)")

        if response.status_code >= 400:
            raise ProbeError(f"Spotify API error: {response.status_code} {response.reason_phrase}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProbeError(f"Invalid JSON from Spotify for playlist {playlist_id}") from e

        tracks = data.get("tracks") or {}
        total = tracks.get("total")
        return ProbeResult(
            is_reachable=True,
            is_public=data.get("public"),
            occupancy_count=int(total) if total is not None else None,
        )

    def _remaining(self, deadline: float) -> httpx.Timeout:
        """Timeout for the next request, whatever is left of the probe's deadline.

        Raises:
            ProbeError: If the deadline has passed
        """
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ProbeError(f"Spotify probe exceeded its {self.timeout_seconds}s deadline")
        return httpx.Timeout(remaining)

    @http_retry
    def _get_playlist(self, playlist_id: str, deadline: float) -> httpx.Response:
        token = self._access_token(deadline)
        return self._client.get(
            f"{self.config.api_base_url}/playlists/{playlist_id}",
            params={"fields": "name,public,tracks.total"},
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=self._remaining(deadline),
        )

    def _access_token(self, deadline: float) -> str:
        with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            if not self.config.is_configured:
                raise ProbeError("Spotify credentials are not configured (SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET)")

            response = self._request_token(deadline)
            if response.status_code != 200:
                raise ProbeError(f"Failed to get Spotify access token: {response.status_code}")

            payload = response.json()
            self._token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
            self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN_SECONDS, 0)
            logger.debug("Fetched new Spotify access token")
            return self._token

    @http_retry
    def _request_token(self, deadline: float) -> httpx.Response:
        return self._client.post(
            self.config.token_url,
            data={"grant_type": "client_credentials"},
            auth=(self.config.client_id, self.config.client_secret),
            timeout=self._remaining(deadline),
        )

    def close(self) -> None:
        self._client.close()
