from __future__ import annotations

import logging
from time import perf_counter
from typing import Any
from urllib.parse import quote

import httpx

from ...metrics import SPOTIFY_429, SPOTIFY_LATENCY, SPOTIFY_REQUESTS
from ...settings import Settings, get_settings
from .config import SPOTIFY_API_BASE_URL

logger = logging.getLogger(__name__)


class SpotifyError(RuntimeError):
    """Base error for Spotify Web API calls."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SpotifyAuthError(SpotifyError):
    """Spotify rejected the access token (HTTP 401)."""


class SpotifyRateLimitedError(SpotifyError):
    """Raised when Spotify responds with 429 and includes Retry-After."""

    def __init__(self, retry_after: int | None = None, message: str = "rate_limited") -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class SpotifyNotConnectedError(SpotifyError):
    """The user has no usable Spotify link; they must connect again."""

    def __init__(self, message: str = "Spotify not connected") -> None:
        super().__init__(message, status_code=401)


class SpotifyClient:
    """Spotify Web API client bound to one user's access token."""

    api_base = SPOTIFY_API_BASE_URL

    def __init__(
        self,
        access_token: str,
        *,
        spotify_id: str | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.access_token = access_token
        self.spotify_id = spotify_id
        self.settings = settings or get_settings()
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        metric_path: str | None = None,
    ) -> dict[str, Any]:
        """Perform one request and return the decoded JSON body.

        ``metric_path`` is the templated path used as a metrics label.
        """
        url = f"{self.api_base}{path}"
        label = metric_path or path
        headers = {"Authorization": f"Bearer {self.access_token}"}

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.HTTP_CLIENT_TIMEOUT, transport=self._transport
            ) as client:
                t0 = perf_counter()
                r = await client.request(method, url, params=params, headers=headers)
                dt = perf_counter() - t0
        except httpx.HTTPError as e:
            logger.warning(
                "🎵 SPOTIFY CLIENT: transport error",
                extra={"meta": {"method": method, "path": label, "error": str(e)}},
            )
            raise SpotifyError(f"Spotify request failed: {e}") from e

        SPOTIFY_LATENCY.labels(method, label).observe(dt)
        SPOTIFY_REQUESTS.labels(method, label, str(r.status_code)).inc()
        logger.debug(
            "🎵 SPOTIFY CLIENT: HTTP response received",
            extra={
                "meta": {
                    "method": method,
                    "path": label,
                    "status_code": r.status_code,
                    "response_time_ms": round(dt * 1000, 2),
                }
            },
        )

        if r.status_code == 429:
            SPOTIFY_429.labels(label).inc()
            try:
                retry_after = int(r.headers.get("Retry-After", "0") or 0)
            except ValueError:
                retry_after = None
            raise SpotifyRateLimitedError(retry_after)

        if r.status_code == 401:
            raise SpotifyAuthError("Spotify token expired", status_code=401)

        if r.status_code >= 400:
            raise SpotifyError(
                f"Spotify API error {r.status_code}: {r.text[:200]}",
                status_code=r.status_code,
            )

        try:
            return r.json()
        except ValueError as e:
            raise SpotifyError("Spotify response was not JSON", status_code=r.status_code) from e

    async def get_me(self) -> dict[str, Any]:
        """Current user's profile (id, display_name, ...)."""
        return await self._request("GET", "/me")

    async def get_user_playlists(self, *, offset: int = 0, limit: int = 20) -> dict[str, Any]:
        return await self._request(
            "GET", "/me/playlists", params={"offset": offset, "limit": limit}
        )

    async def get_playlist_tracks(
        self,
        playlist_id: str,
        *,
        offset: int = 0,
        limit: int = 100,
        fields: str | None = None,
        market: str | None = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"offset": offset, "limit": limit}
        if fields:
            params["fields"] = fields
        if market:
            params["market"] = market
        return await self._request(
            "GET",
            f"/playlists/{quote(playlist_id, safe='')}/tracks",
            params=params,
            metric_path="/playlists/{id}/tracks",
        )
