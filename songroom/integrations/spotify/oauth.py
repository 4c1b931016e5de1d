from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from ...settings import Settings, get_settings
from .config import SPOTIFY_ACCOUNTS_BASE_URL, get_spotify_scopes

logger = logging.getLogger(__name__)


def log_spotify_oauth(operation: str, details: dict | None = None, level: str = "info"):
    """Structured Spotify OAuth logging."""
    log_data = {
        "operation": operation,
        "component": "spotify_oauth",
        "timestamp": time.time(),
        **(details or {}),
    }
    log = getattr(logger, level, logger.info)
    log(f"🔐 SPOTIFY OAUTH {operation.upper()}", extra={"meta": log_data})


class SpotifyOAuthError(Exception):
    """Exception raised for Spotify OAuth errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class SpotifyTokens:
    """Token grant returned by the accounts service."""

    access_token: str
    expires_at: int
    refresh_token: str | None = None
    scope: str | None = None

    @classmethod
    def from_token_response(
        cls, payload: dict[str, Any], *, now: float | None = None
    ) -> SpotifyTokens:
        """Convert Spotify token response JSON into SpotifyTokens.

        Spotify returns access_token, token_type, expires_in (seconds),
        refresh_token (optional on refresh) and scope.
        """
        now_ts = int(time.time() if now is None else now)
        raw_expires_in = payload.get("expires_in", 3600)
        try:
            expires_in = int(raw_expires_in)
        except (TypeError, ValueError) as e:
            raise SpotifyOAuthError(
                f"Token response has invalid expires_in: {raw_expires_in!r}"
            ) from e
        return cls(
            access_token=str(payload.get("access_token") or ""),
            expires_at=now_ts + expires_in,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
        )


class SpotifyOAuth:
    """Spotify OAuth 2.0 authorization code flow."""

    token_url = f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token"

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client_id = self.settings.SPOTIFY_CLIENT_ID.strip()
        self.client_secret = self.settings.SPOTIFY_CLIENT_SECRET.strip()
        self.redirect_uri = self.settings.spotify_redirect_uri
        self._transport = transport

        if not self.client_id or not self.client_secret:
            raise ValueError("SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are required")

    def get_authorization_url(
        self, state: str, scopes: list[str] | None = None, show_dialog: bool = False
    ) -> str:
        """Build the accounts-service URL the browser is sent to."""
        params = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(scopes if scopes is not None else get_spotify_scopes()),
            "state": state,
        }
        if show_dialog:
            params["show_dialog"] = "true"
        return f"{SPOTIFY_ACCOUNTS_BASE_URL}/authorize?{urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> SpotifyTokens:
        """Exchange authorization code for access and refresh tokens."""
        log_spotify_oauth(
            "exchange_code_start",
            {"code_length": len(code) if code else 0, "redirect_uri": self.redirect_uri},
        )
        payload = await self._post_form(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            }
        )
        tokens = SpotifyTokens.from_token_response(payload)
        if not tokens.access_token:
            raise SpotifyOAuthError("Token exchange returned no access_token")

        log_spotify_oauth(
            "exchange_code_complete",
            {
                "has_refresh_token": bool(tokens.refresh_token),
                "expires_at": tokens.expires_at,
                "scope": tokens.scope,
            },
        )
        return tokens

    async def refresh_access_token(self, refresh_token: str) -> SpotifyTokens:
        """Refresh an access token using the refresh token."""
        payload = await self._post_form(
            {"grant_type": "refresh_token", "refresh_token": refresh_token}
        )
        tokens = SpotifyTokens.from_token_response(payload)
        if not tokens.access_token:
            raise SpotifyOAuthError("Token refresh returned no access_token")
        log_spotify_oauth(
            "refresh_complete",
            {"rotated_refresh_token": bool(tokens.refresh_token), "expires_at": tokens.expires_at},
        )
        return tokens

    async def _post_form(self, form: dict[str, str]) -> dict[str, Any]:
        data = {
            **form,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.HTTP_CLIENT_TIMEOUT, connect=10.0),
                transport=self._transport,
            ) as client:
                response = await client.post(self.token_url, data=data, headers=headers)
        except httpx.HTTPError as e:
            raise SpotifyOAuthError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            log_spotify_oauth(
                "token_request_failed",
                {"grant_type": form.get("grant_type"), "status_code": response.status_code},
                level="warning",
            )
            raise SpotifyOAuthError(
                f"Token request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SpotifyOAuthError(f"Token response was not JSON: {response.text}") from e
        if not isinstance(payload, dict):
            raise SpotifyOAuthError(f"Token response was not an object: {payload}")
        return payload
