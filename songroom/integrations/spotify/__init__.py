"""Spotify integration module for OAuth, token lifecycle and catalog access."""

from .client import (
    SpotifyAuthError,
    SpotifyClient,
    SpotifyError,
    SpotifyNotConnectedError,
    SpotifyRateLimitedError,
)
from .oauth import SpotifyOAuth, SpotifyOAuthError, SpotifyTokens

__all__ = [
    "SpotifyAuthError",
    "SpotifyClient",
    "SpotifyError",
    "SpotifyNotConnectedError",
    "SpotifyOAuth",
    "SpotifyOAuthError",
    "SpotifyRateLimitedError",
    "SpotifyTokens",
]
