from __future__ import annotations

import os

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"
SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"

# space-separated - read-only access to the user's playlists and profile
_SCOPES_DEFAULT = (
    "playlist-read-private "
    "playlist-read-collaborative "
    "user-read-private "
    "user-read-email"
)

# Page size used when collecting every track of a playlist
GAME_SEED_PAGE_SIZE = 100

# Projection requested for playlist track pages
PLAYLIST_TRACK_FIELDS = (
    "items(track(name,preview_url,artists,album(images),external_urls)),total"
)


def get_spotify_scopes() -> list[str]:
    """Return Spotify OAuth scopes from env or the read-only defaults.

    Includes:
    - playlist-read-private: List the user's private playlists
    - playlist-read-collaborative: List collaborative playlists
    - user-read-private: Read profile (id, country)
    - user-read-email: Read account email

    Override with SPOTIFY_SCOPES env var to customize permissions.
    """
    return os.getenv("SPOTIFY_SCOPES", _SCOPES_DEFAULT).split()
