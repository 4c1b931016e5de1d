"""Playlist and track retrieval shaped for the playlist picker and game rooms."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ...metrics import GAME_SEED_TRACKS
from ...models.catalog import GameSong, Playlist, PlaylistPage, TrackPage, TrackPreview
from ...settings import get_settings
from .client import SpotifyClient
from .config import GAME_SEED_PAGE_SIZE, PLAYLIST_TRACK_FIELDS
from .tokens import require_spotify_client

logger = logging.getLogger(__name__)


def _first_image_url(images: list[dict[str, Any]] | None) -> str | None:
    if images:
        return images[0].get("url")
    return None


def _playable_tracks(items: Iterable[dict[str, Any] | None]) -> list[dict[str, Any]]:
    """Tracks that carry a preview clip; everything else cannot be played."""
    out = []
    for item in items:
        track = (item or {}).get("track")
        if track and track.get("preview_url"):
            out.append(track)
    return out


def to_playlist(item: dict[str, Any], spotify_id: str | None) -> Playlist:
    owner = item.get("owner") or {}
    return Playlist(
        id=item["id"],
        name=item.get("name") or "",
        description=item.get("description"),
        image_url=_first_image_url(item.get("images")),
        track_count=(item.get("tracks") or {}).get("total", 0),
        owner=owner.get("display_name"),
        is_owner=bool(spotify_id) and owner.get("id") == spotify_id,
    )


def to_track_preview(track: dict[str, Any]) -> TrackPreview:
    return TrackPreview(
        name=track.get("name") or "",
        artists=[a.get("name") for a in track.get("artists") or []],
        preview_url=track["preview_url"],
        image_url=_first_image_url((track.get("album") or {}).get("images")),
        spotify_url=(track.get("external_urls") or {}).get("spotify"),
    )


def to_game_song(track: dict[str, Any]) -> GameSong:
    return GameSong(
        title=track.get("name") or "",
        artist=[a.get("name") for a in track.get("artists") or []],
        song_url=track["preview_url"],
        art_url=_first_image_url((track.get("album") or {}).get("images")),
        spotify_url=(track.get("external_urls") or {}).get("spotify"),
    )


async def list_playlists(
    client: SpotifyClient, *, offset: int = 0, limit: int = 20
) -> PlaylistPage:
    """One page of the user's playlists."""
    data = await client.get_user_playlists(offset=offset, limit=limit)
    playlists = [
        to_playlist(item, client.spotify_id) for item in data.get("items") or [] if item
    ]
    total = int(data.get("total") or 0)
    return PlaylistPage(
        playlists=playlists,
        total=total,
        offset=offset,
        limit=limit,
        has_more=offset + len(playlists) < total,
    )


async def list_playlist_tracks(
    client: SpotifyClient,
    playlist_id: str,
    *,
    offset: int = 0,
    limit: int = 50,
) -> TrackPage:
    """One page of a playlist's tracks, reduced to those with a preview clip.

    ``total`` and ``has_more`` describe the unfiltered playlist so the caller
    can keep paging past pages that happened to hold no playable tracks.
    """
    data = await client.get_playlist_tracks(
        playlist_id,
        offset=offset,
        limit=limit,
        fields=PLAYLIST_TRACK_FIELDS,
        market=get_settings().SPOTIFY_MARKET,
    )
    tracks = [to_track_preview(t) for t in _playable_tracks(data.get("items") or [])]
    total = int(data.get("total") or 0)
    return TrackPage(
        tracks=tracks,
        total=total,
        total_with_preview=len(tracks),
        offset=offset,
        limit=limit,
        has_more=offset + limit < total,
    )


async def fetch_playlist_songs_for_game(
    user_id: str,
    playlist_id: str,
    *,
    client: SpotifyClient | None = None,
) -> list[GameSong]:
    """Collect every playable track of a playlist to seed a game room.

    Pages through the whole playlist; there is no cap on the number of pages.

    Raises:
        SpotifyNotConnectedError: if the user has no usable Spotify link.
    """
    client = client or await require_spotify_client(user_id)
    market = get_settings().SPOTIFY_MARKET

    songs: list[GameSong] = []
    offset = 0
    pages = 0
    has_more = True
    while has_more:
        data = await client.get_playlist_tracks(
            playlist_id,
            offset=offset,
            limit=GAME_SEED_PAGE_SIZE,
            fields=PLAYLIST_TRACK_FIELDS,
            market=market,
        )
        songs.extend(to_game_song(t) for t in _playable_tracks(data.get("items") or []))
        pages += 1
        offset += GAME_SEED_PAGE_SIZE
        has_more = offset < int(data.get("total") or 0)

    GAME_SEED_TRACKS.observe(len(songs))
    logger.info(
        "🎵 GAME SEED: playlist collected",
        extra={
            "meta": {
                "user_id": user_id,
                "playlist_id": playlist_id,
                "pages": pages,
                "playable_tracks": len(songs),
            }
        },
    )
    return songs
