from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..db.models import Room
from ..deps.user import CurrentUser, get_current_user
from ..errors import json_error
from ..integrations.spotify.catalog import fetch_playlist_songs_for_game
from ..integrations.spotify.client import SpotifyError, SpotifyNotConnectedError
from ..models.catalog import GameSong
from ..models.rooms import CreateRoomRequest, RoomHost, RoomOut
from ..room_store import room_dao
from .spotify import not_connected_response, spotify_error_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/rooms", tags=["Rooms"])


def room_to_out(room: Room) -> RoomOut:
    return RoomOut(
        name=room.name,
        category=room.category,
        rated=room.rated,
        host=RoomHost(user_id=room.host_user_id, name=room.host_name),
        game_id=room.game_id,
        status=room.status,
        created=room.created,
        closed=room.closed,
        private=room.private,
        users=list(room.users or []),
        spotify_playlist_id=room.spotify_playlist_id,
        spotify_playlist_name=room.spotify_playlist_name,
        custom_playlist_songs=[
            GameSong.model_validate(s) for s in room.custom_playlist_songs or []
        ],
    )


@router.post("", response_model=RoomOut, status_code=201)
async def create_room(
    body: CreateRoomRequest, user: CurrentUser = Depends(get_current_user)
):
    """Create a room hosted by the caller, optionally seeded from a Spotify playlist."""
    songs: list[GameSong] = []
    if body.spotify_playlist_id:
        try:
            songs = await fetch_playlist_songs_for_game(user.id, body.spotify_playlist_id)
        except SpotifyNotConnectedError:
            return not_connected_response()
        except SpotifyError as e:
            logger.warning(
                "room seed failed",
                extra={
                    "meta": {
                        "user_id": user.id,
                        "playlist_id": body.spotify_playlist_id,
                        "status_code": e.status_code,
                    }
                },
            )
            return spotify_error_response(e, "Failed to load playlist tracks")
        if not songs:
            return json_error(
                "no_playable_tracks",
                "Playlist has no tracks with previews",
                422,
                meta={"playlist_id": body.spotify_playlist_id},
            )

    room = await room_dao.create_room(
        host_user_id=user.id,
        host_name=user.name,
        category=body.category,
        rated=body.rated,
        private=body.private,
        spotify_playlist_id=body.spotify_playlist_id,
        spotify_playlist_name=body.spotify_playlist_name,
        songs=songs,
    )
    return room_to_out(room)


@router.get("/{name}", response_model=RoomOut)
async def get_room(name: str):
    room = await room_dao.get_room(name)
    if room is None:
        return json_error("not_found", "Room not found", 404)
    return room_to_out(room)
