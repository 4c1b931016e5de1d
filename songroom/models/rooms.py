import datetime as dt
from typing import Any

from pydantic import Field

from .catalog import CamelModel, GameSong


class CreateRoomRequest(CamelModel):
    spotify_playlist_id: str | None = None
    spotify_playlist_name: str | None = None
    category: dict[str, Any] | None = None
    private: bool = False
    rated: bool = True


class RoomHost(CamelModel):
    user_id: str
    name: str | None = None


class RoomOut(CamelModel):
    name: str
    category: dict[str, Any] | None = None
    rated: bool = True
    host: RoomHost
    game_id: str = "Waiting"
    status: str = "Waiting"
    created: dt.datetime
    closed: bool = False
    private: bool = False
    users: list[str] = Field(default_factory=list)
    spotify_playlist_id: str | None = None
    spotify_playlist_name: str | None = None
    custom_playlist_songs: list[GameSong] = Field(default_factory=list)
