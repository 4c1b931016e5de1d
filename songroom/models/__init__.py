from .catalog import GameSong, Playlist, PlaylistPage, TrackPage, TrackPreview
from .provider_tokens import ProviderTokens, RefreshedToken
from .rooms import CreateRoomRequest, RoomHost, RoomOut

__all__ = [
    "CreateRoomRequest",
    "GameSong",
    "Playlist",
    "PlaylistPage",
    "ProviderTokens",
    "RefreshedToken",
    "RoomHost",
    "RoomOut",
    "TrackPage",
    "TrackPreview",
]
