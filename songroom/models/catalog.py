"""Client-facing shapes for playlists, tracks and game songs.

Fields are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Playlist(CamelModel):
    id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    track_count: int = 0
    owner: str | None = None
    is_owner: bool = False


class TrackPreview(CamelModel):
    name: str
    artists: list[str] = Field(default_factory=list)
    preview_url: str
    image_url: str | None = None
    spotify_url: str | None = None


class GameSong(CamelModel):
    title: str
    artist: list[str] = Field(default_factory=list)
    song_url: str
    art_url: str | None = None
    spotify_url: str | None = None


class PlaylistPage(CamelModel):
    playlists: list[Playlist]
    total: int
    offset: int
    limit: int
    has_more: bool


class TrackPage(CamelModel):
    tracks: list[TrackPreview]
    total: int
    total_with_preview: int
    offset: int
    limit: int
    has_more: bool
