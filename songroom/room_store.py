"""Persistence for game rooms."""

from __future__ import annotations

import logging
import secrets
import string
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .db.core import get_async_db
from .db.models import Room
from .models.catalog import GameSong

logger = logging.getLogger(__name__)

_NAME_ALPHABET = string.ascii_lowercase
_NAME_LENGTH = 6
_MAX_NAME_ATTEMPTS = 10


def generate_room_name() -> str:
    return "".join(secrets.choice(_NAME_ALPHABET) for _ in range(_NAME_LENGTH))


async def _name_taken(session: AsyncSession, name: str) -> bool:
    return await session.get(Room, name) is not None


class RoomDAO:
    async def get_room(self, name: str) -> Room | None:
        async with get_async_db() as session:
            return await session.get(Room, name)

    async def create_room(
        self,
        *,
        host_user_id: str,
        host_name: str | None,
        category: dict[str, Any] | None = None,
        rated: bool = True,
        private: bool = False,
        spotify_playlist_id: str | None = None,
        spotify_playlist_name: str | None = None,
        songs: list[GameSong] | None = None,
    ) -> Room:
        """Insert a room under a fresh random name and return it.

        A name taken by a concurrent insert surfaces as an IntegrityError and
        is retried with a new name.
        """
        song_docs = [s.model_dump(by_alias=True) for s in songs or []]
        for _ in range(_MAX_NAME_ATTEMPTS):
            name = generate_room_name()
            room = Room(
                name=name,
                category=category,
                rated=rated,
                private=private,
                host_user_id=host_user_id,
                host_name=host_name,
                game_id="Waiting",
                status="Waiting",
                closed=False,
                created=datetime.now(UTC),
                users=[],
                spotify_playlist_id=spotify_playlist_id,
                spotify_playlist_name=spotify_playlist_name,
                custom_playlist_songs=song_docs,
            )
            try:
                async with get_async_db() as session:
                    if await _name_taken(session, name):
                        continue
                    session.add(room)
                    await session.flush()
            except IntegrityError:
                logger.warning("room name collision", extra={"meta": {"room": name}})
                continue
            break
        else:
            raise RuntimeError("could not allocate a unique room name")

        logger.info(
            "room created",
            extra={
                "meta": {
                    "room": name,
                    "host_user_id": host_user_id,
                    "spotify_playlist_id": spotify_playlist_id,
                    "songs": len(songs or []),
                }
            },
        )
        return room


room_dao = RoomDAO()
