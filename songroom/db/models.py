# songroom/db/models.py
from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# ---------- Base with naming convention ----------
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = sa.MetaData(naming_convention=NAMING_CONVENTION)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255))
    # Linked Spotify account; all four are cleared together on disconnect
    spotify_id: Mapped[str | None] = mapped_column(String(255))
    spotify_access_token: Mapped[str | None] = mapped_column(Text)
    spotify_refresh_token: Mapped[str | None] = mapped_column(Text)
    # epoch seconds
    spotify_token_expiry: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class Room(Base):
    __tablename__ = "rooms"

    # randomly generated and part of the room URL
    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    category: Mapped[dict | None] = mapped_column(JSON)
    rated: Mapped[bool] = mapped_column(Boolean, default=True)
    host_user_id: Mapped[str] = mapped_column(String(128), index=True)
    host_name: Mapped[str | None] = mapped_column(String(255))
    game_id: Mapped[str] = mapped_column(String(64), default="Waiting")
    # "Waiting" | "InProgress" | "Finished"
    status: Mapped[str] = mapped_column(String(16), default="Waiting")
    created: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    closed: Mapped[bool] = mapped_column(Boolean, default=False)
    private: Mapped[bool] = mapped_column(Boolean, default=False)
    users: Mapped[list] = mapped_column(JSON, default=list)
    spotify_playlist_id: Mapped[str | None] = mapped_column(String(255))
    spotify_playlist_name: Mapped[str | None] = mapped_column(String(255))
    # Songs for custom playlist games; not shared with any global song catalog
    custom_playlist_songs: Mapped[list] = mapped_column(JSON, default=list)
