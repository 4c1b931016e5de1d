"""
Per-user storage for linked Spotify accounts.

Tokens live on the ``users`` row ({spotify_id, access token, refresh token,
expiry}) and are read and written through SQLAlchemy.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update

from .db.core import get_async_db
from .db.models import User
from .models.provider_tokens import ProviderTokens

logger = logging.getLogger(__name__)


class TokenDAO:
    """Data Access Object for provider tokens."""

    async def user_exists(self, user_id: str) -> bool:
        async with get_async_db() as session:
            result = await session.execute(select(User.id).where(User.id == user_id))
            return result.scalar_one_or_none() is not None

    async def ensure_user(self, user_id: str, name: str | None = None) -> None:
        """Create the user row on first sight; later calls are no-ops."""
        async with get_async_db() as session:
            existing = await session.get(User, user_id)
            if existing is None:
                session.add(User(id=user_id, name=name or user_id))
                logger.info(
                    "🔐 TOKEN STORE: user provisioned",
                    extra={"meta": {"user_id": user_id}},
                )

    async def get_tokens(self, user_id: str) -> ProviderTokens | None:
        """Return the user's provider tokens, or None when the user does not exist."""
        async with get_async_db() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            return ProviderTokens(
                provider_id=user.spotify_id,
                access_token=user.spotify_access_token,
                refresh_token=user.spotify_refresh_token,
                expires_at=user.spotify_token_expiry,
            )

    async def save_tokens(self, user_id: str, tokens: ProviderTokens) -> bool:
        """Store a freshly linked account. Returns False when the user is unknown."""
        async with get_async_db() as session:
            result = await session.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    spotify_id=tokens.provider_id,
                    spotify_access_token=tokens.access_token,
                    spotify_refresh_token=tokens.refresh_token,
                    spotify_token_expiry=tokens.expires_at,
                )
            )
            ok = result.rowcount > 0
        logger.info(
            "🔐 TOKEN STORE: save",
            extra={
                "meta": {
                    "user_id": user_id,
                    "ok": ok,
                    "has_refresh_token": bool(tokens.refresh_token),
                    "expires_at": tokens.expires_at,
                }
            },
        )
        return ok

    async def update_access_token(
        self,
        user_id: str,
        access_token: str,
        expires_at: int,
        refresh_token: str | None = None,
    ) -> bool:
        """Record a refreshed access token.

        The stored refresh token is only replaced when the provider rotated it.
        """
        values = {
            "spotify_access_token": access_token,
            "spotify_token_expiry": expires_at,
        }
        if refresh_token:
            values["spotify_refresh_token"] = refresh_token
        async with get_async_db() as session:
            result = await session.execute(
                update(User).where(User.id == user_id).values(**values)
            )
            return result.rowcount > 0

    async def clear_tokens(self, user_id: str) -> bool:
        """Forget the linked account entirely: identity and both tokens."""
        async with get_async_db() as session:
            result = await session.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    spotify_id=None,
                    spotify_access_token=None,
                    spotify_refresh_token=None,
                    spotify_token_expiry=None,
                )
            )
            ok = result.rowcount > 0
        logger.info(
            "🔐 TOKEN STORE: cleared",
            extra={"meta": {"user_id": user_id, "ok": ok}},
        )
        return ok


# Global instance for use across the application
token_dao = TokenDAO()
