from __future__ import annotations

import logging

from ...metrics import TOKEN_REFRESH_OPERATIONS
from ...models.provider_tokens import RefreshedToken
from ...settings import get_settings
from ...token_store import TokenDAO, token_dao
from .client import SpotifyClient, SpotifyNotConnectedError
from .oauth import SpotifyOAuth, SpotifyOAuthError

logger = logging.getLogger(__name__)


async def refresh_user_token(
    user_id: str,
    *,
    store: TokenDAO | None = None,
    oauth: SpotifyOAuth | None = None,
) -> RefreshedToken | None:
    """Refresh a user's Spotify access token.

    Any failure (no stored refresh token, provider rejection, network error)
    clears the stored link so the user has to reconnect.
    """
    store = store or token_dao
    tokens = await store.get_tokens(user_id)
    if tokens is None:
        return None

    if not tokens.refresh_token:
        logger.warning(
            "🔄 TOKEN REFRESH: No refresh token, clearing link",
            extra={"meta": {"user_id": user_id}},
        )
        TOKEN_REFRESH_OPERATIONS.labels(provider="spotify", result="no_refresh_token").inc()
        await store.clear_tokens(user_id)
        return None

    try:
        oauth = oauth or SpotifyOAuth()
        grant = await oauth.refresh_access_token(tokens.refresh_token)
    except (SpotifyOAuthError, ValueError) as e:
        logger.error(
            "🔄 TOKEN REFRESH: Failed, clearing link",
            extra={
                "meta": {
                    "user_id": user_id,
                    "status_code": getattr(e, "status_code", None),
                    "error": str(e),
                }
            },
        )
        TOKEN_REFRESH_OPERATIONS.labels(provider="spotify", result="failure").inc()
        await store.clear_tokens(user_id)
        return None

    await store.update_access_token(
        user_id,
        grant.access_token,
        grant.expires_at,
        refresh_token=grant.refresh_token,
    )
    TOKEN_REFRESH_OPERATIONS.labels(provider="spotify", result="success").inc()
    logger.info(
        "🔄 TOKEN REFRESH: Success",
        extra={"meta": {"user_id": user_id, "expires_at": grant.expires_at}},
    )
    return RefreshedToken(access_token=grant.access_token, expires_at=grant.expires_at)


async def get_spotify_client_for_user(
    user_id: str,
    *,
    store: TokenDAO | None = None,
    oauth: SpotifyOAuth | None = None,
    now: float | None = None,
) -> SpotifyClient | None:
    """Return a client holding a usable access token, or None if not connected.

    Tokens that expire within TOKEN_EXPIRY_BUFFER_SECONDS (or whose expiry is
    unknown) are refreshed first.
    """
    store = store or token_dao
    tokens = await store.get_tokens(user_id)
    if tokens is None or not tokens.access_token:
        return None

    access_token = tokens.access_token
    buffer_seconds = get_settings().TOKEN_EXPIRY_BUFFER_SECONDS
    if tokens.is_expired(buffer_seconds, now=now):
        logger.info(
            "🔄 TOKEN REFRESH: Token expiring, refreshing before use",
            extra={
                "meta": {
                    "user_id": user_id,
                    "expires_at": tokens.expires_at,
                    "buffer_seconds": buffer_seconds,
                }
            },
        )
        refreshed = await refresh_user_token(user_id, store=store, oauth=oauth)
        if refreshed is None:
            return None
        access_token = refreshed.access_token

    return SpotifyClient(access_token, spotify_id=tokens.provider_id)


async def require_spotify_client(user_id: str, **kwargs) -> SpotifyClient:
    """Like ``get_spotify_client_for_user`` but raises when not connected."""
    client = await get_spotify_client_for_user(user_id, **kwargs)
    if client is None:
        raise SpotifyNotConnectedError()
    return client
