from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse, RedirectResponse

from ..deps.user import CurrentUser, get_current_user
from ..errors import json_error
from ..integrations.spotify.catalog import list_playlist_tracks, list_playlists
from ..integrations.spotify.client import (
    SpotifyAuthError,
    SpotifyClient,
    SpotifyError,
    SpotifyRateLimitedError,
)
from ..integrations.spotify.oauth import SpotifyOAuth
from ..integrations.spotify.state import (
    InvalidStateError,
    generate_signed_state,
    verify_signed_state,
)
from ..integrations.spotify.tokens import get_spotify_client_for_user, refresh_user_token
from ..metrics import OAUTH_CALLBACK, OAUTH_START
from ..models.catalog import PlaylistPage, TrackPage
from ..models.provider_tokens import ProviderTokens
from ..settings import get_settings
from ..token_store import token_dao
from .pagination import PLAYLIST_LIMITS, TRACK_LIMITS, OffsetParams, offset_pagination

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/spotify", tags=["Spotify"])

# Used when Spotify sends no usable Retry-After (missing, zero or an HTTP date)
DEFAULT_RETRY_AFTER_SECONDS = 1


def _frontend_redirect(**params: str) -> RedirectResponse:
    base = get_settings().FRONTEND_URL.rstrip("/")
    resp = RedirectResponse(f"{base}/?{urlencode(params)}", status_code=302)
    resp.headers["Cache-Control"] = "no-store"
    return resp


def _callback_error(reason: str) -> RedirectResponse:
    OAUTH_CALLBACK.labels(result="error", reason=reason).inc()
    return _frontend_redirect(spotifyError=reason)


def not_connected_response() -> JSONResponse:
    return json_error("spotify_not_connected", "Spotify not connected", 401)


def spotify_error_response(exc: SpotifyError, message: str) -> JSONResponse:
    """Map Web API failures onto client-facing errors."""
    if isinstance(exc, SpotifyRateLimitedError):
        retry_after = exc.retry_after
        if not retry_after or retry_after < 1:
            retry_after = DEFAULT_RETRY_AFTER_SECONDS
        return json_error(
            "spotify_rate_limited",
            "Spotify rate limit reached",
            429,
            meta={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
    if isinstance(exc, SpotifyAuthError):
        return json_error("spotify_token_expired", "Spotify token expired", 401)
    return json_error("spotify_error", message, 500, meta={"upstream_status": exc.status_code})


@router.get("/auth")
async def spotify_auth_url(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Return the Spotify authorization URL for the logged-in user."""
    state = generate_signed_state(user.id)
    url = SpotifyOAuth().get_authorization_url(state)
    OAUTH_START.labels(provider="spotify").inc()
    logger.info("spotify.auth_url issued", extra={"meta": {"user_id": user.id}})
    return {"url": url}


@router.get("/callback")
async def spotify_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
) -> Response:
    """Consume the authorization callback, store tokens, and bounce to the app."""
    if error:
        logger.warning("spotify.callback: provider error", extra={"meta": {"error": error}})
        return _callback_error("access_denied")

    if not state:
        return _callback_error("invalid_state")
    try:
        user_id = verify_signed_state(state)
    except InvalidStateError as e:
        logger.warning("spotify.callback: bad state", extra={"meta": {"reason": str(e)}})
        return _callback_error("invalid_state")

    if not code:
        return _callback_error("auth_failed")

    if not await token_dao.user_exists(user_id):
        return _callback_error("user_not_found")

    try:
        grant = await SpotifyOAuth().exchange_code_for_tokens(code)
        profile = await SpotifyClient(grant.access_token).get_me()
        spotify_id = profile["id"]
    except Exception:
        logger.exception("spotify.callback: exchange failed", extra={"meta": {"user_id": user_id}})
        return _callback_error("auth_failed")

    saved = await token_dao.save_tokens(
        user_id,
        ProviderTokens(
            provider_id=spotify_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=grant.expires_at,
        ),
    )
    if not saved:
        return _callback_error("user_not_found")

    OAUTH_CALLBACK.labels(result="ok", reason="connected").inc()
    logger.info(
        "spotify.callback: connected",
        extra={"meta": {"user_id": user_id, "spotify_id": spotify_id}},
    )
    return _frontend_redirect(spotifyConnected="true")


@router.post("/disconnect")
@router.delete("/disconnect")
async def spotify_disconnect(user: CurrentUser = Depends(get_current_user)):
    """Forget the user's Spotify link, whatever state it is in."""
    if not await token_dao.clear_tokens(user.id):
        return json_error("not_found", "User not found", 404)
    logger.info("spotify.disconnect", extra={"meta": {"user_id": user.id}})
    return {"success": True}


@router.get("/status")
async def spotify_status(
    response: Response, user: CurrentUser = Depends(get_current_user)
) -> dict:
    """Get Spotify connection status: {connected, spotifyId}."""
    response.headers["Cache-Control"] = "no-store"
    tokens = await token_dao.get_tokens(user.id)
    if tokens is None:
        return json_error("not_found", "User not found", 404)
    return {"connected": tokens.is_connected(), "spotifyId": tokens.provider_id}


@router.post("/refresh")
async def spotify_refresh(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Force a token refresh; a failed refresh disconnects the account."""
    tokens = await token_dao.get_tokens(user.id)
    if tokens is None or not tokens.access_token:
        return {"refreshed": False, "reason": "not_connected"}
    refreshed = await refresh_user_token(user.id)
    if refreshed is None:
        return {"refreshed": False, "reason": "refresh_failed"}
    return {"refreshed": True, "expiresAt": refreshed.expires_at}


@router.get("/playlists", response_model=PlaylistPage)
async def spotify_playlists(
    page: OffsetParams = Depends(
        offset_pagination(default_limit=PLAYLIST_LIMITS[0], max_limit=PLAYLIST_LIMITS[1])
    ),
    user: CurrentUser = Depends(get_current_user),
):
    """Return one page of the user's playlists."""
    client = await get_spotify_client_for_user(user.id)
    if client is None:
        return not_connected_response()
    try:
        return await list_playlists(client, offset=page.offset, limit=page.limit)
    except SpotifyError as e:
        logger.warning(
            "spotify.playlists failed",
            extra={"meta": {"user_id": user.id, "status_code": e.status_code}},
        )
        return spotify_error_response(e, "Failed to get playlists")


@router.get("/playlist/{playlist_id}/tracks", response_model=TrackPage)
async def spotify_playlist_tracks(
    playlist_id: str,
    page: OffsetParams = Depends(
        offset_pagination(default_limit=TRACK_LIMITS[0], max_limit=TRACK_LIMITS[1])
    ),
    user: CurrentUser = Depends(get_current_user),
):
    """Return playable tracks from one page of a playlist (preview/validation)."""
    client = await get_spotify_client_for_user(user.id)
    if client is None:
        return not_connected_response()
    try:
        return await list_playlist_tracks(
            client, playlist_id, offset=page.offset, limit=page.limit
        )
    except SpotifyError as e:
        logger.warning(
            "spotify.playlist_tracks failed",
            extra={
                "meta": {
                    "user_id": user.id,
                    "playlist_id": playlist_id,
                    "status_code": e.status_code,
                }
            },
        )
        return spotify_error_response(e, "Failed to get playlist tracks")
