"""
Spotify OAuth state helpers.

The ``state`` parameter is a short-lived HS256 JWT naming the user who
started the flow, so the callback can attribute tokens without a session.
"""

import logging
import secrets
import time

import jwt

from ...settings import Settings, get_settings

logger = logging.getLogger(__name__)

_STATE_TYPE = "spotify_oauth_state"


class InvalidStateError(Exception):
    """Raised when a callback state is missing, forged, expired or malformed."""


def _get_jwt_secret(settings: Settings) -> str:
    secret = settings.JWT_SECRET
    if not secret:
        raise RuntimeError("JWT_SECRET is required to sign OAuth state")
    return secret


def generate_signed_state(user_id: str, settings: Settings | None = None) -> str:
    """Generate a signed state parameter carrying ``user_id``."""
    settings = settings or get_settings()
    now = int(time.time())
    payload = {
        "sub": user_id,
        "typ": _STATE_TYPE,
        "iat": now,
        "exp": now + settings.STATE_TTL_SECONDS,
        "nonce": secrets.token_hex(8),
    }
    return jwt.encode(payload, _get_jwt_secret(settings), algorithm="HS256")


def verify_signed_state(token: str, settings: Settings | None = None) -> str:
    """Verify a state parameter and return the user id it carries.

    Raises:
        InvalidStateError: if the token is missing, expired, tampered with
            or not an OAuth state token.
    """
    settings = settings or get_settings()
    if not token:
        raise InvalidStateError("missing state")
    try:
        payload = jwt.decode(
            token,
            _get_jwt_secret(settings),
            algorithms=["HS256"],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        logger.warning("OAuth state token expired")
        raise InvalidStateError("state expired") from e
    except jwt.InvalidTokenError as e:
        logger.warning(
            "OAuth state token verification failed",
            extra={"meta": {"error_type": type(e).__name__}},
        )
        raise InvalidStateError("state invalid") from e

    if payload.get("typ") != _STATE_TYPE:
        raise InvalidStateError("state has wrong type")
    return str(payload["sub"])
