from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from fastapi import HTTPException, Request

from ..http_errors import unauthorized
from ..settings import get_settings
from ..token_store import token_dao

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"


@dataclass(slots=True)
class CurrentUser:
    id: str
    name: str | None = None


def _jwt_secret() -> str:
    sec = get_settings().JWT_SECRET
    if not sec or sec.strip() == "":
        raise HTTPException(status_code=500, detail="missing_jwt_secret")
    return sec


def _read_access_token(request: Request) -> str | None:
    """Bearer header first, then the access_token cookie."""
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


async def get_current_user(request: Request) -> CurrentUser:
    """Resolve the logged-in user from the app session JWT.

    Users seen for the first time are provisioned in the user table so the
    Spotify link has a row to live on.
    """
    token = _read_access_token(request)
    if not token:
        raise unauthorized()

    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        logger.info(
            "auth: rejected access token",
            extra={"meta": {"error_type": type(e).__name__, "path": request.url.path}},
        )
        raise unauthorized(code="invalid_token") from e

    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise unauthorized(code="invalid_token")

    user = CurrentUser(id=str(user_id), name=payload.get("name"))
    await token_dao.ensure_user(user.id, user.name)
    request.state.user_id = user.id
    return user
