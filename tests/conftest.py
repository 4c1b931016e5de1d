"""Test-specific fixtures."""

import dataclasses
import time

import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from songroom.db import core as db_core
from songroom.models.provider_tokens import ProviderTokens
from songroom.settings import get_settings

JWT_SECRET = "test_jwt_secret_for_testing_only_must_be_at_least_32_chars_long"
FRONTEND_URL = "http://frontend.test"


@pytest.fixture(autouse=True)
def _lock_test_env(monkeypatch, tmp_path):
    """Point every test at its own SQLite file and deterministic settings."""
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "test_client_id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "test_client_secret")
    monkeypatch.setenv("APP_URL", "http://api.test")
    monkeypatch.setenv("FRONTEND_URL", FRONTEND_URL)
    monkeypatch.setenv("SPOTIFY_MARKET", "US")
    monkeypatch.setenv("DB_POOL", "disabled")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'songroom_test.db'}")
    monkeypatch.delenv("SPOTIFY_REDIRECT_URI", raising=False)
    monkeypatch.delenv("SPOTIFY_SCOPES", raising=False)
    get_settings.cache_clear()
    # NullPool engines hold no connections; dropping the reference is enough
    db_core._engine = None
    db_core._session_factory = None
    yield
    db_core._engine = None
    db_core._session_factory = None
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db():
    """Create the schema in the per-test database."""
    await db_core.init_db()
    yield
    await db_core.dispose_engine()


@pytest.fixture
def client(monkeypatch):
    import songroom.main as main_mod

    # Keep pytest's log capture handlers on the root logger
    monkeypatch.setattr(main_mod, "configure_logging", lambda *a, **k: None)
    with TestClient(main_mod.create_app()) as c:
        yield c


def make_access_token(user_id: str = "u_alice", name: str | None = "Alice", **claims) -> str:
    payload = {"sub": user_id, "exp": int(time.time()) + 3600, **claims}
    if name is not None:
        payload["name"] = name
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    def _make(user_id: str = "u_alice", name: str | None = "Alice") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_access_token(user_id, name)}"}

    return _make


class FakeTokenDAO:
    """In-memory stand-in for ``TokenDAO``."""

    def __init__(self):
        self.users: dict[str, ProviderTokens] = {}
        self.cleared: list[str] = []

    async def user_exists(self, user_id):
        return user_id in self.users

    async def ensure_user(self, user_id, name=None):
        self.users.setdefault(user_id, ProviderTokens())

    async def get_tokens(self, user_id):
        tokens = self.users.get(user_id)
        return dataclasses.replace(tokens) if tokens is not None else None

    async def save_tokens(self, user_id, tokens):
        if user_id not in self.users:
            return False
        self.users[user_id] = dataclasses.replace(tokens)
        return True

    async def update_access_token(self, user_id, access_token, expires_at, refresh_token=None):
        tokens = self.users.get(user_id)
        if tokens is None:
            return False
        tokens.access_token = access_token
        tokens.expires_at = expires_at
        if refresh_token:
            tokens.refresh_token = refresh_token
        return True

    async def clear_tokens(self, user_id):
        if user_id not in self.users:
            return False
        self.users[user_id] = ProviderTokens()
        self.cleared.append(user_id)
        return True


@pytest.fixture
def fake_store():
    return FakeTokenDAO()
