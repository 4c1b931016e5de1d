import httpx
import pytest

from songroom.integrations.spotify.client import SpotifyNotConnectedError
from songroom.integrations.spotify.oauth import SpotifyOAuth, SpotifyOAuthError, SpotifyTokens
from songroom.integrations.spotify.tokens import (
    get_spotify_client_for_user,
    refresh_user_token,
    require_spotify_client,
)
from songroom.models.provider_tokens import ProviderTokens
from songroom.settings import Settings, get_settings

NOW = 1_700_000_000


class FakeOAuth:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def refresh_access_token(self, refresh_token):
        self.calls.append(refresh_token)
        if self.error:
            raise self.error
        return self.result


def _connected(expires_at, refresh_token="rt_1"):
    return ProviderTokens(
        provider_id="spotify_alice",
        access_token="at_old",
        refresh_token=refresh_token,
        expires_at=expires_at,
    )


@pytest.mark.asyncio
async def test_fresh_token_is_used_without_refresh(fake_store):
    fake_store.users["u1"] = _connected(NOW + 3600)
    oauth = FakeOAuth()

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client.access_token == "at_old"
    assert client.spotify_id == "spotify_alice"
    assert oauth.calls == []


@pytest.mark.asyncio
async def test_expiring_token_is_refreshed_and_refresh_token_kept(fake_store):
    fake_store.users["u1"] = _connected(NOW + 60)
    oauth = FakeOAuth(SpotifyTokens(access_token="at_new", expires_at=NOW + 3600))

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client.access_token == "at_new"
    assert oauth.calls == ["rt_1"]
    stored = fake_store.users["u1"]
    assert stored.access_token == "at_new"
    assert stored.expires_at == NOW + 3600
    assert stored.refresh_token == "rt_1"


@pytest.mark.asyncio
async def test_unknown_expiry_triggers_refresh(fake_store):
    fake_store.users["u1"] = _connected(None)
    oauth = FakeOAuth(SpotifyTokens(access_token="at_new", expires_at=NOW + 3600))

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client.access_token == "at_new"


@pytest.mark.asyncio
async def test_rotated_refresh_token_is_stored(fake_store):
    fake_store.users["u1"] = _connected(NOW)
    oauth = FakeOAuth(
        SpotifyTokens(access_token="at_new", expires_at=NOW + 3600, refresh_token="rt_2")
    )

    refreshed = await refresh_user_token("u1", store=fake_store, oauth=oauth)

    assert refreshed.access_token == "at_new"
    assert fake_store.users["u1"].refresh_token == "rt_2"


@pytest.mark.asyncio
async def test_failed_refresh_disconnects_user(fake_store):
    fake_store.users["u1"] = _connected(NOW + 10)
    oauth = FakeOAuth(error=SpotifyOAuthError("invalid_grant", status_code=400))

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client is None
    assert fake_store.cleared == ["u1"]
    assert fake_store.users["u1"] == ProviderTokens()


@pytest.mark.asyncio
async def test_missing_refresh_token_disconnects_user(fake_store):
    fake_store.users["u1"] = _connected(NOW + 10, refresh_token=None)
    oauth = FakeOAuth()

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client is None
    assert oauth.calls == []
    assert fake_store.cleared == ["u1"]


@pytest.mark.asyncio
async def test_not_connected_and_unknown_users_get_no_client(fake_store):
    fake_store.users["u1"] = ProviderTokens()

    assert await get_spotify_client_for_user("u1", store=fake_store, now=NOW) is None
    assert await get_spotify_client_for_user("ghost", store=fake_store, now=NOW) is None
    assert await refresh_user_token("ghost", store=fake_store) is None


@pytest.mark.asyncio
async def test_require_client_raises_when_not_connected(fake_store):
    with pytest.raises(SpotifyNotConnectedError):
        await require_spotify_client("ghost", store=fake_store)


@pytest.mark.asyncio
async def test_malformed_token_response_disconnects_user(fake_store):
    fake_store.users["u1"] = _connected(NOW + 10)

    def handler(request):
        return httpx.Response(200, json={"access_token": "at_new", "expires_in": None})

    oauth = SpotifyOAuth(
        Settings(SPOTIFY_CLIENT_ID="cid", SPOTIFY_CLIENT_SECRET="csecret"),
        transport=httpx.MockTransport(handler),
    )

    client = await get_spotify_client_for_user("u1", store=fake_store, oauth=oauth, now=NOW)

    assert client is None
    assert fake_store.cleared == ["u1"]
    assert fake_store.users["u1"] == ProviderTokens()


@pytest.mark.asyncio
async def test_missing_client_credentials_disconnects_user(fake_store, monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "")
    get_settings.cache_clear()
    fake_store.users["u1"] = _connected(NOW + 10)

    assert await refresh_user_token("u1", store=fake_store) is None
    assert fake_store.cleared == ["u1"]
