import httpx
import pytest

from songroom.integrations.spotify.client import (
    SpotifyAuthError,
    SpotifyClient,
    SpotifyError,
    SpotifyRateLimitedError,
)


def _client(handler, **kwargs) -> SpotifyClient:
    return SpotifyClient("at_123", transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_get_me_sends_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json={"id": "spotify_alice"})

    profile = await _client(handler).get_me()
    assert profile == {"id": "spotify_alice"}
    assert seen == {"auth": "Bearer at_123", "path": "/v1/me"}


@pytest.mark.asyncio
async def test_playlist_tracks_quotes_id_and_passes_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["raw_path"] = request.url.raw_path.decode()
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"items": [], "total": 0})

    await _client(handler).get_playlist_tracks(
        "abc/def", offset=100, limit=100, fields="items,total", market="US"
    )
    assert seen["raw_path"].startswith("/v1/playlists/abc%2Fdef/tracks")
    assert seen["params"] == {
        "offset": "100",
        "limit": "100",
        "fields": "items,total",
        "market": "US",
    }


@pytest.mark.asyncio
async def test_rate_limit_carries_retry_after():
    def handler(request):
        return httpx.Response(429, headers={"Retry-After": "7"})

    with pytest.raises(SpotifyRateLimitedError) as exc:
        await _client(handler).get_user_playlists()
    assert exc.value.retry_after == 7
    assert exc.value.status_code == 429


@pytest.mark.asyncio
async def test_unauthorized_maps_to_auth_error():
    def handler(request):
        return httpx.Response(401, json={"error": {"status": 401}})

    with pytest.raises(SpotifyAuthError):
        await _client(handler).get_user_playlists()


@pytest.mark.asyncio
async def test_server_error_maps_to_spotify_error():
    def handler(request):
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(SpotifyError) as exc:
        await _client(handler).get_me()
    assert exc.value.status_code == 502
    assert not isinstance(exc.value, (SpotifyAuthError, SpotifyRateLimitedError))


@pytest.mark.asyncio
async def test_transport_failure_maps_to_spotify_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(SpotifyError):
        await _client(handler).get_me()


@pytest.mark.asyncio
async def test_rate_limit_with_http_date_has_no_retry_after():
    def handler(request):
        return httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})

    with pytest.raises(SpotifyRateLimitedError) as exc:
        await _client(handler).get_user_playlists()
    assert exc.value.retry_after is None
