from songroom.api.pagination import PLAYLIST_LIMITS, TRACK_LIMITS, offset_pagination


def _playlists(offset=None, limit=None):
    dep = offset_pagination(default_limit=PLAYLIST_LIMITS[0], max_limit=PLAYLIST_LIMITS[1])
    return dep(offset=offset, limit=limit)


def test_defaults_when_params_missing():
    page = _playlists()
    assert (page.offset, page.limit) == (0, 20)


def test_limit_is_capped():
    page = _playlists("10", "500")
    assert (page.offset, page.limit) == (10, 50)


def test_garbage_values_fall_back_to_defaults():
    page = _playlists("abc", "xyz")
    assert (page.offset, page.limit) == (0, 20)


def test_negative_and_zero_values_are_clamped():
    page = _playlists("-5", "0")
    assert (page.offset, page.limit) == (0, 20)


def test_track_limits():
    dep = offset_pagination(default_limit=TRACK_LIMITS[0], max_limit=TRACK_LIMITS[1])
    assert dep(offset=None, limit=None).limit == 50
    assert dep(offset="0", limit="1000").limit == 100
