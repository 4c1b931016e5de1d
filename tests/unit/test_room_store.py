import pytest

from songroom import room_store
from songroom.room_store import RoomDAO

pytestmark = pytest.mark.asyncio


def _names(monkeypatch, *names):
    queue = list(names)
    monkeypatch.setattr(room_store, "generate_room_name", lambda: queue.pop(0))


async def test_taken_name_is_skipped(db, monkeypatch):
    _names(monkeypatch, "aaaaaa", "aaaaaa", "bbbbbb")
    dao = RoomDAO()

    first = await dao.create_room(host_user_id="u1", host_name="Alice")
    second = await dao.create_room(host_user_id="u2", host_name="Bob")

    assert first.name == "aaaaaa"
    assert second.name == "bbbbbb"


async def test_concurrent_name_clash_is_retried(db, monkeypatch):
    _names(monkeypatch, "aaaaaa", "aaaaaa", "cccccc")
    dao = RoomDAO()
    await dao.create_room(host_user_id="u1", host_name="Alice")

    # Another writer claims the name between the lookup and the insert
    async def never_taken(session, name):
        return False

    monkeypatch.setattr(room_store, "_name_taken", never_taken)
    room = await dao.create_room(host_user_id="u2", host_name="Bob")

    assert room.name == "cccccc"
    stored = await dao.get_room("aaaaaa")
    assert stored.host_user_id == "u1"


async def test_gives_up_after_repeated_clashes(db, monkeypatch):
    monkeypatch.setattr(room_store, "generate_room_name", lambda: "aaaaaa")
    dao = RoomDAO()
    await dao.create_room(host_user_id="u1", host_name="Alice")

    with pytest.raises(RuntimeError):
        await dao.create_room(host_user_id="u2", host_name="Bob")
