from .core import dispose_engine, get_async_db, get_engine, init_db
from .models import Base, Room, User

__all__ = [
    "Base",
    "Room",
    "User",
    "dispose_engine",
    "get_async_db",
    "get_engine",
    "init_db",
]
