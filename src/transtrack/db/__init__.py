"""Database module."""

from .session import (
    Base,
    make_engine,
    make_session_maker,
    init_db,
    close_db,
)
from .types import UTCDateTime

__all__ = [
    "Base",
    "make_engine",
    "make_session_maker",
    "init_db",
    "close_db",
    "UTCDateTime",
]
