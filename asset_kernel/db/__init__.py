"""Database layer - engine, base classes, types, and immutability."""

from asset_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from asset_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from asset_kernel.db.types import UTCDateTime

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "UTCDateTime",
]
