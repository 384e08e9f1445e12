"""Database layer - engine, base classes, money helpers."""

from cashbook_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from cashbook_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from cashbook_kernel.db.types import ZERO, to_money

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "ZERO",
    "to_money",
]
