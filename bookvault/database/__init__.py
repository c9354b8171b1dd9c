"""SQLAlchemy database layer for BookVault.

Provides the shared engine, session factory, and declarative base used by
the services. Any SQLAlchemy URL works; SQLite is the default.
"""

from .base import Base
from .upsert import insert_if_absent
from .engine import (
    build_engine,
    build_session_factory,
    dispose_engine,
    get_db_session,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "get_session_factory",
    "init_db",
    "insert_if_absent",
]
