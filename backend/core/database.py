"""
Dependency injection definitions for yielding the JSON store to FastAPI routers.
"""

from collections.abc import Generator

import core.config as config
from core.store import JsonStore

_store: JsonStore | None = None


def get_store() -> JsonStore:
    """Returns the process-wide store bound to ``config.DB_FILE``, loading it on first use."""
    global _store
    if _store is None or _store.path != config.DB_FILE:
        _store = JsonStore(config.DB_FILE)
        _store.load()
    return _store


def reset_store() -> None:
    """Drops the cached store so the next access reloads it from disk."""
    global _store
    _store = None


def get_db() -> Generator[JsonStore, None, None]:
    """
    FastAPI Dependency: Yields the shared JSON store for the request scope.
    Every write made through it has already been flushed to disk.
    """
    yield get_store()
