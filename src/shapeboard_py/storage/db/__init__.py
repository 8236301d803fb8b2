"""Database storage backend for shapeboard-py.

This module provides SQLAlchemy-based persistent storage.
Requires the `db` optional dependency: `pip install shapeboard-py[db]`
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapeboard_py.storage.db.models import BoardStateModel
    from shapeboard_py.storage.db.setup import create_database_engine, create_tables, get_database_url
    from shapeboard_py.storage.db.storage import DatabaseStateStorage

__all__ = ["BoardStateModel", "DatabaseStateStorage", "create_database_engine", "create_tables", "get_database_url"]


def __getattr__(name: str) -> object:
    """Lazy import database components to avoid import errors without db extra."""
    if name == "BoardStateModel":
        from shapeboard_py.storage.db.models import BoardStateModel

        return BoardStateModel
    if name == "DatabaseStateStorage":
        from shapeboard_py.storage.db.storage import DatabaseStateStorage

        return DatabaseStateStorage
    if name in ("create_database_engine", "create_tables", "get_database_url"):
        from shapeboard_py.storage.db import setup

        return getattr(setup, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
