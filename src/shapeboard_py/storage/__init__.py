"""Storage backends for shapeboard-py."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shapeboard_py.storage.base import StateStorageProtocol
from shapeboard_py.storage.codec import dumps_state, loads_state, state_from_document, state_to_document
from shapeboard_py.storage.file import FileStateStorage
from shapeboard_py.storage.memory import InMemoryStateStorage

if TYPE_CHECKING:
    from shapeboard_py.storage.db import DatabaseStateStorage

__all__ = [
    "DatabaseStateStorage",
    "FileStateStorage",
    "InMemoryStateStorage",
    "StateStorageProtocol",
    "dumps_state",
    "loads_state",
    "state_from_document",
    "state_to_document",
]


def __getattr__(name: str) -> object:
    """Lazy import DatabaseStateStorage to avoid import errors without db extra."""
    if name == "DatabaseStateStorage":
        from shapeboard_py.storage.db import DatabaseStateStorage

        return DatabaseStateStorage
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
