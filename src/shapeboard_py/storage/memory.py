"""In-memory storage implementation for shapeboard-py."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from shapeboard_py.exceptions import StateDecodeError
from shapeboard_py.storage.codec import dumps_state, loads_state

if TYPE_CHECKING:
    from shapeboard_py.core.models import EditorState

logger = structlog.get_logger(__name__)


class InMemoryStateStorage:
    """In-memory board state storage.

    States are kept as serialized documents, exactly as a durable backend
    would hold them, so loading always yields an independent copy.

    Note:
        All data is lost when the application stops. This storage is suitable for
        development, testing, or ephemeral sessions.

    Attributes:
        _documents: Internal dictionary mapping board IDs to JSON documents.
        _lock: Asyncio lock guarding the dictionary.
    """

    def __init__(self) -> None:
        """Initialize the storage with no saved boards."""
        self._documents: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def load(self, board_id: str) -> EditorState | None:
        """Load the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            The saved state, or None if there is none or it is corrupt.
        """
        async with self._lock:
            raw = self._documents.get(board_id)
        if raw is None:
            return None
        try:
            return loads_state(raw)
        except StateDecodeError as e:
            logger.warning("Discarding corrupt saved state", board_id=board_id, error=str(e))
            return None

    async def save(self, board_id: str, state: EditorState) -> None:
        """Save the state of a board.

        Args:
            board_id: The board identifier.
            state: The state to save.
        """
        raw = dumps_state(state)
        async with self._lock:
            self._documents[board_id] = raw

    async def clear(self, board_id: str) -> bool:
        """Delete the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            True if a saved state was deleted, False if there was none.
        """
        async with self._lock:
            return self._documents.pop(board_id, None) is not None

    async def size_in_bytes(self, board_id: str) -> int:
        """Return the size of the saved document in bytes.

        Args:
            board_id: The board identifier.
        """
        async with self._lock:
            raw = self._documents.get(board_id)
        return len(raw.encode()) if raw is not None else 0

    async def put_raw(self, board_id: str, raw: str) -> None:
        """Store a raw document as-is, bypassing serialization.

        Args:
            board_id: The board identifier.
            raw: The raw document text.
        """
        async with self._lock:
            self._documents[board_id] = raw
