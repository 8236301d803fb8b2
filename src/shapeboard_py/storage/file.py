"""File-based storage implementation for shapeboard-py.

Each board is saved as one JSON document named ``<board_id>.json`` inside a
state directory. Writes go to a temporary file first and are then renamed
over the document, so a crash never leaves a half-written state behind.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shapeboard_py.exceptions import StateDecodeError, StorageError
from shapeboard_py.storage.codec import dumps_state, loads_state

if TYPE_CHECKING:
    from shapeboard_py.core.models import EditorState

logger = structlog.get_logger(__name__)

BOARD_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


class FileStateStorage:
    """Board state storage backed by JSON files on disk.

    Attributes:
        directory: Directory holding one document per board.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        """Initialize the storage.

        Args:
            directory: Directory for state documents. Created on first save.
        """
        self.directory = Path(directory)
        self._lock = asyncio.Lock()

    def path_for(self, board_id: str) -> Path:
        """Return the document path of a board.

        Raises:
            StorageError: If the board ID is not safe to use as a file name.
        """
        if not BOARD_ID_PATTERN.match(board_id):
            msg = f"Invalid board ID: {board_id!r}"
            raise StorageError(msg)
        return self.directory / f"{board_id}.json"

    def read_document(self, board_id: str) -> str | None:
        """Read the raw document of a board synchronously.

        Returns:
            The document text, or None if the board has no saved state.

        Raises:
            StorageError: If the document exists but cannot be read.
        """
        path = self.path_for(board_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read {path}: {e}"
            raise StorageError(msg) from e

    def write_document(self, board_id: str, raw: str) -> None:
        """Write the raw document of a board synchronously.

        Raises:
            StorageError: If the document cannot be written.
        """
        path = self.path_for(board_id)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(raw, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            msg = f"Cannot write {path}: {e}"
            raise StorageError(msg) from e

    def delete_document(self, board_id: str) -> bool:
        """Delete the document of a board synchronously.

        Returns:
            True if a document was deleted, False if there was none.

        Raises:
            StorageError: If the document cannot be deleted.
        """
        path = self.path_for(board_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            msg = f"Cannot delete {path}: {e}"
            raise StorageError(msg) from e
        return True

    async def load(self, board_id: str) -> EditorState | None:
        """Load the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            The saved state, or None if there is none or it cannot be read.
        """
        try:
            async with self._lock:
                raw = await asyncio.to_thread(self.read_document, board_id)
            return loads_state(raw) if raw is not None else None
        except (StorageError, StateDecodeError) as e:
            logger.warning("Failed to load saved state", board_id=board_id, error=str(e))
            return None

    async def save(self, board_id: str, state: EditorState) -> None:
        """Save the state of a board. Failures are logged, not raised.

        Args:
            board_id: The board identifier.
            state: The state to save.
        """
        raw = dumps_state(state)
        try:
            async with self._lock:
                await asyncio.to_thread(self.write_document, board_id, raw)
        except StorageError as e:
            logger.error("Failed to save state", board_id=board_id, error=str(e))

    async def clear(self, board_id: str) -> bool:
        """Delete the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            True if a saved state was deleted, False if there was none.
        """
        try:
            async with self._lock:
                return await asyncio.to_thread(self.delete_document, board_id)
        except StorageError as e:
            logger.error("Failed to clear saved state", board_id=board_id, error=str(e))
            return False

    async def size_in_bytes(self, board_id: str) -> int:
        """Return the size of the saved document in bytes.

        Args:
            board_id: The board identifier.
        """
        try:
            return self.path_for(board_id).stat().st_size
        except (StorageError, OSError):
            return 0

    def list_boards(self) -> list[str]:
        """List the IDs of all boards with a saved document, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json") if BOARD_ID_PATTERN.match(p.stem))
