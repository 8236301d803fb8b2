"""Storage protocol definition for shapeboard-py."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shapeboard_py.core.models import EditorState


@runtime_checkable
class StateStorageProtocol(Protocol):
    """Protocol defining the persistence sink for board state.

    Backends store one state document per board. They never raise on read:
    a missing, unreadable or corrupt document is reported as no saved state,
    so the editor can always start from a fresh state.
    """

    async def load(self, board_id: str) -> EditorState | None:
        """Load the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            The saved state, or None if there is none or it cannot be read.
        """
        ...

    async def save(self, board_id: str, state: EditorState) -> None:
        """Save the state of a board, at rest.

        Args:
            board_id: The board identifier.
            state: The state to save. Gesture data is not stored.
        """
        ...

    async def clear(self, board_id: str) -> bool:
        """Delete the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            True if a saved state was deleted, False if there was none.
        """
        ...

    async def size_in_bytes(self, board_id: str) -> int:
        """Return the size of the saved document, or 0 if there is none.

        Args:
            board_id: The board identifier.
        """
        ...
