"""Litestar controllers for shapeboard-py API endpoints."""

from __future__ import annotations

from typing import Any, ClassVar

from litestar import Controller, delete, get, put
from litestar.exceptions import ValidationException
from litestar.status_codes import HTTP_204_NO_CONTENT

from shapeboard_py.realtime.manager import ConnectionManager
from shapeboard_py.services.board import BoardService
from shapeboard_py.storage.codec import shape_to_document, state_from_document, state_to_document
from shapeboard_py.storage.file import BOARD_ID_PATTERN


def _check_board_id(board_id: str) -> None:
    if not BOARD_ID_PATTERN.match(board_id):
        msg = f"Invalid board ID: {board_id!r}"
        raise ValidationException(msg)


class BoardController(Controller):
    """Controller for board state operations.

    Boards are edited over WebSocket; these endpoints read, import and clear
    the saved state of a board.
    """

    path = "/boards"
    tags: ClassVar[list[str]] = ["Boards"]

    @get("/{board_id:str}")
    async def get_board(self, board_id: str, service: BoardService) -> dict[str, Any]:
        """Get the saved state document of a board.

        A board without saved state returns an empty initial state.

        Args:
            board_id: The board identifier.
            service: The board service instance (injected).

        Returns:
            The state document.
        """
        _check_board_id(board_id)
        return state_to_document(await service.load_state(board_id))

    @get("/{board_id:str}/stats")
    async def get_stats(self, board_id: str, service: BoardService) -> dict[str, Any]:
        """Get summary statistics for a board.

        Args:
            board_id: The board identifier.
            service: The board service instance (injected).
        """
        _check_board_id(board_id)
        stats = await service.get_stats(board_id)
        return {
            "board_id": stats.board_id,
            "shape_count": stats.shape_count,
            "saved_bytes": stats.saved_bytes,
            "open_tabs": stats.open_sessions,
            "has_saved_state": stats.has_saved_state,
        }

    @get("/{board_id:str}/shapes/{shape_id:str}")
    async def get_shape(self, board_id: str, shape_id: str, service: BoardService) -> dict[str, Any]:
        """Get one shape of a board.

        Args:
            board_id: The board identifier.
            shape_id: The shape identifier.
            service: The board service instance (injected).

        Raises:
            ShapeNotFoundError: If the board has no such shape.
        """
        _check_board_id(board_id)
        return shape_to_document(await service.get_shape(board_id, shape_id))

    @put("/{board_id:str}")
    async def import_board(
        self,
        board_id: str,
        data: dict[str, Any],
        service: BoardService,
        connection_manager: ConnectionManager,
    ) -> dict[str, Any]:
        """Replace the state of a board with an imported document.

        Every open tab of the board switches to the imported state.

        Args:
            board_id: The board identifier.
            data: The state document.
            service: The board service instance (injected).
            connection_manager: The connection manager (injected).

        Returns:
            The imported state document.

        Raises:
            StateDecodeError: If the document is malformed.
        """
        _check_board_id(board_id)
        state = await service.import_state(board_id, state_from_document(data))
        await connection_manager.render_dirty(board_id)
        return state_to_document(state)

    @delete("/{board_id:str}", status_code=HTTP_204_NO_CONTENT)
    async def clear_board(
        self,
        board_id: str,
        service: BoardService,
        connection_manager: ConnectionManager,
    ) -> None:
        """Delete the saved state of a board.

        Args:
            board_id: The board identifier.
            service: The board service instance (injected).
            connection_manager: The connection manager (injected).

        Raises:
            BoardNotFoundError: If the board has no saved state.
        """
        _check_board_id(board_id)
        await service.clear_board(board_id)
        await connection_manager.render_dirty(board_id)
