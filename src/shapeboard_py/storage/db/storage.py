"""Database storage implementation for shapeboard-py."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from shapeboard_py.exceptions import StateDecodeError
from shapeboard_py.storage.codec import dumps_state, loads_state
from shapeboard_py.storage.db.models import BoardStateModel
from shapeboard_py.storage.db.setup import create_session_factory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    from shapeboard_py.core.models import EditorState

logger = structlog.get_logger(__name__)


class DatabaseStateStorage:
    """Async board state storage using SQLAlchemy.

    Each call runs in its own session and transaction, so the storage can be
    shared by long-lived WebSocket sessions.

    Attributes:
        _session_maker: Factory for async sessions.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the storage.

        Args:
            session_maker: Factory for async sessions.
        """
        self._session_maker = session_maker

    async def load(self, board_id: str) -> EditorState | None:
        """Load the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            The saved state, or None if there is none or it cannot be read.
        """
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(BoardStateModel.document).where(BoardStateModel.board_id == board_id)
                )
                raw = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning("Failed to load saved state", board_id=board_id, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return loads_state(raw)
        except StateDecodeError as e:
            logger.warning("Discarding corrupt saved state", board_id=board_id, error=str(e))
            return None

    async def save(self, board_id: str, state: EditorState) -> None:
        """Insert or update the saved state of a board. Failures are logged, not raised.

        Args:
            board_id: The board identifier.
            state: The state to save.
        """
        raw = dumps_state(state)
        try:
            async with self._session_maker() as session, session.begin():
                result = await session.execute(select(BoardStateModel).where(BoardStateModel.board_id == board_id))
                model = result.scalar_one_or_none()
                if model is None:
                    session.add(BoardStateModel(board_id=board_id, document=raw))
                else:
                    model.document = raw
                    model.updated_at = datetime.now(UTC)
        except SQLAlchemyError as e:
            logger.error("Failed to save state", board_id=board_id, error=str(e))

    async def clear(self, board_id: str) -> bool:
        """Delete the saved state of a board.

        Args:
            board_id: The board identifier.

        Returns:
            True if a saved state was deleted, False if there was none.
        """
        try:
            async with self._session_maker() as session, session.begin():
                result = await session.execute(delete(BoardStateModel).where(BoardStateModel.board_id == board_id))
        except SQLAlchemyError as e:
            logger.error("Failed to clear saved state", board_id=board_id, error=str(e))
            return False
        return result.rowcount > 0

    async def size_in_bytes(self, board_id: str) -> int:
        """Return the size of the saved document in bytes.

        Args:
            board_id: The board identifier.
        """
        try:
            async with self._session_maker() as session:
                result = await session.execute(
                    select(BoardStateModel.document).where(BoardStateModel.board_id == board_id)
                )
                raw = result.scalar_one_or_none()
        except SQLAlchemyError:
            return 0
        return len(raw.encode()) if raw is not None else 0

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> DatabaseStateStorage:
        """Create a storage using sessions bound to an engine.

        Args:
            engine: The database engine. Tables must exist, see ``create_tables``.
        """
        return cls(create_session_factory(engine))
