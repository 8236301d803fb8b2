"""Board service providing editing sessions and persistence for boards."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import uuid4

import structlog

from shapeboard_py.core.history import DEFAULT_MAX_HISTORY, HistoryManager
from shapeboard_py.core.interaction import InteractionStateMachine
from shapeboard_py.core.scene import create_initial_state, get_shape_by_id
from shapeboard_py.core.types import InteractionMode, Modifier
from shapeboard_py.exceptions import BoardNotFoundError, ShapeNotFoundError
from shapeboard_py.storage.codec import dumps_state, state_to_document

if TYPE_CHECKING:
    from collections.abc import Callable

    from shapeboard_py.core.models import EditorState, Rectangle
    from shapeboard_py.storage.base import StateStorageProtocol

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EditorSession:
    """One editing session of a board, typically one browser tab.

    The session owns the history and the interaction state machine. Every
    change, committed or transient, marks the session dirty; the render sink
    consumes the flag so several changes between two renders coalesce into one.

    Attributes:
        session_id: Unique identifier of the session.
        board_id: The board being edited.
        history: History manager holding the session state.
        machine: State machine driving the session from input events.
        revision: Number of committed changes seen by this session.
    """

    def __init__(
        self,
        board_id: str,
        state: EditorState,
        *,
        session_id: str | None = None,
        max_history: int | None = DEFAULT_MAX_HISTORY,
        pan_modifier: Modifier = Modifier.CTRL,
    ) -> None:
        """Initialize the session.

        Args:
            board_id: The board being edited.
            state: Initial editor state.
            session_id: Identifier to use; generated if omitted.
            max_history: Maximum number of undo steps.
            pan_modifier: Modifier that turns a left-button drag into a pan.
        """
        self.session_id = session_id or uuid4().hex
        self.board_id = board_id
        self.history = HistoryManager(state.at_rest(), max_history)
        self.machine = InteractionStateMachine(self.history, pan_modifier=pan_modifier, on_change=self._mark_dirty)
        self.revision = 0
        # A new session has never been rendered.
        self._dirty = True

    @property
    def state(self) -> EditorState:
        """The live editor state."""
        return self.machine.state

    @property
    def is_dirty(self) -> bool:
        """Whether the state changed since the last render."""
        return self._dirty

    @property
    def is_idle(self) -> bool:
        """Whether no gesture is in progress."""
        return self.machine.mode is InteractionMode.IDLE

    def consume_dirty(self) -> bool:
        """Return the dirty flag and reset it."""
        dirty, self._dirty = self._dirty, False
        return dirty

    def snapshot(self) -> dict[str, Any]:
        """Build the render payload for the current state."""
        state = self.state
        document = state_to_document(state)
        document["resizing"] = state.resizing.shape_id if state.resizing else None
        document["dragging"] = state.dragging.shape_id if state.dragging else None
        return {
            "state": document,
            "mode": self.machine.mode.value,
            "cursor": self.machine.cursor.value,
            "can_undo": self.history.can_undo(),
            "can_redo": self.history.can_redo(),
            "revision": self.revision,
        }

    def invalidate(self) -> None:
        """Force the next render, e.g. after a tab rejoins."""
        self._dirty = True

    def _mark_dirty(self, _state: EditorState) -> None:
        self._dirty = True


@dataclass
class BoardStats:
    """Summary of a board."""

    board_id: str
    shape_count: int
    saved_bytes: int
    open_sessions: int
    has_saved_state: bool


class BoardService:
    """Service for opening, editing and persisting boards.

    Each board may be open in several sessions at once. After an input is
    handled, an idle session's state is saved and pushed to the board's other
    sessions as a full replacement; the last write wins.

    Attributes:
        max_history: Maximum number of undo steps per session.
        pan_modifier: Modifier that turns a left-button drag into a pan.
    """

    def __init__(
        self,
        storage: StateStorageProtocol,
        *,
        max_history: int | None = DEFAULT_MAX_HISTORY,
        pan_modifier: Modifier = Modifier.CTRL,
    ) -> None:
        """Initialize the board service.

        Args:
            storage: Storage backend implementing StateStorageProtocol.
            max_history: Maximum number of undo steps per session.
            pan_modifier: Modifier that turns a left-button drag into a pan.
        """
        self._storage = storage
        self.max_history = max_history
        self.pan_modifier = pan_modifier
        self._sessions: dict[str, dict[str, EditorSession]] = {}
        self._saved: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # Board state

    async def load_state(self, board_id: str) -> EditorState:
        """Load the saved state of a board, or a fresh state if there is none.

        Args:
            board_id: The board identifier.

        Returns:
            The saved state or an empty initial state.
        """
        state = await self._storage.load(board_id)
        if state is None:
            logger.debug("No saved state, starting fresh", board_id=board_id)
            return create_initial_state()
        return state

    async def get_shape(self, board_id: str, shape_id: str) -> Rectangle:
        """Get a shape from the saved state of a board.

        Args:
            board_id: The board identifier.
            shape_id: The shape identifier.

        Returns:
            The shape.

        Raises:
            ShapeNotFoundError: If the board has no shape with that ID.
        """
        shape = get_shape_by_id(await self.load_state(board_id), shape_id)
        if shape is None:
            raise ShapeNotFoundError(shape_id)
        return shape

    async def import_state(self, board_id: str, state: EditorState) -> EditorState:
        """Save a state for a board and push it to every open session.

        Args:
            board_id: The board identifier.
            state: The state to import.

        Returns:
            The imported state, at rest.
        """
        state = state.at_rest()
        async with self._lock(board_id):
            await self._save(board_id, state)
            for session in self.sessions(board_id):
                _replace(session, state)
        logger.info("State imported", board_id=board_id, shape_count=len(state.shapes))
        return state

    async def clear_board(self, board_id: str) -> None:
        """Delete the saved state of a board and reset its open sessions.

        Args:
            board_id: The board identifier.

        Raises:
            BoardNotFoundError: If the board has no saved state.
        """
        async with self._lock(board_id):
            if not await self._storage.clear(board_id):
                raise BoardNotFoundError(board_id)
            fresh = create_initial_state()
            if board_id in self._sessions:
                self._saved[board_id] = dumps_state(fresh)
            for session in self.sessions(board_id):
                _replace(session, fresh)
        logger.info("Board cleared", board_id=board_id)

    async def get_stats(self, board_id: str) -> BoardStats:
        """Get summary statistics for a board.

        Args:
            board_id: The board identifier.
        """
        saved = await self._storage.load(board_id)
        return BoardStats(
            board_id=board_id,
            shape_count=len(saved.shapes) if saved else 0,
            saved_bytes=await self._storage.size_in_bytes(board_id),
            open_sessions=len(self.sessions(board_id)),
            has_saved_state=saved is not None,
        )

    # Sessions

    async def open_session(self, board_id: str, session_id: str | None = None) -> EditorSession:
        """Open a new editing session on a board.

        Args:
            board_id: The board identifier.
            session_id: Identifier to use; generated if omitted.

        Returns:
            The new session, starting from the board's saved state.
        """
        state = await self.load_state(board_id)
        session = EditorSession(
            board_id,
            state,
            session_id=session_id,
            max_history=self.max_history,
            pan_modifier=self.pan_modifier,
        )
        if board_id not in self._sessions:
            self._saved[board_id] = dumps_state(state)
        self._sessions.setdefault(board_id, {})[session.session_id] = session
        logger.info(
            "Session opened",
            board_id=board_id,
            session_id=session.session_id,
            open_sessions=len(self._sessions[board_id]),
        )
        return session

    async def close_session(self, session: EditorSession) -> None:
        """Close a session, saving its state if a gesture was left open.

        Args:
            session: The session to close.
        """
        if not session.is_idle:
            session.machine.pointer_up()
            await self.persist(session)
        board_sessions = self._sessions.get(session.board_id, {})
        board_sessions.pop(session.session_id, None)
        if not board_sessions:
            self._sessions.pop(session.board_id, None)
            self._saved.pop(session.board_id, None)
            self._locks.pop(session.board_id, None)
        logger.info("Session closed", board_id=session.board_id, session_id=session.session_id)

    def sessions(self, board_id: str) -> list[EditorSession]:
        """List the open sessions of a board."""
        return list(self._sessions.get(board_id, {}).values())

    def get_session(self, board_id: str, session_id: str) -> EditorSession | None:
        """Get an open session by ID."""
        return self._sessions.get(board_id, {}).get(session_id)

    @property
    def active_boards(self) -> int:
        """Number of boards with at least one open session."""
        return len(self._sessions)

    # Input handling

    async def handle(self, session: EditorSession, action: Callable[[InteractionStateMachine], T]) -> T:
        """Apply one input to a session, then persist and sync.

        Args:
            session: The session receiving the input.
            action: Callable applying the input to the session's state machine.

        Returns:
            Whatever the action returned.
        """
        committed = session.history.state
        result = action(session.machine)
        if session.history.state is not committed:
            session.revision += 1
        await self.persist(session)
        return result

    async def persist(self, session: EditorSession) -> bool:
        """Save an idle session's state and push it to the board's other sessions.

        Nothing happens while a gesture is in progress or when the state at
        rest matches what was last saved.

        Args:
            session: The session whose state to save.

        Returns:
            True if the state was saved.
        """
        if not session.is_idle:
            return False
        state = session.state.at_rest()
        async with self._lock(session.board_id):
            if self._saved.get(session.board_id) == dumps_state(state):
                return False
            await self._save(session.board_id, state)
            for other in self.sessions(session.board_id):
                if other is not session:
                    _replace(other, state)
        return True

    async def _save(self, board_id: str, state: EditorState) -> None:
        await self._storage.save(board_id, state)
        if board_id in self._sessions:
            self._saved[board_id] = dumps_state(state)
        logger.debug("State saved", board_id=board_id, shape_count=len(state.shapes))

    def _lock(self, board_id: str) -> asyncio.Lock:
        return self._locks.setdefault(board_id, asyncio.Lock())


def _replace(session: EditorSession, state: EditorState) -> None:
    session.machine.replace_state(state)
    session.revision += 1
