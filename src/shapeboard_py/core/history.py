"""Linear undo/redo history over committed editor states.

The history keeps whole :class:`EditorState` snapshots rather than commands.
Committing a new state discards the redo branch; there is no branching
history.

Two kinds of update are distinguished:

- committed updates (``push``) become one undo step each;
- transient updates (``update_present``) replace the live state without
  touching the stacks. Viewport changes and in-progress gesture frames go
  through this path so a single drag stays a single undo step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shapeboard_py.core.models import HistoryState

if TYPE_CHECKING:
    from shapeboard_py.core.models import EditorState

logger = structlog.get_logger(__name__)

DEFAULT_MAX_HISTORY = 100


def create_history(initial_state: EditorState) -> HistoryState:
    """Create a history with no past or future."""
    return HistoryState(present=initial_state.at_rest())


def push_history(history: HistoryState, new_state: EditorState, max_history: int | None = None) -> HistoryState:
    """Commit a new present state.

    The old present moves onto the past stack and the future is cleared.

    Args:
        history: The current history.
        new_state: The state to commit.
        max_history: Maximum number of past entries to keep, or None for no limit.

    Returns:
        The updated history.
    """
    past = (*history.past, history.present.at_rest())
    if max_history is not None and len(past) > max_history:
        past = past[len(past) - max_history :]
    return HistoryState(past=past, present=new_state.at_rest(), future=())


def undo(history: HistoryState) -> HistoryState | None:
    """Step back one committed state.

    Returns:
        The updated history, or None if there is nothing to undo.
    """
    if not history.past:
        return None
    return HistoryState(
        past=history.past[:-1],
        present=history.past[-1],
        future=(history.present.at_rest(), *history.future),
    )


def redo(history: HistoryState) -> HistoryState | None:
    """Step forward one undone state.

    Returns:
        The updated history, or None if there is nothing to redo.
    """
    if not history.future:
        return None
    return HistoryState(
        past=(*history.past, history.present.at_rest()),
        present=history.future[0],
        future=history.future[1:],
    )


def can_undo(history: HistoryState) -> bool:
    """Check if there are states to undo."""
    return len(history.past) > 0


def can_redo(history: HistoryState) -> bool:
    """Check if there are states to redo."""
    return len(history.future) > 0


def get_history_stats(history: HistoryState) -> dict[str, int]:
    """Return the sizes of the past and future stacks."""
    return {"past_size": len(history.past), "future_size": len(history.future)}


class HistoryManager:
    """Owns the history of one editing session.

    The manager keeps two things apart: the committed history, whose present
    is the last committed snapshot, and the live state, which transient
    updates replace freely. A commit records the last committed snapshot as
    the undo step, so undoing a gesture restores the geometry from before the
    gesture rather than from its last frame.

    Attributes:
        max_history: Maximum number of undo steps to keep, or None for no limit.
    """

    def __init__(self, initial_state: EditorState, max_history: int | None = DEFAULT_MAX_HISTORY) -> None:
        """Initialize the history.

        Args:
            initial_state: The first present state.
            max_history: Maximum number of undo steps to keep.
        """
        self.max_history = max_history
        self._history = create_history(initial_state)
        self._live = self._history.present

    @property
    def state(self) -> HistoryState:
        """The committed history. Its present is the last committed snapshot."""
        return self._history

    @property
    def present(self) -> EditorState:
        """The live editor state, including transient updates."""
        return self._live

    def push(self, new_state: EditorState) -> None:
        """Commit a new state as one undo step.

        Args:
            new_state: The state to commit. Transient gesture data is dropped.
        """
        self._history = push_history(self._history, new_state, self.max_history)
        self._live = self._history.present
        logger.debug("History commit", undo_count=self.undo_count)

    def update_present(self, new_state: EditorState) -> None:
        """Replace the live state without recording an undo step.

        Args:
            new_state: The new live state.
        """
        self._live = new_state

    def undo(self) -> bool:
        """Undo the last committed step.

        Returns:
            True if a step was undone, False if there was nothing to undo.
        """
        result = undo(self._history)
        if result is None:
            return False
        self._history = result
        self._live = result.present
        logger.debug("History undo", undo_count=self.undo_count, redo_count=self.redo_count)
        return True

    def redo(self) -> bool:
        """Redo the last undone step.

        Returns:
            True if a step was redone, False if there was nothing to redo.
        """
        result = redo(self._history)
        if result is None:
            return False
        self._history = result
        self._live = result.present
        logger.debug("History redo", undo_count=self.undo_count, redo_count=self.redo_count)
        return True

    def reset(self, state: EditorState) -> None:
        """Start a fresh history from the given state."""
        self._history = create_history(state)
        self._live = self._history.present

    def clear(self) -> None:
        """Drop all undo and redo steps, keeping the live state."""
        self._history = create_history(self._live)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return can_undo(self._history)

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return can_redo(self._history)

    @property
    def undo_count(self) -> int:
        """Number of steps that can be undone."""
        return len(self._history.past)

    @property
    def redo_count(self) -> int:
        """Number of steps that can be redone."""
        return len(self._history.future)
