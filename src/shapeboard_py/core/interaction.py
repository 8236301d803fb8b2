"""Pointer-driven interaction state machine.

The machine turns pointer and keyboard input into editor state changes. It
holds exactly one gesture at a time::

    Idle | Panning | DraggingState | ResizingState

Frames inside a gesture are transient updates of the live state; releasing
the pointer after a drag or resize commits the result to history as a single
step. Panning and zooming are never committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import structlog

from shapeboard_py.core.handles import apply_resize, get_cursor_for_handle, hit_test_handle
from shapeboard_py.core.models import DraggingState, EditorState, Point, ResizingState
from shapeboard_py.core.scene import (
    add_shape,
    contains_point,
    create_rectangle,
    get_selected_shape,
    get_shape_by_id,
    hit_test_shapes,
    remove_shape,
    select_shape,
    set_transform,
    update_shape,
)
from shapeboard_py.core.shortcuts import is_cancel_key, is_delete_key, is_redo_shortcut, is_undo_shortcut
from shapeboard_py.core.transform import apply_pan, apply_zoom, screen_to_world, wheel_to_zoom_delta
from shapeboard_py.core.types import Cursor, InteractionMode, Modifier, PointerButton

if TYPE_CHECKING:
    from collections.abc import Callable

    from shapeboard_py.core.history import HistoryManager
    from shapeboard_py.core.models import Rectangle
    from shapeboard_py.core.shortcuts import KeyEvent

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in screen coordinates.

    Attributes:
        x: Horizontal screen position in pixels.
        y: Vertical screen position in pixels.
        button: The button involved, for button-down events.
        modifiers: Keyboard modifiers held during the event.
    """

    x: float
    y: float
    button: PointerButton = PointerButton.LEFT
    modifiers: frozenset[Modifier] = field(default_factory=frozenset)

    @property
    def screen_pos(self) -> Point:
        """The event position as a point."""
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""


@dataclass(frozen=True)
class Panning:
    """The viewport is being dragged.

    Attributes:
        start_screen_pos: Pointer position when the gesture began.
        last_screen_pos: Pointer position at the previous frame.
    """

    start_screen_pos: Point
    last_screen_pos: Point


Gesture = Idle | Panning | DraggingState | ResizingState

IDLE = Idle()


class InteractionStateMachine:
    """Drives one editing session from pointer and keyboard input.

    The machine reads and writes editor state exclusively through a
    :class:`HistoryManager`. Every change, committed or transient, is reported
    to the ``on_change`` callback so a renderer can mark itself dirty.

    Attributes:
        pan_modifier: Modifier that turns a left-button drag into a pan.
    """

    def __init__(
        self,
        history: HistoryManager,
        *,
        pan_modifier: Modifier = Modifier.CTRL,
        on_change: Callable[[EditorState], None] | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            history: History manager holding the session state.
            pan_modifier: Modifier that turns a left-button drag into a pan.
            on_change: Callback invoked with the live state after every change.
        """
        self.pan_modifier = pan_modifier
        self._history = history
        self._on_change = on_change
        self._gesture: Gesture = IDLE
        self._hover_cursor = Cursor.GRAB

    # State access

    @property
    def state(self) -> EditorState:
        """The live editor state."""
        return self._history.present

    @property
    def history(self) -> HistoryManager:
        """The history manager backing this session."""
        return self._history

    @property
    def gesture(self) -> Gesture:
        """The gesture in progress."""
        return self._gesture

    @property
    def mode(self) -> InteractionMode:
        """The current interaction mode."""
        match self._gesture:
            case Panning():
                return InteractionMode.PANNING
            case DraggingState():
                return InteractionMode.DRAGGING
            case ResizingState():
                return InteractionMode.RESIZING
            case _:
                return InteractionMode.IDLE

    @property
    def cursor(self) -> Cursor:
        """The cursor icon the canvas should display."""
        match self._gesture:
            case Panning():
                return Cursor.GRABBING
            case DraggingState():
                return Cursor.MOVE
            case ResizingState(handle=handle):
                return get_cursor_for_handle(handle)
            case _:
                return self._hover_cursor

    # Pointer input

    def pointer_down(self, event: PointerEvent) -> None:
        """Start a gesture.

        Middle button, or left button with the pan modifier, starts panning.
        A left press on a handle of the selected shape starts a resize; on a
        shape it selects the shape and starts a move; on empty space it clears
        the selection.

        Args:
            event: The button-down event.
        """
        if self._gesture != IDLE:
            return

        if event.button is PointerButton.MIDDLE or (
            event.button is PointerButton.LEFT and self.pan_modifier in event.modifiers
        ):
            self._gesture = Panning(start_screen_pos=event.screen_pos, last_screen_pos=event.screen_pos)
            logger.debug("Gesture started", mode=InteractionMode.PANNING.value)
            return

        if event.button is not PointerButton.LEFT:
            return

        state = self.state
        world_pos = screen_to_world(event.screen_pos, state.transform)

        selected = get_selected_shape(state)
        if selected is not None:
            handle = hit_test_handle(world_pos, selected, state.transform)
            if handle is not None:
                resizing = ResizingState(
                    shape_id=selected.id,
                    handle=handle,
                    start_world_pos=world_pos,
                    start_shape=selected,
                )
                self._begin(resizing, replace(state, resizing=resizing, dragging=None))
                return

        hit = hit_test_shapes(state, world_pos)
        if hit is None:
            self._update(select_shape(state, None))
            return

        dragging = DraggingState(
            shape_id=hit.id,
            start_world_pos=world_pos,
            start_shape_pos=Point(hit.x, hit.y),
        )
        self._begin(dragging, replace(select_shape(state, hit.id), dragging=dragging, resizing=None))

    def pointer_move(self, event: PointerEvent) -> None:
        """Advance the active gesture, or refresh the hover cursor when idle.

        Drag and resize frames are computed from the gesture-start snapshot
        plus the total pointer delta.

        Args:
            event: The pointer-move event.
        """
        state = self.state
        match self._gesture:
            case ResizingState() as resizing:
                if self._target_missing(resizing.shape_id):
                    return
                world_pos = screen_to_world(event.screen_pos, state.transform)
                resized = apply_resize(resizing.start_shape, resizing.handle, world_pos, resizing.start_world_pos)
                self._update(
                    update_shape(
                        state,
                        resizing.shape_id,
                        x=resized.x,
                        y=resized.y,
                        width=resized.width,
                        height=resized.height,
                    )
                )
            case DraggingState() as dragging:
                if self._target_missing(dragging.shape_id):
                    return
                world_pos = screen_to_world(event.screen_pos, state.transform)
                dx = world_pos.x - dragging.start_world_pos.x
                dy = world_pos.y - dragging.start_world_pos.y
                self._update(
                    update_shape(
                        state,
                        dragging.shape_id,
                        x=dragging.start_shape_pos.x + dx,
                        y=dragging.start_shape_pos.y + dy,
                    )
                )
            case Panning() as panning:
                delta = Point(event.x - panning.last_screen_pos.x, event.y - panning.last_screen_pos.y)
                self._gesture = replace(panning, last_screen_pos=event.screen_pos)
                self._update(set_transform(state, apply_pan(state.transform, delta)))
            case _:
                self._hover_cursor = self._cursor_at(state, event.screen_pos)

    def pointer_up(self) -> None:
        """End the active gesture.

        A drag or resize is committed to history as one step. Panning commits
        nothing.
        """
        gesture = self._gesture
        self._gesture = IDLE
        match gesture:
            case DraggingState(shape_id=shape_id) | ResizingState(shape_id=shape_id):
                if get_shape_by_id(self.state, shape_id) is None:
                    self._update(self.state.at_rest())
                    return
                self._commit(self.state.at_rest())
                logger.debug("Gesture committed", shape_id=shape_id, undo_count=self._history.undo_count)
            case Panning():
                logger.debug("Gesture ended", mode=InteractionMode.PANNING.value)

    def pointer_leave(self) -> None:
        """Treat the pointer leaving the canvas like a button release."""
        self.pointer_up()

    def cancel_gesture(self) -> bool:
        """Abort the active gesture without committing.

        A drag or resize puts the shape back where the gesture found it.

        Returns:
            True if a gesture was cancelled.
        """
        gesture = self._gesture
        self._gesture = IDLE
        match gesture:
            case ResizingState(shape_id=shape_id, start_shape=start):
                restored = update_shape(
                    self.state, shape_id, x=start.x, y=start.y, width=start.width, height=start.height
                )
            case DraggingState(shape_id=shape_id, start_shape_pos=start_pos):
                restored = update_shape(self.state, shape_id, x=start_pos.x, y=start_pos.y)
            case Panning():
                return True
            case _:
                return False
        self._update(restored.at_rest())
        logger.debug("Gesture cancelled", shape_id=shape_id)
        return True

    def wheel(self, delta_y: float, screen_pos: Point) -> None:
        """Zoom around the cursor. Zooming is never committed to history.

        Args:
            delta_y: Wheel delta; negative values zoom in.
            screen_pos: Cursor position in screen space.
        """
        state = self.state
        self._update(set_transform(state, apply_zoom(state.transform, wheel_to_zoom_delta(delta_y), screen_pos)))

    # Committed edits

    def double_activate(self, screen_pos: Point) -> Rectangle | None:
        """Create a default rectangle at the given screen position.

        Args:
            screen_pos: Where the double-click happened.

        Returns:
            The created rectangle, or None while a drag or resize is active.
        """
        if self._editing():
            return None
        state = self.state.at_rest()
        world_pos = screen_to_world(screen_pos, state.transform)
        rect = create_rectangle(world_pos.x, world_pos.y)
        self._commit(add_shape(state, rect))
        logger.debug("Shape created", shape_id=rect.id, x=rect.x, y=rect.y)
        return rect

    def delete_selected(self) -> bool:
        """Remove the selected shape as one undoable step.

        Returns:
            True if a shape was removed.
        """
        if self._editing():
            return False
        selected = get_selected_shape(self.state)
        if selected is None:
            return False
        self._commit(remove_shape(self.state.at_rest(), selected.id))
        logger.debug("Shape deleted", shape_id=selected.id)
        return True

    def undo(self) -> bool:
        """Undo the last committed step, keeping the current viewport.

        Returns:
            True if a step was undone.
        """
        return self._step(self._history.undo)

    def redo(self) -> bool:
        """Redo the last undone step, keeping the current viewport.

        Returns:
            True if a step was redone.
        """
        return self._step(self._history.redo)

    def key_down(self, event: KeyEvent) -> bool:
        """Dispatch a keyboard shortcut.

        Args:
            event: The key press.

        Returns:
            True if the key was handled.
        """
        if is_redo_shortcut(event):
            return self.redo()
        if is_undo_shortcut(event):
            return self.undo()
        if is_cancel_key(event):
            return self.cancel_gesture()
        if is_delete_key(event):
            return self.delete_selected()
        return False

    def replace_state(self, state: EditorState) -> None:
        """Replace the whole session state with an externally loaded one.

        History restarts from the new state. A drag or resize in progress
        keeps running against the new state and commits over it on release;
        if its shape is gone, the machine falls back to idle.

        Args:
            state: The new state.
        """
        new_state = state.at_rest()
        self._history.reset(new_state)
        match self._gesture:
            case ResizingState(shape_id=shape_id) as resizing if get_shape_by_id(new_state, shape_id):
                self._update(replace(new_state, resizing=resizing))
            case DraggingState(shape_id=shape_id) as dragging if get_shape_by_id(new_state, shape_id):
                self._update(replace(new_state, dragging=dragging))
            case DraggingState() | ResizingState():
                self._gesture = IDLE
                self._notify()
            case _:
                self._notify()

    # Internals

    def _editing(self) -> bool:
        return isinstance(self._gesture, DraggingState | ResizingState)

    def _begin(self, gesture: Gesture, state: EditorState) -> None:
        self._gesture = gesture
        self._update(state)
        logger.debug("Gesture started", mode=self.mode.value)

    def _target_missing(self, shape_id: str) -> bool:
        """Fall back to idle when the gesture target has disappeared."""
        if get_shape_by_id(self.state, shape_id) is not None:
            return False
        logger.debug("Gesture target missing", shape_id=shape_id)
        self._gesture = IDLE
        self._update(self.state.at_rest())
        return True

    def _step(self, move: Callable[[], bool]) -> bool:
        if self._editing():
            return False
        transform = self.state.transform
        if not move():
            return False
        self._update(set_transform(self.state, transform))
        return True

    def _cursor_at(self, state: EditorState, screen_pos: Point) -> Cursor:
        selected = get_selected_shape(state)
        if selected is None:
            return Cursor.GRAB
        world_pos = screen_to_world(screen_pos, state.transform)
        handle = hit_test_handle(world_pos, selected, state.transform)
        if handle is not None:
            return get_cursor_for_handle(handle)
        if contains_point(selected, world_pos):
            return Cursor.MOVE
        return Cursor.GRAB

    def _update(self, state: EditorState) -> None:
        self._history.update_present(state)
        self._notify()

    def _commit(self, state: EditorState) -> None:
        self._history.push(state)
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)
