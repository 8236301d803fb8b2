"""Tests for the pointer-driven interaction state machine."""

from __future__ import annotations

import math

from shapeboard_py.core.history import HistoryManager
from shapeboard_py.core.interaction import IDLE, InteractionStateMachine, Panning, PointerEvent
from shapeboard_py.core.models import (
    MAX_COORDINATE,
    DraggingState,
    EditorState,
    Point,
    Rectangle,
    ResizingState,
    Transform,
)
from shapeboard_py.core.scene import create_initial_state, get_shape_by_id
from shapeboard_py.core.shortcuts import KeyEvent
from shapeboard_py.core.types import Cursor, InteractionMode, Modifier, PointerButton
from shapeboard_py.storage.codec import dumps_state, loads_state


def _shape(machine: InteractionStateMachine, shape_id: str) -> Rectangle:
    shape = get_shape_by_id(machine.state, shape_id)
    assert shape is not None
    return shape


def _click(machine: InteractionStateMachine, x: float, y: float) -> None:
    machine.pointer_down(PointerEvent(x, y))
    machine.pointer_up()


class TestSelection:
    """Tests for selecting shapes."""

    def test_click_on_shape_selects_it(self, machine: InteractionStateMachine) -> None:
        """Test that pressing on a shape selects it and starts a drag."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        assert machine.state.selected_shape_id == "rect-1"
        assert machine.mode is InteractionMode.DRAGGING
        assert isinstance(machine.gesture, DraggingState)
        assert machine.state.dragging is not None

    def test_click_on_empty_space_clears_selection(self, machine: InteractionStateMachine) -> None:
        """Test that pressing on empty space deselects without committing."""
        _click(machine, 100.0, 80.0)
        undo_count = machine.history.undo_count

        machine.pointer_down(PointerEvent(0.0, 0.0))

        assert machine.state.selected_shape_id is None
        assert machine.mode is InteractionMode.IDLE
        assert machine.history.undo_count == undo_count

    def test_right_button_is_ignored(self, machine: InteractionStateMachine, board_state: EditorState) -> None:
        """Test that the right button starts nothing."""
        machine.pointer_down(PointerEvent(100.0, 80.0, button=PointerButton.RIGHT))
        assert machine.mode is InteractionMode.IDLE
        assert machine.state == board_state


class TestDragging:
    """Tests for moving shapes."""

    def test_drag_moves_shape_and_commits_once(self, machine: InteractionStateMachine, board_state: EditorState) -> None:
        """Test that a drag is one undo step restoring the pre-drag state."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_move(PointerEvent(110.0, 85.0))
        machine.pointer_move(PointerEvent(120.0, 90.0))
        assert machine.history.undo_count == 0

        machine.pointer_up()

        moved = _shape(machine, "rect-1")
        assert (moved.x, moved.y) == (70.0, 60.0)
        assert machine.state.is_at_rest
        assert machine.mode is InteractionMode.IDLE
        assert machine.history.undo_count == 1

        assert machine.undo()
        assert machine.state == board_state

    def test_drag_depends_only_on_final_position(self, machine: InteractionStateMachine) -> None:
        """Test that intermediate frames do not accumulate."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        for x, y in [(500.0, 500.0), (-200.0, 10.0), (105.0, 75.0)]:
            machine.pointer_move(PointerEvent(x, y))
        machine.pointer_up()
        moved = _shape(machine, "rect-1")
        assert (moved.x, moved.y) == (55.0, 45.0)

    def test_drag_respects_zoom(self, history: HistoryManager) -> None:
        """Test that screen deltas are converted to world deltas."""
        history.update_present(EditorState(shapes=history.present.shapes, transform=Transform(zoom=2.0)))
        machine = InteractionStateMachine(history)

        machine.pointer_down(PointerEvent(200.0, 160.0))
        machine.pointer_move(PointerEvent(220.0, 160.0))
        machine.pointer_up()

        assert _shape(machine, "rect-1").x == 60.0

    def test_drag_without_movement_still_commits(self, machine: InteractionStateMachine) -> None:
        """Test that a press and release on a shape records one step."""
        _click(machine, 100.0, 80.0)
        assert machine.history.undo_count == 1
        assert (_shape(machine, "rect-1").x, _shape(machine, "rect-1").y) == (50.0, 50.0)

    def test_pointer_leave_ends_drag(self, machine: InteractionStateMachine) -> None:
        """Test that leaving the canvas behaves like releasing the button."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_move(PointerEvent(130.0, 80.0))
        machine.pointer_leave()
        assert machine.mode is InteractionMode.IDLE
        assert machine.history.undo_count == 1
        assert _shape(machine, "rect-1").x == 80.0

    def test_pointer_down_during_gesture_is_ignored(self, machine: InteractionStateMachine) -> None:
        """Test that a second press cannot start another gesture."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_down(PointerEvent(310.0, 310.0))
        assert isinstance(machine.gesture, DraggingState)
        assert machine.gesture.shape_id == "rect-1"


class TestResizing:
    """Tests for resizing the selected shape."""

    def test_create_then_resize_to_minimum(self, empty_machine: InteractionStateMachine) -> None:
        """Test creating a rectangle, resizing it past the minimum, then undo and redo."""
        rect = empty_machine.double_activate(Point(50.0, 50.0))
        assert rect is not None
        assert (rect.x, rect.y, rect.width, rect.height) == (50.0, 50.0, 100.0, 60.0)
        assert empty_machine.state.selected_shape_id == rect.id
        assert empty_machine.history.undo_count == 1

        empty_machine.pointer_down(PointerEvent(150.0, 110.0))
        assert empty_machine.mode is InteractionMode.RESIZING
        empty_machine.pointer_move(PointerEvent(60.0, 70.0))
        empty_machine.pointer_up()

        resized = _shape(empty_machine, rect.id)
        assert (resized.width, resized.height) == (10.0, 20.0)
        assert empty_machine.history.undo_count == 2

        assert empty_machine.undo()
        restored = _shape(empty_machine, rect.id)
        assert (restored.width, restored.height) == (100.0, 60.0)

        assert empty_machine.redo()
        redone = _shape(empty_machine, rect.id)
        assert (redone.width, redone.height) == (10.0, 20.0)

    def test_handles_only_on_selected_shape(self, machine: InteractionStateMachine) -> None:
        """Test that pressing a corner of an unselected shape drags it instead."""
        machine.pointer_down(PointerEvent(150.0, 110.0))
        assert machine.mode is InteractionMode.DRAGGING

    def test_resize_state_carries_start_snapshot(self, machine: InteractionStateMachine, sample_rect: Rectangle) -> None:
        """Test that the resize gesture remembers the shape as it was."""
        _click(machine, 100.0, 80.0)
        machine.pointer_down(PointerEvent(50.0, 50.0))
        gesture = machine.gesture
        assert isinstance(gesture, ResizingState)
        assert gesture.start_shape == sample_rect
        assert machine.cursor is Cursor.NWSE_RESIZE


class TestPanningAndZoom:
    """Tests for viewport gestures."""

    def test_middle_button_pans_without_commit(self, machine: InteractionStateMachine) -> None:
        """Test panning with the middle button."""
        machine.pointer_down(PointerEvent(10.0, 10.0, button=PointerButton.MIDDLE))
        assert isinstance(machine.gesture, Panning)
        assert machine.cursor is Cursor.GRABBING

        machine.pointer_move(PointerEvent(20.0, 15.0))
        machine.pointer_move(PointerEvent(30.0, 25.0))
        machine.pointer_up()

        assert (machine.state.transform.pan_x, machine.state.transform.pan_y) == (20.0, 15.0)
        assert machine.history.undo_count == 0
        assert machine.gesture == IDLE

    def test_pan_modifier_with_left_button(self, machine: InteractionStateMachine) -> None:
        """Test that Ctrl + left drag pans even over a shape."""
        machine.pointer_down(PointerEvent(100.0, 80.0, modifiers=frozenset({Modifier.CTRL})))
        assert machine.mode is InteractionMode.PANNING
        assert machine.state.selected_shape_id is None

    def test_custom_pan_modifier(self, history: HistoryManager) -> None:
        """Test configuring a different pan modifier."""
        machine = InteractionStateMachine(history, pan_modifier=Modifier.ALT)
        machine.pointer_down(PointerEvent(0.0, 0.0, modifiers=frozenset({Modifier.CTRL})))
        assert machine.mode is InteractionMode.IDLE
        machine.pointer_down(PointerEvent(0.0, 0.0, modifiers=frozenset({Modifier.ALT})))
        assert machine.mode is InteractionMode.PANNING

    def test_wheel_zooms_around_cursor(self, machine: InteractionStateMachine) -> None:
        """Test that wheel zoom is transient and anchored at the cursor."""
        machine.wheel(-500.0, Point(100.0, 100.0))
        transform = machine.state.transform
        assert transform.zoom == 1.5
        assert transform.pan_x == -50.0
        assert machine.history.undo_count == 0


class TestCommittedEdits:
    """Tests for create, delete, undo and redo."""

    def test_double_activate_uses_world_position(self, history: HistoryManager) -> None:
        """Test that new rectangles are placed in world space."""
        history.update_present(EditorState(transform=Transform(pan_x=100.0, pan_y=0.0, zoom=2.0)))
        machine = InteractionStateMachine(history)
        rect = machine.double_activate(Point(300.0, 100.0))
        assert rect is not None
        assert (rect.x, rect.y) == (100.0, 50.0)

    def test_delete_selected(self, machine: InteractionStateMachine, board_state: EditorState) -> None:
        """Test deleting the selected shape and undoing it."""
        _click(machine, 100.0, 80.0)
        assert machine.delete_selected()
        assert [s.id for s in machine.state.shapes] == ["rect-2"]
        assert machine.undo()
        assert [s.id for s in machine.state.shapes] == ["rect-1", "rect-2"]

    def test_delete_without_selection(self, machine: InteractionStateMachine) -> None:
        """Test that delete does nothing when nothing is selected."""
        assert not machine.delete_selected()
        assert machine.history.undo_count == 0

    def test_undo_keeps_viewport(self, machine: InteractionStateMachine) -> None:
        """Test that undo restores shapes but not the pan and zoom."""
        _click(machine, 100.0, 80.0)
        machine.wheel(-1000.0, Point(0.0, 0.0))
        zoomed = machine.state.transform

        assert machine.undo()
        assert machine.state.transform == zoomed
        assert machine.state.selected_shape_id is None

    def test_edits_ignored_while_dragging(self, machine: InteractionStateMachine) -> None:
        """Test that undo, delete and create wait for the gesture to end."""
        _click(machine, 310.0, 310.0)
        machine.pointer_down(PointerEvent(100.0, 80.0))
        assert not machine.undo()
        assert not machine.delete_selected()
        assert machine.double_activate(Point(0.0, 0.0)) is None
        assert len(machine.state.shapes) == 2


class TestKeyboard:
    """Tests for keyboard shortcuts."""

    def test_undo_and_redo_shortcuts(self, machine: InteractionStateMachine) -> None:
        """Test Ctrl+Z and Ctrl+Shift+Z."""
        _click(machine, 100.0, 80.0)
        assert machine.key_down(KeyEvent("z", ctrl=True))
        assert machine.history.undo_count == 0
        assert machine.key_down(KeyEvent("Z", ctrl=True, shift=True))
        assert machine.history.undo_count == 1

    def test_meta_undo(self, machine: InteractionStateMachine) -> None:
        """Test Cmd+Z on macOS."""
        _click(machine, 100.0, 80.0)
        assert machine.key_down(KeyEvent("z", meta=True))

    def test_delete_key(self, machine: InteractionStateMachine) -> None:
        """Test that Delete removes the selected shape."""
        _click(machine, 100.0, 80.0)
        assert machine.key_down(KeyEvent("Delete"))
        assert get_shape_by_id(machine.state, "rect-1") is None

    def test_unhandled_key(self, machine: InteractionStateMachine) -> None:
        """Test that other keys are not handled."""
        assert not machine.key_down(KeyEvent("a"))


class TestCancel:
    """Tests for cancelling gestures."""

    def test_escape_cancels_drag(self, machine: InteractionStateMachine) -> None:
        """Test that Escape puts a dragged shape back without committing."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_move(PointerEvent(200.0, 200.0))
        assert machine.key_down(KeyEvent("Escape"))

        shape = _shape(machine, "rect-1")
        assert (shape.x, shape.y) == (50.0, 50.0)
        assert machine.mode is InteractionMode.IDLE
        assert machine.state.is_at_rest
        assert machine.history.undo_count == 0

    def test_cancel_resize(self, machine: InteractionStateMachine, sample_rect: Rectangle) -> None:
        """Test that cancelling a resize restores the original geometry."""
        _click(machine, 100.0, 80.0)
        machine.pointer_down(PointerEvent(150.0, 110.0))
        machine.pointer_move(PointerEvent(300.0, 300.0))
        assert machine.cancel_gesture()
        assert _shape(machine, "rect-1") == sample_rect
        assert machine.history.undo_count == 1

    def test_cancel_when_idle(self, machine: InteractionStateMachine) -> None:
        """Test that there is nothing to cancel when idle."""
        assert not machine.cancel_gesture()


class TestExternalReplacement:
    """Tests for replacing the state from another tab."""

    def test_replace_resets_history(self, machine: InteractionStateMachine, other_rect: Rectangle) -> None:
        """Test that a replacement starts a fresh history."""
        _click(machine, 100.0, 80.0)
        replacement = EditorState(shapes=(other_rect,))
        machine.replace_state(replacement)
        assert machine.state == replacement
        assert not machine.history.can_undo()

    def test_gesture_continues_over_replacement(self, machine: InteractionStateMachine, sample_rect: Rectangle) -> None:
        """Test that a local drag commits over a state synced mid-gesture."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_move(PointerEvent(120.0, 80.0))

        synced = EditorState(shapes=(Rectangle(id="rect-1", x=0.0, y=0.0), Rectangle(id="rect-3", x=500.0, y=0.0)))
        machine.replace_state(synced)
        assert machine.mode is InteractionMode.DRAGGING

        machine.pointer_move(PointerEvent(130.0, 80.0))
        machine.pointer_up()

        assert _shape(machine, "rect-1").x == sample_rect.x + 30.0
        assert get_shape_by_id(machine.state, "rect-3") is not None
        assert machine.undo()
        assert machine.state == synced

    def test_gesture_dropped_when_target_removed(self, machine: InteractionStateMachine, other_rect: Rectangle) -> None:
        """Test that the machine goes idle when the dragged shape disappears."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.replace_state(EditorState(shapes=(other_rect,)))
        assert machine.mode is InteractionMode.IDLE
        machine.pointer_move(PointerEvent(150.0, 80.0))
        machine.pointer_up()
        assert machine.history.undo_count == 0


class TestCursorAndNotifications:
    """Tests for hover cursors and change notifications."""

    def test_hover_cursor(self, machine: InteractionStateMachine) -> None:
        """Test cursor over a handle, the selected shape and empty space."""
        _click(machine, 100.0, 80.0)
        machine.pointer_move(PointerEvent(100.0, 80.0))
        assert machine.cursor is Cursor.MOVE
        machine.pointer_move(PointerEvent(150.0, 80.0))
        assert machine.cursor is Cursor.EW_RESIZE
        machine.pointer_move(PointerEvent(0.0, 0.0))
        assert machine.cursor is Cursor.GRAB

    def test_on_change_called_for_transient_and_committed(self) -> None:
        """Test that every change is reported."""
        changes: list[EditorState] = []
        machine = InteractionStateMachine(HistoryManager(create_initial_state()), on_change=changes.append)

        machine.double_activate(Point(0.0, 0.0))
        machine.wheel(-100.0, Point(0.0, 0.0))

        assert len(changes) == 2
        assert changes[-1] == machine.state


class TestExtremeInput:
    """Tests for pointer input far outside any usable range."""

    def test_pan_stays_finite_and_reloads(self, machine: InteractionStateMachine) -> None:
        """Test that panning by enormous distances keeps a finite, loadable transform."""
        machine.pointer_down(PointerEvent(0.0, 0.0, button=PointerButton.MIDDLE))
        machine.pointer_move(PointerEvent(1e308, 1e308))
        machine.pointer_move(PointerEvent(-1e308, -1e308))
        machine.pointer_up()

        transform = machine.state.transform
        assert math.isfinite(transform.pan_x)
        assert math.isfinite(transform.pan_y)
        assert abs(transform.pan_x) <= MAX_COORDINATE
        reloaded = loads_state(dumps_state(machine.state.at_rest()))
        assert reloaded.transform == transform
        assert reloaded.shapes == machine.state.shapes

    def test_drag_to_extreme_position_stays_finite(self, machine: InteractionStateMachine) -> None:
        """Test that dragging a shape absurdly far leaves finite coordinates."""
        machine.pointer_down(PointerEvent(100.0, 80.0))
        machine.pointer_move(PointerEvent(1e308, -1e308))
        machine.pointer_up()

        shape = _shape(machine, "rect-1")
        assert math.isfinite(shape.x)
        assert math.isfinite(shape.y)
        assert loads_state(dumps_state(machine.state)).shapes == machine.state.shapes

    def test_create_at_extreme_position_stays_finite(self, machine: InteractionStateMachine) -> None:
        """Test that a shape created far off-screen has finite coordinates."""
        shape = machine.double_activate(Point(1e308, 1e308))
        assert shape is not None
        assert math.isfinite(shape.x)
        assert math.isfinite(shape.y)
