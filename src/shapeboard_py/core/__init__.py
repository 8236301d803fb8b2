"""Core editor engine for shapeboard-py."""

from shapeboard_py.core.handles import apply_resize, get_cursor_for_handle, hit_test_handle
from shapeboard_py.core.history import HistoryManager
from shapeboard_py.core.interaction import InteractionStateMachine, PointerEvent
from shapeboard_py.core.models import (
    MIN_SIZE,
    DraggingState,
    EditorState,
    HistoryState,
    Point,
    Rectangle,
    ResizingState,
    Transform,
)
from shapeboard_py.core.shortcuts import KeyEvent
from shapeboard_py.core.transform import apply_pan, apply_zoom, screen_to_world, world_to_screen
from shapeboard_py.core.types import Cursor, InteractionMode, Modifier, PointerButton, ResizeHandle, ShapeType

__all__ = [
    "MIN_SIZE",
    "Cursor",
    "DraggingState",
    "EditorState",
    "HistoryManager",
    "HistoryState",
    "InteractionMode",
    "InteractionStateMachine",
    "KeyEvent",
    "Modifier",
    "Point",
    "PointerButton",
    "PointerEvent",
    "Rectangle",
    "ResizeHandle",
    "ResizingState",
    "ShapeType",
    "Transform",
    "apply_pan",
    "apply_resize",
    "apply_zoom",
    "get_cursor_for_handle",
    "hit_test_handle",
    "screen_to_world",
    "world_to_screen",
]
