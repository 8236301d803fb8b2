"""Scene graph operations over :class:`EditorState`.

All functions are pure: they return a new state and never touch their input.
Lookups return ``None`` on a miss instead of raising.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from shapeboard_py.core.models import (
    DEFAULT_FILL,
    DEFAULT_HEIGHT,
    DEFAULT_STROKE,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_WIDTH,
    EditorState,
    Rectangle,
    Transform,
)

if TYPE_CHECKING:
    from shapeboard_py.core.models import Point

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Generate a unique ID for a new shape."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))  # noqa: S311
    return f"shape_{int(time.time() * 1000)}_{suffix}"


def create_initial_state() -> EditorState:
    """Create an empty editor state with the identity transform."""
    return EditorState(shapes=(), selected_shape_id=None, transform=Transform())


def create_rectangle(
    x: float,
    y: float,
    width: float = DEFAULT_WIDTH,
    height: float = DEFAULT_HEIGHT,
    fill: str = DEFAULT_FILL,
    stroke: str = DEFAULT_STROKE,
    stroke_width: float = DEFAULT_STROKE_WIDTH,
) -> Rectangle:
    """Create a new rectangle with a fresh ID at the given world position."""
    return Rectangle(
        id=generate_id(),
        x=x,
        y=y,
        width=width,
        height=height,
        fill=fill,
        stroke=stroke,
        stroke_width=stroke_width,
    )


def add_shape(state: EditorState, shape: Rectangle) -> EditorState:
    """Append a shape to the scene and select it."""
    return replace(state, shapes=(*state.shapes, shape), selected_shape_id=shape.id)


def remove_shape(state: EditorState, shape_id: str) -> EditorState:
    """Remove a shape, clearing the selection if it pointed at that shape."""
    return replace(
        state,
        shapes=tuple(s for s in state.shapes if s.id != shape_id),
        selected_shape_id=None if state.selected_shape_id == shape_id else state.selected_shape_id,
    )


def update_shape(state: EditorState, shape_id: str, **updates: Any) -> EditorState:
    """Merge field updates into the shape with the given ID.

    Unchanged shapes are shared with the input state. An unknown ID leaves
    the state as it is.
    """
    if get_shape_by_id(state, shape_id) is None:
        return state
    return replace(
        state,
        shapes=tuple(replace(s, **updates) if s.id == shape_id else s for s in state.shapes),
    )


def select_shape(state: EditorState, shape_id: str | None) -> EditorState:
    """Select a shape by ID, or clear the selection with ``None``.

    Selecting an ID that is not on the board clears the selection.
    """
    if shape_id is not None and get_shape_by_id(state, shape_id) is None:
        shape_id = None
    return replace(state, selected_shape_id=shape_id)


def set_transform(state: EditorState, transform: Transform) -> EditorState:
    """Replace the viewport transform."""
    return replace(state, transform=transform)


def get_shape_by_id(state: EditorState, shape_id: str) -> Rectangle | None:
    """Find a shape by ID."""
    return next((s for s in state.shapes if s.id == shape_id), None)


def get_selected_shape(state: EditorState) -> Rectangle | None:
    """Return the currently selected shape, if any."""
    if state.selected_shape_id is None:
        return None
    return get_shape_by_id(state, state.selected_shape_id)


def contains_point(rect: Rectangle, point: Point) -> bool:
    """Check whether a world-space point lies inside a rectangle (edges included)."""
    return rect.x <= point.x <= rect.right and rect.y <= point.y <= rect.bottom


def hit_test_shapes(state: EditorState, world_pos: Point) -> Rectangle | None:
    """Return the first shape, in creation order, containing a world-space point."""
    return next((s for s in state.shapes if contains_point(s, world_pos)), None)
