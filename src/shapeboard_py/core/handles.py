"""Resize handles for the selected rectangle.

Handles sit on the corners and edge midpoints of a rectangle. Their positions
are computed in world space, but hit-testing happens in screen space so the
grab area stays the same size at every zoom level.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING

from shapeboard_py.core.models import MIN_SIZE, Point, Rectangle
from shapeboard_py.core.transform import world_to_screen
from shapeboard_py.core.types import Cursor, ResizeHandle

if TYPE_CHECKING:
    from shapeboard_py.core.models import Transform

HANDLE_SIZE = 8.0
HANDLE_HIT_MARGIN = 4.0
HANDLE_HIT_RADIUS = HANDLE_SIZE / 2 + HANDLE_HIT_MARGIN

# Handles that move the left/top edge (the origin) rather than the right/bottom one.
_MOVES_LEFT = frozenset({ResizeHandle.TOP_LEFT, ResizeHandle.BOTTOM_LEFT, ResizeHandle.LEFT})
_MOVES_RIGHT = frozenset({ResizeHandle.TOP_RIGHT, ResizeHandle.BOTTOM_RIGHT, ResizeHandle.RIGHT})
_MOVES_TOP = frozenset({ResizeHandle.TOP_LEFT, ResizeHandle.TOP_RIGHT, ResizeHandle.TOP})
_MOVES_BOTTOM = frozenset({ResizeHandle.BOTTOM_LEFT, ResizeHandle.BOTTOM_RIGHT, ResizeHandle.BOTTOM})

_CURSORS: dict[ResizeHandle, Cursor] = {
    ResizeHandle.TOP_LEFT: Cursor.NWSE_RESIZE,
    ResizeHandle.TOP_RIGHT: Cursor.NESW_RESIZE,
    ResizeHandle.BOTTOM_LEFT: Cursor.NESW_RESIZE,
    ResizeHandle.BOTTOM_RIGHT: Cursor.NWSE_RESIZE,
    ResizeHandle.TOP: Cursor.NS_RESIZE,
    ResizeHandle.RIGHT: Cursor.EW_RESIZE,
    ResizeHandle.BOTTOM: Cursor.NS_RESIZE,
    ResizeHandle.LEFT: Cursor.EW_RESIZE,
}


def get_handle_positions(rect: Rectangle) -> dict[ResizeHandle, Point]:
    """Return the world-space position of every handle of a rectangle."""
    center_x = rect.x + rect.width / 2
    center_y = rect.y + rect.height / 2
    return {
        ResizeHandle.TOP_LEFT: Point(rect.x, rect.y),
        ResizeHandle.TOP_RIGHT: Point(rect.right, rect.y),
        ResizeHandle.BOTTOM_LEFT: Point(rect.x, rect.bottom),
        ResizeHandle.BOTTOM_RIGHT: Point(rect.right, rect.bottom),
        ResizeHandle.TOP: Point(center_x, rect.y),
        ResizeHandle.RIGHT: Point(rect.right, center_y),
        ResizeHandle.BOTTOM: Point(center_x, rect.bottom),
        ResizeHandle.LEFT: Point(rect.x, center_y),
    }


def hit_test_handle(world_pos: Point, rect: Rectangle, transform: Transform) -> ResizeHandle | None:
    """Find the handle under a world-space point.

    Distances are measured in screen pixels. Corner handles are tested before
    edge handles so a corner wins where their hit areas overlap.

    Args:
        world_pos: The point to test, in world space.
        rect: The rectangle whose handles are tested.
        transform: The current viewport transform.

    Returns:
        The first matching handle, or None if no handle is hit.
    """
    click = world_to_screen(world_pos, transform)
    positions = get_handle_positions(rect)
    for handle in ResizeHandle:
        screen = world_to_screen(positions[handle], transform)
        if math.hypot(screen.x - click.x, screen.y - click.y) <= HANDLE_HIT_RADIUS:
            return handle
    return None


def _resize_span(start: float, size: float, delta: float, *, moves_start: bool) -> tuple[float, float]:
    """Resize one dimension, returning the new ``(origin, size)``.

    When the proposed size drops below ``MIN_SIZE`` it is clamped and the edge
    that is not being dragged stays where it was.
    """
    if moves_start:
        proposed = size - delta
        if proposed >= MIN_SIZE:
            return start + delta, proposed
        return start + size - MIN_SIZE, MIN_SIZE
    return start, max(MIN_SIZE, size + delta)


def apply_resize(
    original: Rectangle,
    handle: ResizeHandle,
    current_world_pos: Point,
    start_world_pos: Point,
) -> Rectangle:
    """Resize a rectangle by dragging one of its handles.

    The result depends only on the gesture-start geometry and the total
    pointer delta, so repeated calls during a gesture never accumulate error.

    Args:
        original: The rectangle as it was when the gesture began.
        handle: The handle being dragged.
        current_world_pos: Current pointer position in world space.
        start_world_pos: Pointer position in world space when the gesture began.

    Returns:
        The resized rectangle; width and height are never below ``MIN_SIZE``.
    """
    dx = current_world_pos.x - start_world_pos.x
    dy = current_world_pos.y - start_world_pos.y

    x, width = original.x, original.width
    y, height = original.y, original.height

    if handle in _MOVES_LEFT or handle in _MOVES_RIGHT:
        x, width = _resize_span(original.x, original.width, dx, moves_start=handle in _MOVES_LEFT)
    if handle in _MOVES_TOP or handle in _MOVES_BOTTOM:
        y, height = _resize_span(original.y, original.height, dy, moves_start=handle in _MOVES_TOP)

    return replace(original, x=x, y=y, width=width, height=height)


def get_cursor_for_handle(handle: ResizeHandle) -> Cursor:
    """Return the cursor icon shown while hovering a handle."""
    return _CURSORS[handle]


def get_handle_size_in_world(transform: Transform) -> float:
    """Return the handle size in world units so handles render at a constant pixel size."""
    return HANDLE_SIZE / transform.zoom
