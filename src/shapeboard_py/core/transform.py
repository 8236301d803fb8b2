"""Coordinate transforms between world space and screen space.

World space is the logical board where shapes live and does not depend on
pan or zoom. Screen space is pixels on the rendering surface::

    screen = world * zoom + pan
    world = (screen - pan) / zoom
"""

from __future__ import annotations

from dataclasses import replace

from shapeboard_py.core.models import MAX_ZOOM, MIN_ZOOM, Point, Transform

WHEEL_ZOOM_FACTOR = 0.001


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor into ``[MIN_ZOOM, MAX_ZOOM]``."""
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def world_to_screen(world_pos: Point, transform: Transform) -> Point:
    """Convert a world-space point to screen space."""
    return Point(
        x=world_pos.x * transform.zoom + transform.pan_x,
        y=world_pos.y * transform.zoom + transform.pan_y,
    )


def screen_to_world(screen_pos: Point, transform: Transform) -> Point:
    """Convert a screen-space point to world space."""
    return Point(
        x=(screen_pos.x - transform.pan_x) / transform.zoom,
        y=(screen_pos.y - transform.pan_y) / transform.zoom,
    )


def apply_pan(transform: Transform, delta: Point) -> Transform:
    """Shift the viewport by a screen-space delta. Zoom is unchanged."""
    return replace(
        transform,
        pan_x=transform.pan_x + delta.x,
        pan_y=transform.pan_y + delta.y,
    )


def apply_zoom(transform: Transform, zoom_delta: float, cursor_screen_pos: Point) -> Transform:
    """Zoom by a relative amount while keeping the point under the cursor fixed.

    The world point under the cursor is captured once, before the zoom
    changes; the new pan is then solved directly from
    ``cursor = anchor * new_zoom + new_pan``.

    Args:
        transform: The current transform.
        zoom_delta: Relative zoom change, e.g. ``0.1`` zooms in by 10%.
        cursor_screen_pos: Cursor position in screen space.

    Returns:
        The zoomed transform.
    """
    anchor = screen_to_world(cursor_screen_pos, transform)
    new_zoom = clamp_zoom(transform.zoom * (1 + zoom_delta))
    return Transform(
        pan_x=cursor_screen_pos.x - anchor.x * new_zoom,
        pan_y=cursor_screen_pos.y - anchor.y * new_zoom,
        zoom=new_zoom,
    )


def wheel_to_zoom_delta(wheel_delta_y: float) -> float:
    """Translate a wheel delta into a zoom delta; scrolling up zooms in."""
    return -wheel_delta_y * WHEEL_ZOOM_FACTOR
