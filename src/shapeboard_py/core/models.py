"""Core domain models for the shapeboard-py editor.

Every model is a frozen dataclass. Updates go through ``dataclasses.replace``
so that snapshots already stored in history are never mutated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace

from shapeboard_py.core.types import ResizeHandle, ShapeType

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
MIN_SIZE = 10.0
MAX_COORDINATE = 1e9

DEFAULT_WIDTH = 100.0
DEFAULT_HEIGHT = 60.0
DEFAULT_FILL = "#4a90e2"
DEFAULT_STROKE = "#1e3a8a"
DEFAULT_STROKE_WIDTH = 2.0


def clamp_coordinate(value: float) -> float:
    """Clamp a coordinate or offset into ``[-MAX_COORDINATE, MAX_COORDINATE]``. NaN becomes 0."""
    if math.isnan(value):
        return 0.0
    return max(-MAX_COORDINATE, min(MAX_COORDINATE, value))


@dataclass(frozen=True)
class Point:
    """A point in 2D space, in either world or screen coordinates.

    Attributes:
        x: X-coordinate position.
        y: Y-coordinate position.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Transform:
    """Viewport transform mapping world space to screen space.

    ``screen = world * zoom + pan``. The zoom factor is clamped to
    ``[MIN_ZOOM, MAX_ZOOM]`` on construction.

    Attributes:
        pan_x: Horizontal screen offset in pixels.
        pan_y: Vertical screen offset in pixels.
        zoom: Uniform scale factor (> 1 zooms in, < 1 zooms out).
    """

    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        """Clamp the zoom factor and the pan offsets into their allowed ranges."""
        object.__setattr__(self, "pan_x", clamp_coordinate(self.pan_x))
        object.__setattr__(self, "pan_y", clamp_coordinate(self.pan_y))
        object.__setattr__(self, "zoom", max(MIN_ZOOM, min(MAX_ZOOM, self.zoom)))


@dataclass(frozen=True)
class Rectangle:
    """A rectangle in world space.

    Attributes:
        id: Unique identifier of the shape.
        x: Left edge in world units.
        y: Top edge in world units.
        width: Width in world units.
        height: Height in world units.
        fill: Fill color in hex format.
        stroke: Outline color in hex format.
        stroke_width: Outline width in pixels.
    """

    id: str
    x: float
    y: float
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT
    fill: str = DEFAULT_FILL
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    shape_type: ShapeType = field(default=ShapeType.RECTANGLE, init=False)

    def __post_init__(self) -> None:
        """Keep the geometry finite and inside the coordinate range."""
        object.__setattr__(self, "x", clamp_coordinate(self.x))
        object.__setattr__(self, "y", clamp_coordinate(self.y))
        object.__setattr__(self, "width", MIN_SIZE if math.isnan(self.width) else min(MAX_COORDINATE, self.width))
        object.__setattr__(self, "height", MIN_SIZE if math.isnan(self.height) else min(MAX_COORDINATE, self.height))

    @property
    def right(self) -> float:
        """X-coordinate of the right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Y-coordinate of the bottom edge."""
        return self.y + self.height


@dataclass(frozen=True)
class ResizingState:
    """An in-progress resize gesture.

    Attributes:
        shape_id: ID of the shape being resized.
        handle: The handle being dragged.
        start_world_pos: Pointer position in world space when the gesture began.
        start_shape: Snapshot of the shape before the resize.
    """

    shape_id: str
    handle: ResizeHandle
    start_world_pos: Point
    start_shape: Rectangle


@dataclass(frozen=True)
class DraggingState:
    """An in-progress move gesture.

    Attributes:
        shape_id: ID of the shape being moved.
        start_world_pos: Pointer position in world space when the gesture began.
        start_shape_pos: Shape origin when the gesture began.
    """

    shape_id: str
    start_world_pos: Point
    start_shape_pos: Point


@dataclass(frozen=True)
class EditorState:
    """The complete state of one editing session.

    Shapes are kept in insertion order, which is also paint order. The
    ``resizing`` and ``dragging`` fields are only set on the live state while a
    gesture is active; committed and persisted snapshots are at rest.

    Attributes:
        shapes: Shapes on the board in paint order.
        selected_shape_id: ID of the selected shape, if any.
        transform: Current viewport transform.
        resizing: Active resize gesture, if any.
        dragging: Active move gesture, if any.
    """

    shapes: tuple[Rectangle, ...] = ()
    selected_shape_id: str | None = None
    transform: Transform = field(default_factory=Transform)
    resizing: ResizingState | None = None
    dragging: DraggingState | None = None

    def __post_init__(self) -> None:
        """Reject states that are resizing and dragging at once."""
        if self.resizing is not None and self.dragging is not None:
            msg = "An editor state cannot be resizing and dragging at the same time"
            raise ValueError(msg)

    @property
    def is_at_rest(self) -> bool:
        """Whether no gesture data is attached to this state."""
        return self.resizing is None and self.dragging is None

    def at_rest(self) -> EditorState:
        """Return this state with all transient gesture data removed."""
        if self.is_at_rest:
            return self
        return replace(self, resizing=None, dragging=None)


@dataclass(frozen=True)
class HistoryState:
    """Linear undo/redo history over committed editor states.

    Attributes:
        past: Older committed states, oldest first.
        present: The live state.
        future: Undone states available for redo, next first.
    """

    present: EditorState
    past: tuple[EditorState, ...] = ()
    future: tuple[EditorState, ...] = ()
