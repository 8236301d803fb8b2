"""Core type definitions for shapeboard-py."""

from __future__ import annotations

from enum import StrEnum


class ShapeType(StrEnum):
    """Enumeration of shape types available for drawing."""

    RECTANGLE = "rectangle"


class ResizeHandle(StrEnum):
    """The eight resize handles of a rectangle.

    Declaration order is hit-test priority: corners before edges.
    """

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class PointerButton(StrEnum):
    """Pointer buttons the editor reacts to."""

    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


class Modifier(StrEnum):
    """Keyboard modifiers held during a pointer event."""

    CTRL = "ctrl"
    META = "meta"
    SHIFT = "shift"
    ALT = "alt"


class Cursor(StrEnum):
    """Cursor icons exposed to the rendering layer."""

    GRAB = "grab"
    GRABBING = "grabbing"
    MOVE = "move"
    NWSE_RESIZE = "nwse-resize"
    NESW_RESIZE = "nesw-resize"
    NS_RESIZE = "ns-resize"
    EW_RESIZE = "ew-resize"


class InteractionMode(StrEnum):
    """Gesture modes of the interaction state machine."""

    IDLE = "idle"
    PANNING = "panning"
    DRAGGING = "dragging"
    RESIZING = "resizing"
