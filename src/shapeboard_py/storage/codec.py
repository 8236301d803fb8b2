"""JSON document format for persisted editor state.

The document mirrors :class:`EditorState` using camelCase keys::

    {
      "shapes": [{"id": ..., "type": "rectangle", "x": ..., "y": ...,
                  "width": ..., "height": ..., "fill": ..., "stroke": ...,
                  "strokeWidth": ...}],
      "selectedShapeId": "shape_..." | null,
      "transform": {"panX": 0, "panY": 0, "zoom": 1}
    }

Only geometry at rest is written. Gesture fields (``resizing``,
``dragging``) are neither written nor read.
"""

from __future__ import annotations

import json
import math
from typing import Any

from shapeboard_py.core.models import MIN_SIZE, EditorState, Rectangle, Transform
from shapeboard_py.core.types import ShapeType
from shapeboard_py.exceptions import StateDecodeError


def shape_to_document(shape: Rectangle) -> dict[str, Any]:
    """Convert a rectangle to its document form."""
    return {
        "id": shape.id,
        "type": shape.shape_type.value,
        "x": shape.x,
        "y": shape.y,
        "width": shape.width,
        "height": shape.height,
        "fill": shape.fill,
        "stroke": shape.stroke,
        "strokeWidth": shape.stroke_width,
    }


def state_to_document(state: EditorState) -> dict[str, Any]:
    """Convert an editor state to its document form, without gesture data."""
    return {
        "shapes": [shape_to_document(s) for s in state.shapes],
        "selectedShapeId": state.selected_shape_id,
        "transform": {
            "panX": state.transform.pan_x,
            "panY": state.transform.pan_y,
            "zoom": state.transform.zoom,
        },
    }


def _number(data: dict[str, Any], key: str, where: str, default: float | None = None) -> float:
    value = data.get(key, default)
    msg = f"{where}.{key} must be a finite number"
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise StateDecodeError(msg)
    try:
        number = float(value)
    except OverflowError as e:
        raise StateDecodeError(msg) from e
    if not math.isfinite(number):
        raise StateDecodeError(msg)
    return number


def _string(data: dict[str, Any], key: str, where: str, default: str | None = None) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        msg = f"{where}.{key} must be a non-empty string"
        raise StateDecodeError(msg)
    return value


def shape_from_document(data: Any, index: int = 0) -> Rectangle:
    """Build a rectangle from its document form.

    Sizes below the minimum are raised to it.

    Raises:
        StateDecodeError: If the document is malformed.
    """
    where = f"shapes[{index}]"
    if not isinstance(data, dict):
        msg = f"{where} must be an object"
        raise StateDecodeError(msg)
    shape_type = data.get("type", ShapeType.RECTANGLE.value)
    if shape_type != ShapeType.RECTANGLE.value:
        msg = f"{where}.type {shape_type!r} is not supported"
        raise StateDecodeError(msg)
    defaults = Rectangle(id="defaults", x=0.0, y=0.0)
    return Rectangle(
        id=_string(data, "id", where),
        x=_number(data, "x", where),
        y=_number(data, "y", where),
        width=max(MIN_SIZE, _number(data, "width", where)),
        height=max(MIN_SIZE, _number(data, "height", where)),
        fill=_string(data, "fill", where, defaults.fill),
        stroke=_string(data, "stroke", where, defaults.stroke),
        stroke_width=_number(data, "strokeWidth", where, defaults.stroke_width),
    )


def state_from_document(data: Any) -> EditorState:
    """Build an editor state from its document form.

    A selection that points at a missing shape is dropped. Duplicate shape
    IDs are rejected.

    Raises:
        StateDecodeError: If the document is malformed.
    """
    if not isinstance(data, dict):
        msg = "document must be an object"
        raise StateDecodeError(msg)

    raw_shapes = data.get("shapes", [])
    if not isinstance(raw_shapes, list):
        msg = "shapes must be a list"
        raise StateDecodeError(msg)
    shapes = tuple(shape_from_document(item, index) for index, item in enumerate(raw_shapes))
    ids = {s.id for s in shapes}
    if len(ids) != len(shapes):
        msg = "shape IDs must be unique"
        raise StateDecodeError(msg)

    raw_transform = data.get("transform", {})
    if not isinstance(raw_transform, dict):
        msg = "transform must be an object"
        raise StateDecodeError(msg)
    transform = Transform(
        pan_x=_number(raw_transform, "panX", "transform", 0.0),
        pan_y=_number(raw_transform, "panY", "transform", 0.0),
        zoom=_number(raw_transform, "zoom", "transform", 1.0),
    )

    selected = data.get("selectedShapeId")
    if not isinstance(selected, str) or selected not in ids:
        selected = None

    return EditorState(shapes=shapes, selected_shape_id=selected, transform=transform)


def dumps_state(state: EditorState) -> str:
    """Serialize an editor state to a JSON string."""
    return json.dumps(state_to_document(state), separators=(",", ":"))


def loads_state(raw: str | bytes) -> EditorState:
    """Parse an editor state from a JSON string.

    Raises:
        StateDecodeError: If the text is not valid JSON or not a valid document.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        msg = f"not valid JSON ({e})"
        raise StateDecodeError(msg) from e
    return state_from_document(data)
