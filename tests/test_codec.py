"""Tests for the persisted state document format."""

from __future__ import annotations

import json

import pytest

from shapeboard_py.core.models import MIN_SIZE, DraggingState, EditorState, Point, Rectangle, Transform
from shapeboard_py.exceptions import StateDecodeError
from shapeboard_py.storage.codec import dumps_state, loads_state, state_from_document, state_to_document


class TestEncoding:
    """Tests for writing state documents."""

    def test_document_layout(self, sample_rect: Rectangle) -> None:
        """Test the camelCase document written for a state."""
        state = EditorState(shapes=(sample_rect,), selected_shape_id="rect-1", transform=Transform(10.0, -5.0, 2.0))
        doc = state_to_document(state)
        assert doc == {
            "shapes": [
                {
                    "id": "rect-1",
                    "type": "rectangle",
                    "x": 50.0,
                    "y": 50.0,
                    "width": 100.0,
                    "height": 60.0,
                    "fill": "#4a90e2",
                    "stroke": "#1e3a8a",
                    "strokeWidth": 2.0,
                }
            ],
            "selectedShapeId": "rect-1",
            "transform": {"panX": 10.0, "panY": -5.0, "zoom": 2.0},
        }
        assert state_from_document(doc) == state

    def test_gesture_fields_not_written(self, sample_rect: Rectangle) -> None:
        """Test that an in-progress drag is not persisted."""
        dragging = DraggingState(shape_id="rect-1", start_world_pos=Point(0.0, 0.0), start_shape_pos=Point(50.0, 50.0))
        state = EditorState(shapes=(sample_rect,), dragging=dragging)
        raw = dumps_state(state)
        assert "dragging" not in raw
        assert loads_state(raw) == state.at_rest()

    def test_compact_output(self, board_state: EditorState) -> None:
        """Test that the serialized form is compact JSON."""
        raw = dumps_state(board_state)
        assert " " not in raw
        assert json.loads(raw)["shapes"][1]["id"] == "rect-2"


class TestDecoding:
    """Tests for reading state documents."""

    def test_defaults_for_optional_fields(self) -> None:
        """Test that styling and transform fall back to defaults."""
        state = state_from_document({"shapes": [{"id": "a", "x": 1, "y": 2, "width": 30, "height": 40}]})
        shape = state.shapes[0]
        assert shape.fill == "#4a90e2"
        assert shape.stroke_width == 2.0
        assert state.transform == Transform()
        assert state.selected_shape_id is None

    def test_small_sizes_raised_to_minimum(self) -> None:
        """Test that undersized shapes are clamped on load."""
        state = state_from_document({"shapes": [{"id": "a", "x": 0, "y": 0, "width": 1, "height": -5}]})
        assert (state.shapes[0].width, state.shapes[0].height) == (MIN_SIZE, MIN_SIZE)

    def test_dangling_selection_dropped(self) -> None:
        """Test that a selection of a missing shape is cleared."""
        state = state_from_document({"shapes": [], "selectedShapeId": "gone"})
        assert state.selected_shape_id is None

    @pytest.mark.parametrize("selected", [["a"], {"x": 1}, 7, True])
    def test_non_string_selection_dropped(self, selected: object) -> None:
        """Test that a selection that is not an ID is cleared instead of failing."""
        document = {"shapes": [{"id": "a", "x": 0, "y": 0, "width": 10, "height": 10}], "selectedShapeId": selected}
        assert state_from_document(document).selected_shape_id is None

    def test_zoom_clamped(self) -> None:
        """Test that an out-of-range zoom is clamped."""
        state = state_from_document({"shapes": [], "transform": {"panX": 0, "panY": 0, "zoom": 50}})
        assert state.transform.zoom == 5.0

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"shapes": {}},
            {"shapes": ["nope"]},
            {"shapes": [{"id": "a", "x": "1", "y": 0, "width": 10, "height": 10}]},
            {"shapes": [{"id": "a", "x": True, "y": 0, "width": 10, "height": 10}]},
            {"shapes": [{"id": "", "x": 0, "y": 0, "width": 10, "height": 10}]},
            {"shapes": [{"id": "a", "type": "ellipse", "x": 0, "y": 0, "width": 10, "height": 10}]},
            {"shapes": [{"id": "a", "x": 0, "y": 0, "width": 10, "height": 10}] * 2},
            {"shapes": [{"id": "a", "x": 10**400, "y": 0, "width": 10, "height": 10}]},
            {"shapes": [], "transform": []},
            {"shapes": [], "transform": {"zoom": float("nan")}},
            {"shapes": [], "transform": {"zoom": 10**400}},
        ],
    )
    def test_invalid_documents(self, document: object) -> None:
        """Test that malformed documents are rejected."""
        with pytest.raises(StateDecodeError):
            state_from_document(document)

    def test_invalid_json(self) -> None:
        """Test that text that is not JSON is rejected."""
        with pytest.raises(StateDecodeError, match="not valid JSON"):
            loads_state("{not json")

    def test_huge_integer_in_json(self) -> None:
        """Test that an integer too large for a float is rejected as a decode error."""
        with pytest.raises(StateDecodeError, match="finite number"):
            loads_state('{"shapes":[],"transform":{"zoom":1' + "0" * 400 + "}}")

    def test_deeply_nested_json(self) -> None:
        """Test that nesting beyond the parser's limit is a decode error."""
        with pytest.raises(StateDecodeError):
            loads_state("[" * 100_000 + "]" * 100_000)
