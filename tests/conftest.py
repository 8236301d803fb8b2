"""Pytest configuration and fixtures for shapeboard-py tests."""

from __future__ import annotations

import pytest

from shapeboard_py.core.history import HistoryManager
from shapeboard_py.core.interaction import InteractionStateMachine
from shapeboard_py.core.models import EditorState, Rectangle, Transform
from shapeboard_py.core.scene import create_initial_state
from shapeboard_py.services.board import BoardService
from shapeboard_py.storage.memory import InMemoryStateStorage


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


# Model fixtures


@pytest.fixture
def sample_rect() -> Rectangle:
    """Create a 100x60 rectangle at (50, 50)."""
    return Rectangle(id="rect-1", x=50.0, y=50.0, width=100.0, height=60.0)


@pytest.fixture
def other_rect() -> Rectangle:
    """Create a second rectangle away from the first."""
    return Rectangle(id="rect-2", x=300.0, y=300.0, width=40.0, height=40.0)


@pytest.fixture
def board_state(sample_rect: Rectangle, other_rect: Rectangle) -> EditorState:
    """Create a state with two shapes and nothing selected."""
    return EditorState(shapes=(sample_rect, other_rect), transform=Transform())


# Engine fixtures


@pytest.fixture
def history(board_state: EditorState) -> HistoryManager:
    """Create a history manager starting from the two-shape board."""
    return HistoryManager(board_state)


@pytest.fixture
def machine(history: HistoryManager) -> InteractionStateMachine:
    """Create a state machine over the two-shape board."""
    return InteractionStateMachine(history)


@pytest.fixture
def empty_machine() -> InteractionStateMachine:
    """Create a state machine over an empty board."""
    return InteractionStateMachine(HistoryManager(create_initial_state()))


# Storage and service fixtures


@pytest.fixture
def storage() -> InMemoryStateStorage:
    """Create a fresh InMemoryStateStorage instance for each test."""
    return InMemoryStateStorage()


@pytest.fixture
def service(storage: InMemoryStateStorage) -> BoardService:
    """Create a BoardService backed by in-memory storage."""
    return BoardService(storage)
