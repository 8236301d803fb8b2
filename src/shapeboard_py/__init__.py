"""Shapeboard-py: an interactive rectangle editor engine served with Litestar.

The core is a pure-Python editing engine: world/screen coordinate transforms,
a scene of rectangles, resize handles, a pointer-driven interaction state
machine (select, pan, drag, resize) and a linear undo/redo history that keeps
transient gesture frames out of committed snapshots. Around it sit storage
backends, per-tab editing sessions with cross-tab sync, a WebSocket endpoint,
a small REST API, and a Litestar plugin for integration.

Key Components:
    - Core: EditorState, Rectangle, Transform, InteractionStateMachine, HistoryManager
    - Storage: InMemoryStateStorage, FileStateStorage, DatabaseStateStorage (db extra)
    - Services: BoardService, EditorSession
    - Realtime: BoardWebSocketHandler, ConnectionManager
    - Plugin: ShapeboardPlugin for Litestar integration

Quick Start:
    >>> from litestar import Litestar
    >>> from shapeboard_py import ShapeboardPlugin, ShapeboardConfig
    >>>
    >>> app = Litestar(plugins=[ShapeboardPlugin(ShapeboardConfig())])

Using the engine directly:
    >>> from shapeboard_py import HistoryManager, InteractionStateMachine, Point
    >>> from shapeboard_py.core.scene import create_initial_state
    >>>
    >>> machine = InteractionStateMachine(HistoryManager(create_initial_state()))
    >>> rect = machine.double_activate(Point(50, 50))
    >>> machine.undo()
    True
"""

from __future__ import annotations

from shapeboard_py.core import (
    EditorState,
    HistoryManager,
    InteractionStateMachine,
    KeyEvent,
    Point,
    PointerEvent,
    Rectangle,
    Transform,
)
from shapeboard_py.exceptions import (
    BoardNotFoundError,
    InvalidMessageError,
    ShapeboardError,
    ShapeNotFoundError,
    StateDecodeError,
    StorageError,
)
from shapeboard_py.plugin import ShapeboardConfig, ShapeboardPlugin
from shapeboard_py.realtime import BoardWebSocketHandler, ConnectionManager, MessageType, create_websocket_handler
from shapeboard_py.services import BoardService, EditorSession
from shapeboard_py.storage import FileStateStorage, InMemoryStateStorage, StateStorageProtocol
from shapeboard_py.web import BoardController, HealthController, create_router

__all__ = [
    "BoardController",
    "BoardNotFoundError",
    "BoardService",
    "BoardWebSocketHandler",
    "ConnectionManager",
    "EditorSession",
    "EditorState",
    "FileStateStorage",
    "HealthController",
    "HistoryManager",
    "InMemoryStateStorage",
    "InteractionStateMachine",
    "InvalidMessageError",
    "KeyEvent",
    "MessageType",
    "Point",
    "PointerEvent",
    "Rectangle",
    "ShapeNotFoundError",
    "ShapeboardConfig",
    "ShapeboardError",
    "ShapeboardPlugin",
    "StateDecodeError",
    "StateStorageProtocol",
    "StorageError",
    "Transform",
    "__version__",
    "create_router",
    "create_websocket_handler",
]

__version__ = "0.1.0"
