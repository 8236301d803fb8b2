"""Realtime WebSocket support for shapeboard-py."""

from shapeboard_py.realtime.handler import BoardWebSocketHandler, create_websocket_handler
from shapeboard_py.realtime.manager import ConnectedTab, ConnectionManager
from shapeboard_py.realtime.messages import MessageType

__all__ = [
    "BoardWebSocketHandler",
    "ConnectedTab",
    "ConnectionManager",
    "MessageType",
    "create_websocket_handler",
]
