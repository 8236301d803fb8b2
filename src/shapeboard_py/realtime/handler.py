"""WebSocket handler driving board editing sessions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from litestar import Router, WebSocket, websocket

from shapeboard_py.core.shortcuts import detect_os, get_redo_shortcut, get_undo_shortcut
from shapeboard_py.exceptions import InvalidMessageError
from shapeboard_py.realtime.manager import ConnectionManager
from shapeboard_py.realtime.messages import (
    ErrorMessage,
    MessageType,
    SyncedMessage,
    TabMessage,
    parse_key_event,
    parse_point,
    parse_pointer_event,
    parse_wheel,
)
from shapeboard_py.storage.file import BOARD_ID_PATTERN

if TYPE_CHECKING:
    from collections.abc import Callable

    from shapeboard_py.core.interaction import InteractionStateMachine
    from shapeboard_py.services.board import BoardService, EditorSession

logger = structlog.get_logger(__name__)

INVALID_BOARD_CLOSE_CODE = 4000


class BoardWebSocketHandler:
    """Handler for board WebSocket connections.

    Each connection is one tab with its own editing session. Input messages
    are applied to the session, the result is saved and synced to the board's
    other tabs, and every tab whose state changed receives one render message.
    """

    def __init__(self, connection_manager: ConnectionManager, board_service: BoardService) -> None:
        """Initialize the WebSocket handler.

        Args:
            connection_manager: The connection manager instance.
            board_service: The board service instance.
        """
        self._manager = connection_manager
        self._service = board_service

    async def handle_connection(self, socket: WebSocket, board_id: str) -> None:
        """Handle a WebSocket connection for a board.

        Args:
            socket: The WebSocket connection.
            board_id: The board ID from the URL.
        """
        if not BOARD_ID_PATTERN.match(board_id):
            await socket.close(code=INVALID_BOARD_CLOSE_CODE, reason="Invalid board ID")
            return

        await socket.accept()
        session = await self._service.open_session(board_id)
        await self._manager.connect(socket, session)

        with structlog.contextvars.bound_contextvars(board_id=board_id, session_id=session.session_id):
            logger.debug("WebSocket connection accepted")
            await self._announce(MessageType.TAB_JOINED, session)
            await self._manager.render_dirty(board_id)
            try:
                await self._receive_loop(socket, session)
            except Exception:
                logger.exception("WebSocket error")
            finally:
                await self._handle_disconnect(session)

    async def _receive_loop(self, socket: WebSocket, session: EditorSession) -> None:
        """Main receive loop for WebSocket messages.

        Args:
            socket: The WebSocket connection.
            session: The tab's editing session.
        """
        async for message in socket.iter_data():
            try:
                data = json.loads(message)
            except (json.JSONDecodeError, UnicodeDecodeError):
                await self._send_error(socket, "invalid_json", "Invalid JSON message")
                continue

            if not isinstance(data, dict):
                await self._send_error(socket, "invalid_message", "Message must be a JSON object")
                continue

            msg_type = data.get("type")
            if not msg_type:
                await self._send_error(socket, "missing_type", "Message type is required")
                continue

            try:
                await self._handle_message(socket, session, data)
            except InvalidMessageError as e:
                await self._send_error(socket, "invalid_payload", str(e))
            except Exception:
                logger.exception("Error handling message", message_type=msg_type)
                await self._send_error(socket, "internal_error", "Internal server error")

            await self._manager.render_dirty(session.board_id)

    async def _handle_disconnect(self, session: EditorSession) -> None:
        """Handle WebSocket disconnection.

        Args:
            session: The tab's editing session.
        """
        await self._manager.disconnect(session.board_id, session.session_id)
        await self._service.close_session(session)
        await self._announce(MessageType.TAB_LEFT, session)
        await self._manager.render_dirty(session.board_id)
        logger.info("Tab left board")

    async def _handle_message(self, socket: WebSocket, session: EditorSession, message: dict[str, Any]) -> None:
        """Route a message to the session.

        Args:
            socket: The WebSocket connection.
            session: The tab's editing session.
            message: The parsed message.
        """
        msg_type = message.get("type")
        if msg_type == MessageType.JOIN.value:
            await self._handle_join(socket, session, message)
            return

        action = self._input_action(msg_type, message)
        if action is None:
            await self._send_error(socket, "unknown_type", f"Unknown message type: {msg_type}")
            return
        await self._service.handle(session, action)

    def _input_action(self, msg_type: Any, message: dict[str, Any]) -> Callable[[InteractionStateMachine], Any] | None:
        """Translate an input message into an action on the state machine.

        Payloads are parsed here, before the action runs, so an invalid
        message never touches the session.

        Raises:
            InvalidMessageError: If the payload is invalid.
        """
        match msg_type:
            case MessageType.POINTER_DOWN.value:
                event = parse_pointer_event(message)
                return lambda machine: machine.pointer_down(event)
            case MessageType.POINTER_MOVE.value:
                event = parse_pointer_event(message)
                return lambda machine: machine.pointer_move(event)
            case MessageType.POINTER_UP.value:
                return lambda machine: machine.pointer_up()
            case MessageType.POINTER_LEAVE.value:
                return lambda machine: machine.pointer_leave()
            case MessageType.DOUBLE_CLICK.value:
                point = parse_point(message)
                return lambda machine: machine.double_activate(point)
            case MessageType.WHEEL.value:
                delta_y, point = parse_wheel(message)
                return lambda machine: machine.wheel(delta_y, point)
            case MessageType.KEY_DOWN.value:
                key_event = parse_key_event(message)
                return lambda machine: machine.key_down(key_event)
            case MessageType.UNDO.value:
                return lambda machine: machine.undo()
            case MessageType.REDO.value:
                return lambda machine: machine.redo()
            case MessageType.DELETE.value:
                return lambda machine: machine.delete_selected()
            case MessageType.CANCEL.value:
                return lambda machine: machine.cancel_gesture()
        return None

    async def _handle_join(self, socket: WebSocket, session: EditorSession, message: dict[str, Any]) -> None:
        """Reply with the session details and shortcut hints for the tab's platform.

        Args:
            socket: The WebSocket connection.
            session: The tab's editing session.
            message: The join message, optionally carrying ``user_agent``.
        """
        user_agent = message.get("user_agent") or socket.headers.get("user-agent")
        os_name = detect_os(user_agent if isinstance(user_agent, str) else None)
        synced = SyncedMessage(
            board_id=session.board_id,
            session_id=session.session_id,
            open_tabs=self._manager.tab_count(session.board_id),
            undo_shortcut=get_undo_shortcut(os_name),
            redo_shortcut=get_redo_shortcut(os_name),
        )
        await socket.send_json(synced.to_dict())
        session.invalidate()
        logger.debug("Tab joined", os=os_name.value)

    async def _announce(self, msg_type: MessageType, session: EditorSession) -> None:
        message = TabMessage(
            type=msg_type,
            board_id=session.board_id,
            session_id=session.session_id,
            open_tabs=self._manager.tab_count(session.board_id),
        )
        await self._manager.broadcast(session.board_id, message.to_dict(), exclude_session=session.session_id)

    async def _send_error(self, socket: WebSocket, code: str, message: str) -> None:
        """Send an error message to the client.

        Args:
            socket: The WebSocket connection.
            code: Error code.
            message: Error message.
        """
        await socket.send_json(ErrorMessage(code=code, message=message).to_dict())


def create_websocket_handler(
    path: str,
    connection_manager: ConnectionManager,
    board_service: BoardService,
) -> Router:
    """Create a WebSocket router for board editing sessions.

    Args:
        path: Base path for WebSocket routes.
        connection_manager: The connection manager instance.
        board_service: The board service instance.

    Returns:
        A Litestar Router with WebSocket handlers.
    """
    handler = BoardWebSocketHandler(connection_manager, board_service)

    @websocket(path="/boards/{board_id:str}")
    async def board_websocket(socket: WebSocket, board_id: str) -> None:
        """WebSocket endpoint for one tab editing a board.

        Args:
            socket: The WebSocket connection.
            board_id: The board ID from the URL.
        """
        await handler.handle_connection(socket, board_id)

    return Router(path=path, route_handlers=[board_websocket], tags=["WebSocket"])
