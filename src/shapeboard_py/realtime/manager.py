"""Connection manager for board WebSocket sessions."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from shapeboard_py.realtime.messages import RenderMessage

if TYPE_CHECKING:
    from litestar import WebSocket

    from shapeboard_py.services.board import EditorSession

logger = structlog.get_logger(__name__)


@dataclass
class ConnectedTab:
    """A browser tab connected to a board."""

    websocket: WebSocket
    session: EditorSession
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def session_id(self) -> str:
        """The ID of the tab's editing session."""
        return self.session.session_id

    @property
    def board_id(self) -> str:
        """The board the tab is editing."""
        return self.session.board_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "board_id": self.board_id,
            "connected_at": self.connected_at.isoformat(),
        }


class ConnectionManager:
    """Manages WebSocket connections for board sessions.

    Tracks the connected tabs of each board and sends messages to them. The
    render sink lives here: ``render_dirty`` sends one render message to each
    tab whose session changed since its last render.
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        self._connections: dict[str, dict[str, ConnectedTab]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, session: EditorSession) -> ConnectedTab:
        """Register a new tab.

        Args:
            websocket: The WebSocket connection.
            session: The tab's editing session.

        Returns:
            The ConnectedTab instance.
        """
        async with self._lock:
            tab = ConnectedTab(websocket=websocket, session=session)
            self._connections.setdefault(session.board_id, {})[session.session_id] = tab
            logger.info(
                "Tab connected",
                board_id=session.board_id,
                session_id=session.session_id,
                total_tabs=len(self._connections[session.board_id]),
            )
            return tab

    async def disconnect(self, board_id: str, session_id: str) -> None:
        """Remove a tab.

        Args:
            board_id: The board being left.
            session_id: The tab's session ID.
        """
        async with self._lock:
            tabs = self._connections.get(board_id)
            if tabs is None:
                return
            if tabs.pop(session_id, None) is not None:
                logger.info(
                    "Tab disconnected",
                    board_id=board_id,
                    session_id=session_id,
                    remaining_tabs=len(tabs),
                )
            if not tabs:
                del self._connections[board_id]
                logger.info("Board has no open tabs", board_id=board_id)

    async def get_tabs(self, board_id: str) -> list[ConnectedTab]:
        """Get all tabs connected to a board.

        Args:
            board_id: The board to query.
        """
        async with self._lock:
            return list(self._connections.get(board_id, {}).values())

    async def broadcast(
        self,
        board_id: str,
        message: dict[str, Any],
        exclude_session: str | None = None,
    ) -> None:
        """Broadcast a message to all tabs of a board.

        Args:
            board_id: The board to broadcast to.
            message: The message to send.
            exclude_session: Optional session ID to exclude from broadcast.
        """
        tabs = await self.get_tabs(board_id)
        json_message = json.dumps(message)

        tasks = [self._send_to_tab(tab, json_message) for tab in tabs if tab.session_id != exclude_session]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def render_dirty(self, board_id: str) -> int:
        """Send a render message to every tab of a board whose state changed.

        Args:
            board_id: The board to render.

        Returns:
            Number of tabs rendered.
        """
        tabs = [tab for tab in await self.get_tabs(board_id) if tab.session.consume_dirty()]
        tasks = [
            self._send_to_tab(tab, json.dumps(RenderMessage(board_id=board_id, snapshot=tab.session.snapshot()).to_dict()))
            for tab in tabs
        ]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        return len(tasks)

    async def _send_to_tab(self, tab: ConnectedTab, message: str) -> None:
        """Internal method to send a message to a tab.

        Args:
            tab: The connected tab.
            message: The JSON message string.
        """
        try:
            await tab.websocket.send_text(message)
        except Exception:
            logger.exception(
                "Failed to send message",
                session_id=tab.session_id,
                board_id=tab.board_id,
            )

    @property
    def active_boards(self) -> int:
        """Get the number of boards with connected tabs."""
        return len(self._connections)

    @property
    def total_connections(self) -> int:
        """Get the total number of connected tabs."""
        return sum(len(tabs) for tabs in self._connections.values())

    def tab_count(self, board_id: str) -> int:
        """Get the number of tabs connected to a board."""
        return len(self._connections.get(board_id, {}))
