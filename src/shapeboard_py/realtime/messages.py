"""WebSocket message types and schemas for board sessions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from shapeboard_py.core.interaction import PointerEvent
from shapeboard_py.core.models import Point
from shapeboard_py.core.shortcuts import KeyEvent
from shapeboard_py.core.types import Modifier, PointerButton
from shapeboard_py.exceptions import InvalidMessageError


class MessageType(str, Enum):
    """Types of WebSocket messages."""

    # Client -> Server
    JOIN = "join"
    POINTER_DOWN = "pointer_down"
    POINTER_MOVE = "pointer_move"
    POINTER_UP = "pointer_up"
    POINTER_LEAVE = "pointer_leave"
    DOUBLE_CLICK = "double_click"
    WHEEL = "wheel"
    KEY_DOWN = "key_down"
    UNDO = "undo"
    REDO = "redo"
    DELETE = "delete"
    CANCEL = "cancel"

    # Server -> Client
    RENDER = "render"
    SYNCED = "synced"
    TAB_JOINED = "tab_joined"
    TAB_LEFT = "tab_left"
    ERROR = "error"


@dataclass
class RenderMessage:
    """Message carrying the state a tab should paint."""

    board_id: str
    snapshot: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.RENDER.value,
            "timestamp": self.timestamp.isoformat(),
            "board_id": self.board_id,
            **self.snapshot,
        }


@dataclass
class SyncedMessage:
    """Message confirming a tab joined, with its session details."""

    board_id: str
    session_id: str
    open_tabs: int
    undo_shortcut: str
    redo_shortcut: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.SYNCED.value,
            "timestamp": self.timestamp.isoformat(),
            "board_id": self.board_id,
            "session_id": self.session_id,
            "open_tabs": self.open_tabs,
            "shortcuts": {"undo": self.undo_shortcut, "redo": self.redo_shortcut},
        }


@dataclass
class TabMessage:
    """Message announcing that another tab joined or left the board."""

    type: MessageType
    board_id: str
    session_id: str
    open_tabs: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "board_id": self.board_id,
            "session_id": self.session_id,
            "open_tabs": self.open_tabs,
        }


@dataclass
class ErrorMessage:
    """Message sent when an error occurs."""

    code: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.ERROR.value,
            "timestamp": self.timestamp.isoformat(),
            "code": self.code,
            "message": self.message,
        }


# Payload parsing


def _number(message: dict[str, Any], key: str, default: float | None = None) -> float:
    value = message.get(key, default)
    msg = f"'{key}' must be a finite number"
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidMessageError(msg)
    try:
        number = float(value)
    except OverflowError as e:
        raise InvalidMessageError(msg) from e
    if not math.isfinite(number):
        raise InvalidMessageError(msg)
    return number


def parse_point(message: dict[str, Any]) -> Point:
    """Read the ``x``/``y`` screen position of a message.

    Raises:
        InvalidMessageError: If a coordinate is missing or not a number.
    """
    return Point(_number(message, "x"), _number(message, "y"))


def parse_pointer_event(message: dict[str, Any]) -> PointerEvent:
    """Build a pointer event from a message.

    ``button`` defaults to ``left`` and ``modifiers`` to none.

    Raises:
        InvalidMessageError: If the payload is invalid.
    """
    point = parse_point(message)
    try:
        button = PointerButton(message.get("button", PointerButton.LEFT.value))
        modifiers = frozenset(Modifier(m) for m in message.get("modifiers", []))
    except (TypeError, ValueError) as e:
        msg = f"Invalid pointer button or modifiers: {e}"
        raise InvalidMessageError(msg) from e
    return PointerEvent(point.x, point.y, button=button, modifiers=modifiers)


def parse_key_event(message: dict[str, Any]) -> KeyEvent:
    """Build a key event from a message.

    Raises:
        InvalidMessageError: If ``key`` is missing.
    """
    key = message.get("key")
    if not isinstance(key, str) or not key:
        msg = "'key' must be a non-empty string"
        raise InvalidMessageError(msg)
    return KeyEvent(
        key=key,
        ctrl=bool(message.get("ctrl", False)),
        meta=bool(message.get("meta", False)),
        shift=bool(message.get("shift", False)),
    )


def parse_wheel(message: dict[str, Any]) -> tuple[float, Point]:
    """Read the wheel delta and cursor position of a message.

    Raises:
        InvalidMessageError: If the payload is invalid.
    """
    return _number(message, "delta_y"), parse_point(message)
