"""Keyboard shortcut recognition and platform-dependent labels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

UNDO_KEY = "z"
DELETE_KEYS = frozenset({"delete", "backspace"})
CANCEL_KEY = "escape"


class OperatingSystem(StrEnum):
    """Operating systems distinguished for shortcut labels."""

    MAC = "mac"
    WINDOWS = "windows"
    LINUX = "linux"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class KeyEvent:
    """A key press forwarded by the client.

    Attributes:
        key: The key value, e.g. ``"z"`` or ``"Escape"``.
        ctrl: Whether Control was held.
        meta: Whether Meta (Cmd on macOS) was held.
        shift: Whether Shift was held.
    """

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def primary(self) -> bool:
        """Whether the platform's primary modifier (Ctrl or Cmd) was held."""
        return self.ctrl or self.meta


def detect_os(user_agent: str | None) -> OperatingSystem:
    """Detect the operating system from a user agent string."""
    if not user_agent:
        return OperatingSystem.UNKNOWN
    agent = user_agent.lower()
    if "mac" in agent or "iphone" in agent:
        return OperatingSystem.MAC
    if "win" in agent:
        return OperatingSystem.WINDOWS
    if "linux" in agent:
        return OperatingSystem.LINUX
    return OperatingSystem.UNKNOWN


def get_modifier_key(os_name: OperatingSystem) -> str:
    """Return the name of the primary modifier key."""
    return "Cmd" if os_name is OperatingSystem.MAC else "Ctrl"


def get_modifier_symbol(os_name: OperatingSystem) -> str:
    """Return the display symbol of the primary modifier key."""
    return "⌘" if os_name is OperatingSystem.MAC else "Ctrl"


def get_undo_shortcut(os_name: OperatingSystem) -> str:
    """Return the undo shortcut label, e.g. ``Ctrl+Z``."""
    return f"{get_modifier_symbol(os_name)}+Z"


def get_redo_shortcut(os_name: OperatingSystem) -> str:
    """Return the redo shortcut label, e.g. ``Ctrl+Shift+Z``."""
    return f"{get_modifier_symbol(os_name)}+Shift+Z"


def is_undo_shortcut(event: KeyEvent) -> bool:
    """Check for primary-modifier+Z."""
    return event.primary and not event.shift and event.key.lower() == UNDO_KEY


def is_redo_shortcut(event: KeyEvent) -> bool:
    """Check for primary-modifier+Shift+Z."""
    return event.primary and event.shift and event.key.lower() == UNDO_KEY


def is_delete_key(event: KeyEvent) -> bool:
    """Check for Delete or Backspace without the primary modifier."""
    return not event.primary and event.key.lower() in DELETE_KEYS


def is_cancel_key(event: KeyEvent) -> bool:
    """Check for Escape."""
    return event.key.lower() == CANCEL_KEY
