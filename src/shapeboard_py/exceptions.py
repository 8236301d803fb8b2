"""Custom exceptions for shapeboard-py.

Core lookups never raise; they return ``None`` on a miss. These exceptions
belong to the service and adapter layers.
"""

from __future__ import annotations


class ShapeboardError(Exception):
    """Base exception class for all shapeboard-py errors."""


class ShapeNotFoundError(ShapeboardError):
    """Raised when a shape with the specified ID cannot be found.

    Attributes:
        shape_id: The ID of the shape that was not found.
    """

    def __init__(self, shape_id: str) -> None:
        """Initialize the exception with the shape ID.

        Args:
            shape_id: The ID of the shape that was not found.
        """
        self.shape_id = shape_id
        super().__init__(f"Shape with ID {shape_id} not found")


class BoardNotFoundError(ShapeboardError):
    """Raised when a board has no saved state and no open sessions.

    Attributes:
        board_id: The ID of the board that was not found.
    """

    def __init__(self, board_id: str) -> None:
        """Initialize the exception with the board ID.

        Args:
            board_id: The ID of the board that was not found.
        """
        self.board_id = board_id
        super().__init__(f"Board with ID {board_id} not found")


class StorageError(ShapeboardError):
    """Raised when a storage backend cannot read or write state."""


class StateDecodeError(ShapeboardError):
    """Raised when a persisted state document is malformed.

    Attributes:
        reason: Description of what is wrong with the document.
    """

    def __init__(self, reason: str) -> None:
        """Initialize the exception with a reason.

        Args:
            reason: Description of what is wrong with the document.
        """
        self.reason = reason
        super().__init__(f"Invalid state document: {reason}")


class InvalidMessageError(ShapeboardError):
    """Raised when a realtime message payload is missing or has invalid fields."""
