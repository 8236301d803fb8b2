"""Service layer for shapeboard-py."""

from shapeboard_py.services.board import BoardService, BoardStats, EditorSession

__all__ = ["BoardService", "BoardStats", "EditorSession"]
