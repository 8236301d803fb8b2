"""Command line extensions for shapeboard-py."""

from shapeboard_py.cli.board import ShapeboardCLIPlugin, board_group

__all__ = ["ShapeboardCLIPlugin", "board_group"]
