"""Board inspection CLI commands for shapeboard-py.

Works on the file storage directory given by ``--state-dir`` or the
``SHAPEBOARD_STATE_DIR`` environment variable.
"""

from __future__ import annotations

import rich_click as click
from litestar.plugins import CLIPluginProtocol
from rich.console import Console
from rich.table import Table

from shapeboard_py.exceptions import StateDecodeError, StorageError
from shapeboard_py.storage.codec import loads_state
from shapeboard_py.storage.file import FileStateStorage

console = Console()

DEFAULT_STATE_DIR = "./boards"

state_dir_option = click.option(
    "--state-dir",
    "-d",
    envvar="SHAPEBOARD_STATE_DIR",
    default=DEFAULT_STATE_DIR,
    show_default=True,
    help="Directory holding saved board documents",
)


@click.group(name="board", help="Inspect and manage saved board state.")
def board_group() -> None:
    """Inspect and manage saved board state."""


@board_group.command(name="list", help="List boards with saved state.")
@state_dir_option
def list_boards(state_dir: str) -> None:
    """List boards with saved state."""
    storage = FileStateStorage(state_dir)
    boards = storage.list_boards()
    if not boards:
        console.print(f"[yellow]No saved boards in {storage.directory}[/yellow]")
        return

    table = Table(title=f"Boards in {storage.directory}")
    table.add_column("Board", style="cyan")
    table.add_column("Size", style="green", justify="right")
    for board_id in boards:
        table.add_row(board_id, f"{storage.path_for(board_id).stat().st_size} B")
    console.print(table)


@board_group.command(name="show", help="Show the shapes of a board.")
@click.argument("board_id")
@state_dir_option
def show_board(board_id: str, state_dir: str) -> None:
    """Show the shapes of a board."""
    storage = FileStateStorage(state_dir)
    try:
        raw = storage.read_document(board_id)
        if raw is None:
            console.print(f"[yellow]Board {board_id} has no saved state[/yellow]")
            return
        state = loads_state(raw)
    except (StorageError, StateDecodeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    transform = state.transform
    table = Table(title=f"Board {board_id} ({len(state.shapes)} shapes)")
    table.add_column("ID", style="dim")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")
    table.add_column("Fill", style="magenta")
    table.add_column("Selected", style="green")

    for shape in state.shapes:
        table.add_row(
            shape.id,
            f"{shape.x:g}",
            f"{shape.y:g}",
            f"{shape.width:g}",
            f"{shape.height:g}",
            shape.fill,
            "*" if shape.id == state.selected_shape_id else "",
        )

    console.print(table)
    console.print(
        f"[dim]View: pan=({transform.pan_x:g}, {transform.pan_y:g}) zoom={transform.zoom:g}[/dim]"
    )


@board_group.command(name="clear", help="Delete the saved state of a board.")
@click.argument("board_id")
@state_dir_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def clear_board(board_id: str, state_dir: str, yes: bool) -> None:
    """Delete the saved state of a board."""
    storage = FileStateStorage(state_dir)
    if not yes and not click.confirm(f"Delete saved state of board {board_id}?"):
        console.print("[dim]Aborted[/dim]")
        return
    try:
        deleted = storage.delete_document(board_id)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    if deleted:
        console.print(f"[green]Cleared board {board_id}[/green]")
    else:
        console.print(f"[yellow]Board {board_id} has no saved state[/yellow]")


class ShapeboardCLIPlugin(CLIPluginProtocol):
    """CLI plugin that adds the `board` command group.

    Subcommands:
    - list: List boards with saved state
    - show: Show the shapes of a board
    - clear: Delete the saved state of a board
    """

    def on_cli_init(self, cli: click.Group) -> None:
        """Register the board command group."""
        cli.add_command(board_group)
