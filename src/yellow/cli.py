"""CLI for yellow.

Keyboard-driven memos kept in a local JSON file. Running ``yellow`` with no
command opens the terminal UI; the other commands read the same file for
scripting.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import RETENTION, get_data_path, load_config
from .log import setup_logging
from .models import Memo, MemoData
from .storage import Storage, StorageError

logger = logging.getLogger(__name__)

# Main help text - shown with `yellow --help`
MAIN_HELP = """
Keyboard-driven memos in a local file.

QUICK START:
  yellow                       Open the memo browser
  yellow list                  Print active memos
  yellow list --deleted        Print memos in the trash
  yellow stats                 Counts and next purge time
  yellow export backup.json    Copy all memos to another file

IN THE BROWSER:
  Tab          New memo
  Enter        Edit selected memo
  Delete       Move selected memo to the trash
  /            Filter by text
  Esc          Save and return (editor) / clear filter (list)
  q, Ctrl+C    Quit (Ctrl+C in the editor discards the edit)

TRASH:
  Deleted memos are kept for 7 days, then purged the next time
  the file is loaded.

FILE:
  Default location: ./.yellow.json (log: ./.yellow.log)
  Override with: --file PATH or YELLOW_FILE env var
  --file and --global work before or after the command name
"""

app = typer.Typer(
    name="yellow",
    help=MAIN_HELP,
    rich_markup_mode="markdown",
)

console = Console()

# Global options with detailed help
FileOption = Annotated[
    Optional[str],
    typer.Option(
        "--file", "-f",
        help="Memo file path. Overrides all other resolution.",
        envvar="YELLOW_FILE",
    ),
]
GlobalOption = Annotated[
    bool,
    typer.Option(
        "--global", "-g",
        help="Use the global memo file (~/.yellow/memos.json).",
    ),
]
LogOption = Annotated[
    Optional[str],
    typer.Option(
        "--log",
        help="Log file path. Defaults to the memo file with a .log suffix.",
        envvar="YELLOW_LOG",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json", "-j",
        help="Output as JSON.",
    ),
]
QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet", "-q",
        help="Minimal output: just IDs for scripting.",
    ),
]


def _load(
    ctx: typer.Context, file: Optional[str], use_global: bool = False
) -> tuple[Path, MemoData]:
    """Load the memo file or exit with an error message.

    Options given before the command name (`yellow --file x list`) apply
    when the command does not set its own.
    """
    root = ctx.obj or {}
    file = file or root.get("file")
    use_global = use_global or root.get("use_global", False)
    path = get_data_path(file, use_global=use_global)
    try:
        return path, Storage(path).load()
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def _output_memos(memos: list[Memo], as_json: bool = False, quiet: bool = False) -> None:
    """Output memos in the requested format."""
    if quiet:
        for m in memos:
            typer.echo(m.id)
        return

    if as_json:
        data = []
        for m in memos:
            item = m.model_dump(mode="json", exclude_none=True)
            item["title"] = m.title
            data.append(item)
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if not memos:
        typer.echo("No memos found.")
        return

    show_deleted = any(m.deleted_at for m in memos)

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Title", max_width=53)
    table.add_column("Updated", style="green")
    if show_deleted:
        table.add_column("Deleted", style="red")

    for m in memos:
        row = [m.id, m.title, _format_time(m.updated_at)]
        if show_deleted:
            row.append(_format_time(m.deleted_at))
        table.add_row(*row)

    console.print(table)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    file: FileOption = None,
    use_global: GlobalOption = False,
    log: LogOption = None,
) -> None:
    """Open the memo browser when no command is given."""
    ctx.obj = {"file": file, "use_global": use_global}
    if ctx.invoked_subcommand is not None:
        return

    from .app import YellowApp
    from . import tui

    config = load_config(file, log, use_global=use_global)
    setup_logging(config.log_path)
    logger.info("Starting with %s", config.data_path)

    try:
        tui.run(YellowApp(Storage(config.data_path)))
    except Exception as e:
        logger.exception("Terminal UI terminated abnormally")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


LIST_HELP = """
List memos, newest first.

EXAMPLES:
  yellow list                 Active memos as a table
  yellow list --deleted       Memos in the trash
  yellow list --json          JSON array for parsing
  yellow list -n 5 --quiet    IDs of the five newest memos
"""


@app.command("list", help=LIST_HELP)
def list_memos(
    ctx: typer.Context,
    deleted: Annotated[
        bool,
        typer.Option(
            "--deleted", "-d",
            help="List memos in the trash instead of active ones.",
        ),
    ] = False,
    limit: Annotated[
        int,
        typer.Option(
            "--limit", "-n",
            help="Maximum number of results.",
            min=1,
        ),
    ] = 50,
    file: FileOption = None,
    use_global: GlobalOption = False,
    output_json: JsonOption = False,
    quiet: QuietOption = False,
) -> None:
    """List active or deleted memos."""
    _, data = _load(ctx, file, use_global)

    if deleted:
        memos = sorted(data.deleted, key=lambda m: m.deleted_at, reverse=True)
    else:
        memos = sorted(data.active, key=lambda m: m.updated_at, reverse=True)

    _output_memos(memos[:limit], output_json, quiet)


STATS_HELP = """
Show memo file statistics: counts, size and the next purge.

EXAMPLES:
  yellow stats          Human-readable output
  yellow stats --json   {"active_count": 12, "deleted_count": 2, ...}
"""


@app.command(help=STATS_HELP)
def stats(
    ctx: typer.Context,
    file: FileOption = None,
    use_global: GlobalOption = False,
    output_json: JsonOption = False,
) -> None:
    """Show memo file statistics."""
    path, data = _load(ctx, file, use_global)

    size = path.stat().st_size if path.exists() else 0
    purge_times = [m.deleted_at + RETENTION for m in data.deleted if m.deleted_at]
    next_purge = min(purge_times) if purge_times else None

    stats_data = {
        "file_path": str(path),
        "file_size_bytes": size,
        "active_count": len(data.active),
        "deleted_count": len(data.deleted),
        "next_purge": next_purge.isoformat() if next_purge else None,
    }

    if output_json:
        typer.echo(json.dumps(stats_data, indent=2))
        return

    typer.echo(f"File: {path}")
    typer.echo(f"Size: {size:,} bytes")
    typer.echo(f"Memos: {len(data.active)}")
    typer.echo(f"In trash: {len(data.deleted)}")
    if next_purge:
        typer.echo(f"Next purge: {_format_time(next_purge)}")


EXPORT_HELP = """
Copy all memos, including the trash, to another file.

EXAMPLE:
  yellow export backup.json
  yellow --file backup.json        Open the copy later

Expired trash entries are purged before the copy is written.
"""


@app.command("export", help=EXPORT_HELP)
def export_memos(
    ctx: typer.Context,
    output_file: Annotated[
        Path,
        typer.Argument(help="Path to write the copy."),
    ],
    file: FileOption = None,
    use_global: GlobalOption = False,
) -> None:
    """Export all memos to a new file."""
    _, data = _load(ctx, file, use_global)

    try:
        Storage(output_file).save(data)
    except StorageError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"Exported {len(data.active)} memos ({len(data.deleted)} in trash) to {output_file}"
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
