"""History commands - snapshot, inspect, compare and restore file versions.

Provides commands to:
- Record a snapshot of a file (named or automatic)
- List a file's history and every tracked file
- Print, compare or restore a past version
- Name a revision
"""

import json
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from revisions.interface.cli.diff_renderer import DiffRenderer
from revisions.interface.cli.error_handler import report
from revisions.interface.cli.state import (
    REVISION_INDEX,
    CliState,
    file_identity,
    read_text,
    write_text,
)
from revisions.interface.host import CompareView, HistoryView, RestoreMode, RestoreView

console = Console()

_TEXT_FILE = click.Path(exists=True, dir_okay=False)


@click.command()
@click.argument("path", type=_TEXT_FILE)
@click.option("--label", "-l", default=None, help="Name for this snapshot")
@click.pass_obj
def snapshot(state: CliState, path: str, label: str | None) -> None:
    """Record the current content of a file.

    The first snapshot of a file becomes its base version; every later one
    is stored as a patch against the previous version.

    \b
    Examples:
        revisions snapshot notes.md
        revisions snapshot src/app.py --label "before refactor"
    """
    content = read_text(path)
    result = state.host.on_manual_snapshot(file_identity(path), content, label)
    report(result, json_output=state.json_errors)


@click.command()
@click.argument("path", type=_TEXT_FILE)
@click.pass_obj
def save(state: CliState, path: str) -> None:
    """Record a file as an editor would on save (no label).

    Meant for editor hooks and scripts.

    \b
    Examples:
        revisions save notes.md
    """
    result = state.host.on_save(file_identity(path), read_text(path))
    report(result, json_output=state.json_errors)


@click.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def history(state: CliState, path: str, json_output: bool) -> None:
    """List the saved versions of a file.

    The INDEX column is what show, compare, restore and rename expect;
    'base' (or -1) selects the base version.

    \b
    Examples:
        revisions history notes.md
        revisions history notes.md --json
    """
    result = state.host.on_view_history(file_identity(path))
    if not isinstance(result.payload, HistoryView):
        report(result, json_output=state.json_errors)
        return

    view: HistoryView = result.payload
    if json_output:
        print(json.dumps(view.to_dict(), indent=2))
        return

    table = Table(title=f"{view.file_name} ({view.revision_count} revisions)", header_style="bold")
    table.add_column("Index", style="dim", justify="right")
    table.add_column("Name")
    table.add_column("Saved", style="dim")

    for entry in view.entries:
        index = "base" if entry.index < 0 else str(entry.index)
        name = f"[cyan]{entry.name}[/cyan]" if entry.label else entry.name
        saved = entry.created_at.strftime("%Y-%m-%d %H:%M:%S") if entry.created_at else "-"
        table.add_row(index, name, saved)

    console.print(table)


@click.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.argument("index", type=REVISION_INDEX)
@click.pass_obj
def show(state: CliState, path: str, index: int) -> None:
    """Print a past version of a file to stdout.

    \b
    Examples:
        revisions show notes.md 3
        revisions show notes.md base > notes.orig.md
    """
    result = state.host.on_restore_requested(file_identity(path), index, RestoreMode.NEW_TAB)
    if not isinstance(result.payload, RestoreView):
        report(result, json_output=state.json_errors)
        return
    click.echo(result.payload.content, nl=False)


@click.command()
@click.argument("path", type=_TEXT_FILE)
@click.argument("index", type=REVISION_INDEX)
@click.option("--raw", is_flag=True, help="Plain unified diff without styling")
@click.option("--context", "-U", "context_lines", default=3, show_default=True,
              type=click.IntRange(min=0), help="Lines of context around changes")
@click.pass_obj
def compare(state: CliState, path: str, index: int, raw: bool, context_lines: int) -> None:
    """Diff a past version against the file as it is now.

    \b
    Examples:
        revisions compare notes.md 2
        revisions compare notes.md base --raw | less
    """
    result = state.host.on_compare_requested(file_identity(path), index, read_text(path))
    if not isinstance(result.payload, CompareView):
        report(result, json_output=state.json_errors)
        return

    view: CompareView = result.payload
    if raw:
        click.echo(view.unified_diff(context_lines), nl=False)
        return
    DiffRenderer(console, context_lines=context_lines).render_compare(view)


@click.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.argument("index", type=REVISION_INDEX)
@click.option("--in-place", "-i", is_flag=True, help="Overwrite PATH with the past version")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Write the past version to this file instead")
@click.option("--no-snapshot", is_flag=True,
              help="With --in-place, do not record the current content first")
@click.pass_obj
def restore(
    state: CliState,
    path: str,
    index: int,
    in_place: bool,
    output: str | None,
    no_snapshot: bool,
) -> None:
    """Bring back a past version of a file.

    Without options the version is printed, like show. With --in-place the
    file is overwritten; its current content is snapshotted first so the
    restore itself can be undone.

    \b
    Examples:
        revisions restore notes.md 4 --in-place
        revisions restore notes.md base -o notes.orig.md
    """
    if in_place and output:
        raise click.UsageError("--in-place and --output are mutually exclusive")

    file_id = file_identity(path)
    mode = RestoreMode.IN_PLACE if in_place else RestoreMode.NEW_TAB
    result = state.host.on_restore_requested(file_id, index, mode)
    if not isinstance(result.payload, RestoreView):
        report(result, json_output=state.json_errors)
        return

    view: RestoreView = result.payload
    if in_place:
        target = Path(path)
        if not no_snapshot and target.exists():
            backup = state.host.on_manual_snapshot(file_id, read_text(target))
            report(backup, json_output=state.json_errors)
        write_text(target, view.content)
        report(result, json_output=state.json_errors)
    elif output:
        write_text(output, view.content)
        console.print(f"[green]✓[/green] Wrote {Path(output).name} from {path}")
    else:
        click.echo(view.content, nl=False)


@click.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.argument("index", type=int)
@click.argument("label", required=False, default="")
@click.pass_obj
def rename(state: CliState, path: str, index: int, label: str) -> None:
    """Name a revision; omit LABEL to clear its name.

    \b
    Examples:
        revisions rename notes.md 2 "first draft"
        revisions rename notes.md 2
    """
    result = state.host.on_rename_requested(file_identity(path), index, label)
    report(result, json_output=state.json_errors)


@click.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def files(state: CliState, json_output: bool) -> None:
    """List every file with saved history.

    \b
    Examples:
        revisions files
    """
    store = state.host.store
    rows = []
    for file_id in store.files():
        chain = store.get(file_id)
        if chain is not None:
            rows.append((file_id, len(chain), chain.latest_timestamp))

    if json_output:
        print(json.dumps(
            [{"file": f, "revision_count": n, "latest_timestamp": ts} for f, n, ts in rows],
            indent=2,
        ))
        return

    if not rows:
        console.print("[yellow]No tracked files[/yellow]")
        return

    table = Table(header_style="bold")
    table.add_column("File")
    table.add_column("Revisions", justify="right")
    table.add_column("Last saved", style="dim")
    for file_id, count, latest in rows:
        saved = datetime.fromtimestamp(latest / 1000).strftime("%Y-%m-%d %H:%M") if latest else "-"
        table.add_row(file_id, str(count), saved)
    console.print(table)
