"""Watch command - snapshot files automatically whenever they are saved."""

import logging
from collections.abc import Iterable
from pathlib import Path

import click
from rich.console import Console
from watchfiles import Change, DefaultFilter, watch as watch_paths

from revisions.interface.cli.error_handler import report
from revisions.interface.cli.state import CliState, file_identity, load_text
from revisions.interface.host import HostResult, RevisionsHost

logger = logging.getLogger(__name__)

console = Console()


class SaveFilter(DefaultFilter):
    """Pass saved text files, ignoring the history directory and deletions."""

    ignore_dirs = (*DefaultFilter.ignore_dirs, ".revisions")

    def __init__(self, *, extensions: Iterable[str] = (), store_path: Path | None = None) -> None:
        super().__init__()
        self.extensions = tuple(extensions)
        self._store_path = str(store_path.resolve()) if store_path else None

    def __call__(self, change: Change, path: str) -> bool:
        if change == Change.deleted:
            return False
        if self._store_path and path == self._store_path:
            return False
        if self.extensions and not path.endswith(self.extensions):
            return False
        return super().__call__(change, path)


def handle_changes(host: RevisionsHost, changes: Iterable[tuple[Change, str]]) -> list[HostResult]:
    """Snapshot every changed file in a batch, once each.

    Files that vanished or are not UTF-8 text are skipped.
    """
    results = []
    for path_str in sorted({path for change, path in changes if change != Change.deleted}):
        path = Path(path_str)
        if not path.is_file():
            continue
        try:
            content = load_text(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Not snapshotting %s: %s", path, e)
            continue
        results.append(host.on_save(file_identity(path), content))
    return results


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.option("--ext", "-e", "extensions", multiple=True,
              help="Only track files with this extension (repeatable)")
@click.pass_obj
def watch(state: CliState, paths: tuple[str, ...], extensions: tuple[str, ...]) -> None:
    """Watch directories and snapshot every file that is saved.

    Runs until interrupted.

    \b
    Examples:
        revisions watch
        revisions watch docs src --ext .md --ext .py
    """
    roots = paths or (".",)
    exts = tuple(e if e.startswith(".") else f".{e}" for e in extensions) or state.config.watch_extensions
    watch_filter = SaveFilter(extensions=exts, store_path=state.store_path)
    host = state.host

    console.print(f"[bold]Watching[/bold] {', '.join(roots)} [dim](Ctrl+C to stop)[/dim]")
    for changes in watch_paths(
        *roots,
        watch_filter=watch_filter,
        debounce=state.config.watch_debounce_ms,
        raise_interrupt=False,
    ):
        for result in handle_changes(host, changes):
            report(result, json_output=state.json_errors, exit_on_error=False)
