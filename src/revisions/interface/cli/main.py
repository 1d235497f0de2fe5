"""Main CLI entry point.

    revisions snapshot notes.md --label "first draft"
    revisions history notes.md
    revisions compare notes.md 0
    revisions restore notes.md base --in-place
"""

import sys
from pathlib import Path

import click
from rich.console import Console

from revisions import __version__
from revisions.foundation.config import load_config
from revisions.foundation.logging import DEFAULT_LOG_DIR, configure_logging
from revisions.interface.cli import config_cmd, history_cmd, retention_cmd, watch_cmd
from revisions.interface.cli.state import CliState

console = Console()


def cli_entrypoint() -> None:
    """Wrapped entrypoint with global error handling.

    Catches RevisionsError and displays it nicely instead of a traceback.
    Called from pyproject.toml [project.scripts].
    """
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        # Let Click handle its own exceptions
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n  [dim]Aborted[/]")
        sys.exit(130)
    except Exception as e:
        from revisions.interface.cli.error_handler import handle_error

        handle_error(e, json_output="--json-errors" in sys.argv[1:])


@click.group()
@click.version_option(__version__, prog_name="revisions")
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="History file (default: store_path from config)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use before the project and user ones",
)
@click.option("--debug", is_flag=True, help="Verbose logging")
@click.option("--log-file", is_flag=True, help="Also write a session log under .revisions/logs/")
@click.option("--json-errors", is_flag=True, help="Report errors as JSON on stderr")
@click.pass_context
def main(
    ctx: click.Context,
    store_path: Path | None,
    config_path: Path | None,
    debug: bool,
    log_file: bool,
    json_errors: bool,
) -> None:
    """Revisions - lightweight per-file version history.

    Every snapshot of a text file is stored as a patch against the previous
    one, so long histories stay small. Snapshots can be listed, compared
    with the current file, restored and named.

    \b
    Examples:
        revisions snapshot notes.md
        revisions history notes.md
        revisions compare notes.md 2
        revisions restore notes.md 2 --in-place
        revisions cleanup --days 30
        revisions watch docs --ext .md
    """
    cfg = load_config(config_path)
    configure_logging(debug=debug or cfg.debug, log_dir=DEFAULT_LOG_DIR if log_file else None)
    ctx.obj = CliState(
        config=cfg,
        store_path=store_path or Path(cfg.store_path),
        json_errors=json_errors,
    )


main.add_command(history_cmd.snapshot)
main.add_command(history_cmd.save)
main.add_command(history_cmd.history)
main.add_command(history_cmd.show)
main.add_command(history_cmd.compare)
main.add_command(history_cmd.restore)
main.add_command(history_cmd.rename)
main.add_command(history_cmd.files)
main.add_command(retention_cmd.cleanup)
main.add_command(retention_cmd.trim)
main.add_command(watch_cmd.watch)
main.add_command(config_cmd.config)
