"""CLI error handling.

Provides unified error output for the CLI with support for:
- Human-readable output (default)
- JSON output for machine consumption (--json-errors)
- Recovery suggestions per error code

Host events come back as HostResult; ``report`` shows them. Errors raised
outside a host event (unreadable store, invalid config) reach
``handle_error`` through the entrypoint.
"""

import json
import logging
import sys
from typing import NoReturn

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from revisions.foundation.errors import ErrorCode, RevisionsError, StorageError
from revisions.interface.host import HostResult

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

_LEVEL_STYLES = {
    "info": ("green", "✓"),
    "warning": ("yellow", "⚠"),
    "error": ("red", "✗"),
}


def report(result: HostResult, *, json_output: bool = False, exit_on_error: bool = True) -> None:
    """Show a host result.

    Error results go to stderr and exit 1 unless ``exit_on_error`` is off
    (the watcher keeps running after a failed snapshot).
    """
    if result.level == "error":
        if json_output:
            print(
                json.dumps({"code": result.error_code, "level": result.level, "message": result.message}),
                file=sys.stderr,
            )
        else:
            err_console.print(f"[red]✗[/red] {result.message}")
        if exit_on_error:
            sys.exit(1)
        return

    style, icon = _LEVEL_STYLES[result.level]
    if result.error_code == ErrorCode.NO_CHAIN_FOR_FILE.name:
        style, icon = "yellow", "○"
    console.print(f"[{style}]{icon}[/{style}] {result.message}")


def handle_error(
    error: RevisionsError | Exception,
    json_output: bool = False,
) -> NoReturn:
    """Handle an error with optional JSON output for machine consumption.

    Raises:
        SystemExit: Always exits with code 1
    """
    if isinstance(error, OSError):
        error = StorageError(path=error.filename or "-", detail=error.strerror or str(error), cause=error)
    elif not isinstance(error, RevisionsError):
        error = _wrap_unexpected(error)

    if json_output:
        error_dict = error.to_dict()
        if error.cause:
            error_dict["cause"] = str(error.cause)
        print(json.dumps(error_dict), file=sys.stderr)
        sys.exit(1)

    _print_human_error(error)
    sys.exit(1)


def _wrap_unexpected(error: Exception) -> RevisionsError:
    logger.debug("Unexpected error", exc_info=error)
    return RevisionsError(
        ErrorCode.INTERNAL_ERROR,
        {"detail": f"{type(error).__name__}: {error}"},
        cause=error,
    )


def _print_human_error(error: RevisionsError) -> None:
    """Print error in human-readable format."""
    icons = {"chain": "⛓", "store": "🗄", "config": "⚙", "internal": "💥"}
    icon = icons.get(error.code.category, "✗")

    body = Text()
    body.append(f"{icon} {error.message}\n", style="bold red")
    if error.file_id:
        body.append(f"  file: {error.file_id}\n", style="dim")
    for hint in error.recovery_hints:
        body.append(f"  → {hint}\n", style="yellow")

    err_console.print(
        Panel(body, title=f"[red]RV-{error.code.value}[/red]", border_style="red", expand=False)
    )
