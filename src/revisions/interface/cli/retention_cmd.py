"""Retention commands - drop old revisions across every tracked file."""

import click

from revisions.foundation.config import MAX_REVISIONS_PER_FILE, MIN_REVISIONS_PER_FILE
from revisions.interface.cli.error_handler import report
from revisions.interface.cli.state import CliState


@click.command()
@click.option(
    "--days", "-d",
    type=click.IntRange(min=0),
    prompt="Remove revisions older than how many days?",
    help="Age threshold in days (0 removes everything saved so far)",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def cleanup(state: CliState, days: int, yes: bool) -> None:
    """Remove revisions older than a number of days.

    Applies to every tracked file. A file left with no revisions loses its
    history entirely; its next snapshot starts a new one.

    \b
    Examples:
        revisions cleanup --days 30
        revisions cleanup -d 0 --yes
    """
    if not yes:
        click.confirm(
            f"Remove revisions older than {days} days from every tracked file?",
            abort=True,
        )
    result = state.host.on_cleanup_requested(days)
    report(result, json_output=state.json_errors)


@click.command()
@click.option(
    "--max", "max_count",
    type=click.IntRange(MIN_REVISIONS_PER_FILE, MAX_REVISIONS_PER_FILE),
    default=None,
    help="Revisions to keep per file (default: max_revisions_per_file)",
)
@click.pass_obj
def trim(state: CliState, max_count: int | None) -> None:
    """Trim every file's history to the newest N revisions.

    The oldest kept version becomes the file's new base.

    \b
    Examples:
        revisions trim
        revisions trim --max 10
    """
    limit = max_count or state.config.max_revisions_per_file
    result = state.host.on_config_changed(limit)
    report(result, json_output=state.json_errors)
