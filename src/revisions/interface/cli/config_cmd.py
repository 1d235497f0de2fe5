"""Config command - Manage Revisions configuration."""

from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from revisions.foundation.config import (
    PROJECT_CONFIG_PATH,
    USER_CONFIG_PATH,
    save_config_value,
    save_default_config,
)
from revisions.foundation.errors import ConfigError
from revisions.interface.cli.error_handler import handle_error, report
from revisions.interface.cli.state import CliState

console = Console()


def _format_value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


@click.group()
def config() -> None:
    """Manage Revisions configuration.

    Configuration is loaded from (in priority order):
    1. Environment variables (REVISIONS_*)
    2. --config FILE
    3. .revisions/config.yaml (project-local)
    4. ~/.revisions/config.yaml (user-global)
    5. Built-in defaults

    \b
    Examples:
        revisions config show
        revisions config init
        revisions config get max_revisions_per_file
        revisions config set max_revisions_per_file 20

    \b
    Environment overrides:
        REVISIONS_MAX_REVISIONS_PER_FILE=10 revisions snapshot notes.md
    """
    pass


@config.command()
@click.pass_obj
def show(state: CliState) -> None:
    """Show current configuration."""
    console.print(Panel("[bold]Revisions Configuration[/bold]", border_style="cyan"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in asdict(state.config).items():
        table.add_row(key, _format_value(value) or "[dim](any)[/dim]")
    console.print(table)

    console.print("\n[dim]Config files:[/dim]")
    for path in (PROJECT_CONFIG_PATH, USER_CONFIG_PATH):
        marker = "[green]✓[/green]" if path.exists() else "[dim]○[/dim]"
        console.print(f"  {marker} {path}")


@config.command()
@click.argument("key")
@click.pass_obj
def get(state: CliState, key: str) -> None:
    """Get a configuration value.

    \b
    Examples:
        revisions config get max_revisions_per_file
    """
    values = asdict(state.config)
    if key not in values:
        console.print(f"[red]✗[/red] Key not found: {key}")
        console.print(f"[dim]Available keys: {', '.join(values)}[/dim]")
        raise SystemExit(1)
    # Plain output for scripting
    click.echo(_format_value(values[key]))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to modify (default: .revisions/config.yaml)",
)
@click.option("--global", "global_config", is_flag=True, help="Modify ~/.revisions/config.yaml")
@click.pass_obj
def set_value(state: CliState, key: str, value: str, path: Path | None, global_config: bool) -> None:
    """Set a configuration value.

    Changing max_revisions_per_file trims existing histories right away.

    \b
    Examples:
        revisions config set max_revisions_per_file 20
        revisions config set watch_extensions .md,.txt
    """
    target = USER_CONFIG_PATH if global_config else path
    try:
        new_config = save_config_value(key, value, target)
    except ConfigError as e:
        handle_error(e, json_output=state.json_errors)
    console.print(f"[green]✓[/green] Set {key} = {_format_value(getattr(new_config, key))}")

    if key == "max_revisions_per_file":
        result = state.host.on_config_changed(new_config.max_revisions_per_file)
        report(result, json_output=state.json_errors)


@config.command()
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write (default: .revisions/config.yaml)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(path: Path | None, force: bool) -> None:
    """Create a config file with the default values."""
    target = path or PROJECT_CONFIG_PATH
    if target.exists() and not force:
        console.print(f"[yellow]![/yellow] Config file already exists: {target}")
        console.print("[dim]Use --force to overwrite.[/dim]")
        return
    written = save_default_config(target)
    console.print(f"[green]✓[/green] Created {written}")
