"""Terminal rendering for ``revisions compare``.

A past version is shown against the current file as a unified diff inside
a panel: additions green, removals red, hunk headers yellow.
"""

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from revisions.interface.host import CompareView

_LINE_STYLES = (
    ("+++", "bold"),
    ("---", "bold"),
    ("@@", "yellow"),
    ("+", "green"),
    ("-", "red"),
    ("\\", "dim italic"),
)


@dataclass(frozen=True, slots=True)
class DiffStats:
    """Changed line counts for one compare."""

    added: int = 0
    removed: int = 0
    hunks: int = 0

    def summary(self) -> str:
        if not (self.added or self.removed):
            return "no changes"
        return f"+{self.added} -{self.removed} in {self.hunks} hunk{'s' if self.hunks != 1 else ''}"


def count_stats(lines: list[str]) -> DiffStats:
    added = sum(1 for line in lines if line.startswith("+") and not line.startswith("+++"))
    removed = sum(1 for line in lines if line.startswith("-") and not line.startswith("---"))
    hunks = sum(1 for line in lines if line.startswith("@@"))
    return DiffStats(added=added, removed=removed, hunks=hunks)


def _style_for(line: str) -> str:
    for prefix, style in _LINE_STYLES:
        if line.startswith(prefix):
            return style
    return "dim"


class DiffRenderer:
    """Prints a CompareView, truncating very long diffs."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        context_lines: int = 3,
        max_lines: int = 200,
    ) -> None:
        self.console = console or Console()
        self.context_lines = context_lines
        self.max_lines = max_lines

    def render_compare(self, view: CompareView) -> DiffStats:
        """Print the diff from ``view``'s past version to the current content.

        Returns:
            Counts for the whole diff, including any truncated tail
        """
        lines = view.unified_diff(self.context_lines).splitlines()
        if not lines:
            self.console.print(f"[dim]No differences between {view.name} and the current file[/]")
            return DiffStats()

        stats = count_stats(lines)
        body = Text()
        for line in lines[: self.max_lines]:
            body.append(line + "\n", style=_style_for(line))
        if len(lines) > self.max_lines:
            body.append(f"… {len(lines) - self.max_lines} more lines (use --raw)\n", style="dim")

        self.console.print(
            Panel(body, title=f"[bold]{view.title}[/]", subtitle=stats.summary(), border_style="yellow")
        )
        return stats
