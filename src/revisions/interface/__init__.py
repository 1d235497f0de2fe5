"""Host-facing surfaces: the event adapter and the CLI built on it."""

from revisions.interface.host import (
    CompareView,
    HistoryCommand,
    HistoryEntry,
    HistoryView,
    HostResult,
    RestoreMode,
    RestoreView,
    RevisionsHost,
    StartupReport,
    display_name,
)

__all__ = [
    "CompareView",
    "HistoryCommand",
    "HistoryEntry",
    "HistoryView",
    "HostResult",
    "RestoreMode",
    "RestoreView",
    "RevisionsHost",
    "StartupReport",
    "display_name",
]
