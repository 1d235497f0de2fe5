"""Host adapter: the event surface an editor (or the CLI) drives.

Every event returns a HostResult instead of raising, so the host only has
to show ``result.message`` at ``result.level``. Errors stay scoped to the
file the event was about.

The history panel's button messages (compare, restore, restore in place,
cleanup, rename) are modelled as the HistoryCommand enum and routed through
``dispatch``.
"""

import difflib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from revisions.chain.operations import BASE_NAME, revision_summaries
from revisions.foundation.errors import ErrorLevel, RevisionsError
from revisions.store import ChainStore, RetentionReport

logger = logging.getLogger(__name__)


class RestoreMode(Enum):
    """Where restored content goes."""

    NEW_TAB = "new_tab"
    IN_PLACE = "in_place"


class HistoryCommand(Enum):
    """Commands the history view can send back to the host."""

    COMPARE = "compare"
    RESTORE = "restore"
    RESTORE_IN_PLACE = "restoreInplace"
    CLEANUP = "cleanup"
    RENAME = "rename"


@dataclass(frozen=True, slots=True)
class HostResult:
    """Outcome of a host event, ready to be shown to the user."""

    ok: bool
    level: ErrorLevel
    message: str
    payload: Any = None
    error_code: str | None = None

    @classmethod
    def success(cls, message: str, payload: Any = None) -> "HostResult":
        return cls(ok=True, level="info", message=message, payload=payload)

    @classmethod
    def warning(cls, message: str, payload: Any = None) -> "HostResult":
        return cls(ok=True, level="warning", message=message, payload=payload)

    @classmethod
    def failure(cls, message: str) -> "HostResult":
        return cls(ok=False, level="error", message=message)

    @classmethod
    def from_error(cls, error: RevisionsError) -> "HostResult":
        return cls(
            ok=False,
            level=error.level,
            message=error.message,
            error_code=error.code.name,
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One row of the history view."""

    index: int
    name: str
    timestamp: int | None
    label: str | None = None

    @property
    def created_at(self) -> datetime | None:
        if self.timestamp is None:
            return None
        return datetime.fromtimestamp(self.timestamp / 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "timestamp": self.timestamp,
            "label": self.label,
        }


@dataclass(frozen=True, slots=True)
class HistoryView:
    """Everything needed to render a file's history."""

    file_id: str
    entries: tuple[HistoryEntry, ...] = field(default_factory=tuple)

    @property
    def file_name(self) -> str:
        return Path(self.file_id).name

    @property
    def revision_count(self) -> int:
        return len(self.entries) - 1  # first entry is the base

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file_id,
            "revision_count": self.revision_count,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True, slots=True)
class CompareView:
    """A past version side by side with the current content."""

    file_id: str
    index: int
    name: str
    old_content: str
    new_content: str

    @property
    def title(self) -> str:
        return f"{self.name} ↔ Current"

    def unified_diff(self, context_lines: int = 3) -> str:
        file_name = Path(self.file_id).name
        diff = difflib.unified_diff(
            self.old_content.splitlines(keepends=True),
            self.new_content.splitlines(keepends=True),
            fromfile=f"{file_name} ({self.name})",
            tofile=f"{file_name} (current)",
            n=context_lines,
        )
        return "".join(diff)


@dataclass(frozen=True, slots=True)
class StartupReport:
    """What ``RevisionsHost.start`` did."""

    loaded: int
    retention: RetentionReport
    unreadable: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RestoreView:
    """Content of a past version and where the host should put it."""

    file_id: str
    index: int
    content: str
    mode: RestoreMode


def display_name(index: int, label: str | None = None) -> str:
    """Name shown for a reconstruction index."""
    if index < 0:
        return BASE_NAME
    return label or f"Revision {index + 1}"


class RevisionsHost:
    """Translates host events into store operations and typed results.

    The store is passed in explicitly; the host keeps no chain state itself.

    Example:
        >>> host = RevisionsHost(ChainStore(MemoryStorage()))
        >>> host.on_save("/tmp/a.txt", "hello").message
        'Snapshot created for a.txt'
    """

    def __init__(self, store: ChainStore) -> None:
        self.store = store

    def start(self) -> StartupReport:
        """Load persisted history and re-apply the per-file maximum.

        Raises:
            StorageError: If the history cannot be read or written
        """
        loaded = self.store.load()
        report = self.store.apply_retention()
        logger.debug("Host started: %d chains loaded, %d revisions trimmed", loaded, report.removed)
        return StartupReport(
            loaded=loaded,
            retention=report,
            unreadable=dict(self.store.load_errors),
        )

    # ─────────────────────────────────────────────────────────────────
    # Snapshots
    # ─────────────────────────────────────────────────────────────────

    def on_save(self, file_id: str, content: str) -> HostResult:
        """Automatic snapshot after the file was saved."""
        return self._snapshot(file_id, content, None)

    def on_manual_snapshot(
        self, file_id: str, content: str, label: str | None = None
    ) -> HostResult:
        """Snapshot explicitly requested by the user, optionally named."""
        return self._snapshot(file_id, content, label)

    def _snapshot(self, file_id: str, content: str, label: str | None) -> HostResult:
        name = Path(file_id).name
        try:
            result = self.store.upsert_and_append(file_id, content, label)
        except RevisionsError as e:
            return self._error(e, f"creating snapshot for {name}")

        if result.skipped:
            return HostResult.warning(
                f"{name} is too large to track: {result.skip_reason}", payload=result
            )
        if result.created:
            return HostResult.success(f"Snapshot created for {name}", payload=result)

        message = f"Snapshot created for {name}"
        if result.revision is not None and result.revision.label:
            message += f" ({result.revision.label})"
        return HostResult.success(message, payload=result)

    # ─────────────────────────────────────────────────────────────────
    # Retention
    # ─────────────────────────────────────────────────────────────────

    def on_config_changed(self, new_max_count: int) -> HostResult:
        """Re-apply the per-file maximum after a configuration change."""
        try:
            report = self.store.apply_retention(new_max_count)
        except RevisionsError as e:
            return self._error(e, "applying revision limit")

        message = (
            f"Revision limit set to {report.max_count}; "
            f"removed {report.removed} old revisions"
        )
        if report.corrupt:
            return HostResult.warning(
                f"{message}. Could not trim {len(report.corrupt)} corrupt file(s)",
                payload=report,
            )
        return HostResult.success(message, payload=report)

    def on_cleanup_requested(self, days: int) -> HostResult:
        """Remove revisions older than ``days`` days across every file."""
        if isinstance(days, bool) or not isinstance(days, int) or days < 0:
            return HostResult.failure("Please enter a valid number of days")

        try:
            report = self.store.cleanup_older_than(days)
        except RevisionsError as e:
            return self._error(e, "cleaning up revisions")

        message = f"Cleaned up {report.removed} old revisions."
        if report.corrupt:
            names = ", ".join(Path(f).name for f in report.corrupt)
            return HostResult.warning(
                f"{message} Skipped corrupt history for: {names}", payload=report
            )
        return HostResult.success(message, payload=report)

    # ─────────────────────────────────────────────────────────────────
    # History view
    # ─────────────────────────────────────────────────────────────────

    def on_view_history(self, file_id: str) -> HostResult:
        """Rows for the history view: base first, then each revision."""
        chain = self.store.get(file_id)
        if chain is None:
            return HostResult(
                ok=True,
                level="info",
                message="No revisions found for this file",
                error_code="NO_CHAIN_FOR_FILE",
            )

        entries = tuple(
            HistoryEntry(index=row.index, name=row.name, timestamp=row.timestamp, label=row.label)
            for row in revision_summaries(chain)
        )
        view = HistoryView(file_id=file_id, entries=entries)
        return HostResult.success(
            f"{view.file_name}: {view.revision_count} revisions", payload=view
        )

    def on_compare_requested(
        self, file_id: str, index: int, current_content: str
    ) -> HostResult:
        """A past version paired with the current content for diffing."""
        try:
            old_content = self.store.reconstruct(file_id, index)
            label = self._label_at(file_id, index)
        except RevisionsError as e:
            return self._error(e, "comparing revisions")

        view = CompareView(
            file_id=file_id,
            index=index,
            name=display_name(index, label),
            old_content=old_content,
            new_content=current_content,
        )
        return HostResult.success(view.title, payload=view)

    def on_restore_requested(
        self, file_id: str, index: int, mode: RestoreMode = RestoreMode.NEW_TAB
    ) -> HostResult:
        """Content of a past version for the host to open or write back."""
        try:
            content = self.store.reconstruct(file_id, index)
            label = self._label_at(file_id, index)
        except RevisionsError as e:
            return self._error(e, "restoring revision")

        name = display_name(index, label)
        view = RestoreView(file_id=file_id, index=index, content=content, mode=mode)
        if mode is RestoreMode.IN_PLACE:
            return HostResult.success(f"Restored to {name} in current tab", payload=view)
        return HostResult.success(f"{name} opened in new tab", payload=view)

    def on_rename_requested(self, file_id: str, index: int, label: str) -> HostResult:
        """Name a revision, or clear its name with an empty label."""
        try:
            revision = self.store.rename(file_id, index, label)
        except RevisionsError as e:
            return self._error(e, "renaming revision")

        if revision.label:
            return HostResult.success(
                f"Revision {index + 1} renamed to '{revision.label}'", payload=revision
            )
        return HostResult.success(f"Revision {index + 1} name cleared", payload=revision)

    def dispatch(
        self,
        command: HistoryCommand | str,
        file_id: str,
        index: int | None = None,
        *,
        current_content: str | None = None,
        days: int | None = None,
        label: str | None = None,
    ) -> HostResult:
        """Route a history view command to its event handler."""
        try:
            command = HistoryCommand(command)
        except ValueError:
            return HostResult.failure(f"Unknown command: {command}")

        if command is HistoryCommand.CLEANUP:
            if days is None:
                return HostResult.failure("Cleanup needs a number of days")
            return self.on_cleanup_requested(days)

        if index is None:
            return HostResult.failure("No revision selected")

        if command is HistoryCommand.COMPARE:
            if current_content is None:
                return HostResult.failure("Nothing to compare against")
            return self.on_compare_requested(file_id, index, current_content)
        if command is HistoryCommand.RESTORE:
            return self.on_restore_requested(file_id, index, RestoreMode.NEW_TAB)
        if command is HistoryCommand.RESTORE_IN_PLACE:
            return self.on_restore_requested(file_id, index, RestoreMode.IN_PLACE)
        return self.on_rename_requested(file_id, index, label or "")

    # ─────────────────────────────────────────────────────────────────

    def _label_at(self, file_id: str, index: int) -> str | None:
        chain = self.store.get(file_id)
        if chain is None or not 0 <= index < len(chain.revisions):
            return None
        return chain.revisions[index].label

    def _error(self, error: RevisionsError, context: str) -> HostResult:
        if error.level == "error":
            logger.error("Error in %s: %s", context, error.message)
        else:
            logger.info("%s: %s", context, error.message)
        return HostResult.from_error(error)
