"""Tests for the host adapter: events in, HostResult out."""

import pytest

from revisions.foundation.errors import ErrorCode
from revisions.interface import (
    CompareView,
    HistoryCommand,
    HistoryView,
    RestoreMode,
    RestoreView,
    RevisionsHost,
)
from revisions.store import ChainStore, MemoryStorage

FILE = "/work/notes.md"


@pytest.fixture
def host(store: ChainStore) -> RevisionsHost:
    return RevisionsHost(store)


@pytest.fixture
def tracked(host: RevisionsHost) -> RevisionsHost:
    """A host with notes.md at base "one" and revisions "one two", "one two three"."""
    host.on_save(FILE, "one\n")
    host.on_save(FILE, "one\ntwo\n")
    host.on_manual_snapshot(FILE, "one\ntwo\nthree\n", label="final")
    return host


class TestStart:
    def test_loads_and_trims(self) -> None:
        revisions = [{"patch": "", "timestamp": t} for t in range(5)]
        storage = MemoryStorage({FILE: {"base": "x", "revisions": revisions}, "/broken": {"base": 1}})
        host = RevisionsHost(ChainStore(storage, max_revisions=2))

        report = host.start()

        assert report.loaded == 1
        assert report.retention.removed == 3
        assert "/broken" in report.unreadable
        assert len(storage.data[FILE]["revisions"]) == 2


class TestSnapshots:
    def test_first_save_creates(self, host: RevisionsHost) -> None:
        result = host.on_save(FILE, "hello")
        assert result.ok
        assert result.level == "info"
        assert result.message == "Snapshot created for notes.md"
        assert result.payload.created

    def test_manual_snapshot_mentions_label(self, host: RevisionsHost) -> None:
        host.on_save(FILE, "a")
        result = host.on_manual_snapshot(FILE, "b", label="draft")
        assert result.message == "Snapshot created for notes.md (draft)"

    def test_too_large_is_warning(self) -> None:
        host = RevisionsHost(ChainStore(MemoryStorage(), max_content_bytes=3))
        result = host.on_save(FILE, "far too big")
        assert result.ok
        assert result.level == "warning"
        assert "too large" in result.message

    def test_corrupt_chain_is_error(self) -> None:
        storage = MemoryStorage({FILE: {"base": "x", "revisions": [{"patch": "junk", "timestamp": 1}]}})
        host = RevisionsHost(ChainStore(storage))
        host.start()

        result = host.on_save(FILE, "y")
        assert not result.ok
        assert result.level == "error"
        assert result.error_code == ErrorCode.CHAIN_CORRUPT.name


class TestHistoryView:
    def test_untracked_file_is_info(self, host: RevisionsHost) -> None:
        result = host.on_view_history(FILE)
        assert result.level == "info"
        assert result.message == "No revisions found for this file"
        assert result.error_code == "NO_CHAIN_FOR_FILE"
        assert result.payload is None

    def test_entries(self, tracked: RevisionsHost) -> None:
        view = tracked.on_view_history(FILE).payload
        assert isinstance(view, HistoryView)
        assert view.revision_count == 2
        assert [e.name for e in view.entries] == ["Base Version", "Revision 1", "final"]
        assert view.entries[0].created_at is None
        assert view.to_dict()["entries"][2]["label"] == "final"


class TestCompare:
    def test_compare_with_current(self, tracked: RevisionsHost) -> None:
        result = tracked.on_compare_requested(FILE, 0, "one\ntwo\nchanged\n")
        view = result.payload

        assert isinstance(view, CompareView)
        assert view.old_content == "one\ntwo\n"
        assert view.title == "Revision 1 ↔ Current"
        diff = view.unified_diff()
        assert "+changed" in diff
        assert "notes.md (Revision 1)" in diff

    def test_compare_base(self, tracked: RevisionsHost) -> None:
        view = tracked.on_compare_requested(FILE, -1, "x").payload
        assert view.name == "Base Version"
        assert view.old_content == "one\n"

    def test_compare_out_of_range(self, tracked: RevisionsHost) -> None:
        result = tracked.on_compare_requested(FILE, 9, "x")
        assert not result.ok
        assert result.error_code == ErrorCode.INDEX_OUT_OF_RANGE.name


class TestRestore:
    def test_new_tab(self, tracked: RevisionsHost) -> None:
        result = tracked.on_restore_requested(FILE, 0)
        assert result.message == "Revision 1 opened in new tab"
        assert isinstance(result.payload, RestoreView)
        assert result.payload.content == "one\ntwo\n"
        assert result.payload.mode is RestoreMode.NEW_TAB

    def test_in_place_uses_label(self, tracked: RevisionsHost) -> None:
        result = tracked.on_restore_requested(FILE, 1, RestoreMode.IN_PLACE)
        assert result.message == "Restored to final in current tab"
        assert result.payload.content == "one\ntwo\nthree\n"

    def test_untracked(self, host: RevisionsHost) -> None:
        result = host.on_restore_requested(FILE, 0)
        assert result.level == "info"
        assert result.error_code == ErrorCode.NO_CHAIN_FOR_FILE.name


class TestRename:
    def test_rename_and_clear(self, tracked: RevisionsHost) -> None:
        assert tracked.on_rename_requested(FILE, 0, "middle").message == "Revision 1 renamed to 'middle'"
        assert tracked.on_rename_requested(FILE, 0, "").message == "Revision 1 name cleared"

    def test_rename_bad_index(self, tracked: RevisionsHost) -> None:
        assert not tracked.on_rename_requested(FILE, 5, "x").ok


class TestRetentionEvents:
    def test_config_change_trims(self, tracked: RevisionsHost) -> None:
        result = tracked.on_config_changed(1)
        assert result.ok
        assert result.message == "Revision limit set to 1; removed 1 old revisions"

    def test_config_change_out_of_range(self, tracked: RevisionsHost) -> None:
        result = tracked.on_config_changed(0)
        assert not result.ok
        assert result.error_code == ErrorCode.CONFIG_INVALID.name

    def test_cleanup_everything(self, tracked: RevisionsHost) -> None:
        result = tracked.on_cleanup_requested(0)
        assert result.message == "Cleaned up 2 old revisions."
        assert tracked.on_view_history(FILE).error_code == "NO_CHAIN_FOR_FILE"

    @pytest.mark.parametrize("days", [-1, "7", None, True])
    def test_cleanup_rejects_bad_days(self, host: RevisionsHost, days: object) -> None:
        result = host.on_cleanup_requested(days)
        assert not result.ok
        assert result.message == "Please enter a valid number of days"


class TestDispatch:
    def test_compare(self, tracked: RevisionsHost) -> None:
        result = tracked.dispatch("compare", FILE, 0, current_content="x")
        assert isinstance(result.payload, CompareView)

    def test_restore_variants(self, tracked: RevisionsHost) -> None:
        assert tracked.dispatch(HistoryCommand.RESTORE, FILE, 0).payload.mode is RestoreMode.NEW_TAB
        assert tracked.dispatch("restoreInplace", FILE, 0).payload.mode is RestoreMode.IN_PLACE

    def test_rename(self, tracked: RevisionsHost) -> None:
        result = tracked.dispatch("rename", FILE, 0, label="named")
        assert result.payload.label == "named"

    def test_cleanup(self, tracked: RevisionsHost) -> None:
        assert tracked.dispatch("cleanup", FILE, days=0).message == "Cleaned up 2 old revisions."
        assert tracked.dispatch("cleanup", FILE).message == "Cleanup needs a number of days"

    def test_missing_arguments(self, tracked: RevisionsHost) -> None:
        assert tracked.dispatch("restore", FILE).message == "No revision selected"
        assert tracked.dispatch("compare", FILE, 0).message == "Nothing to compare against"

    def test_unknown_command(self, tracked: RevisionsHost) -> None:
        result = tracked.dispatch("explode", FILE, 0)
        assert not result.ok
        assert result.message == "Unknown command: explode"
