"""Chain store: one revision chain per tracked file.

Thread-safe with one lock per file identity. Operations on different files
never block each other; operations on the same file are serialized, so an
append, trim, rename or reconstruct always sees a consistent base/revisions
pair. Persistence is explicit and saves the whole map.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from revisions.chain.models import Revision, RevisionChain
from revisions.chain.operations import (
    DEFAULT_MAX_CONTENT_BYTES,
    append_revision,
    content_size,
    create_or_get_chain,
    now_ms,
    reconstruct,
    rename_revision,
)
from revisions.chain.retention import (
    age_cutoff,
    expired_prefix_length,
    trim_older_than,
    trim_to_max,
    validate_max_count,
)
from revisions.codec import DiffMatchPatchCodec, PatchCodec
from revisions.foundation.errors import (
    ContentTooLargeError,
    CorruptChainError,
    NoChainForFileError,
    RevisionsError,
)
from revisions.store.storage import ChainMap, StorageAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SnapshotResult:
    """Outcome of recording a snapshot for one file."""

    file_id: str
    created: bool = False
    """A new chain was started; the content became its base."""

    revision: Revision | None = None
    """The appended revision, None when created or skipped."""

    revision_count: int = 0
    trimmed: int = 0
    """Oldest revisions dropped to stay within the per-file maximum."""

    skipped: bool = False
    skip_reason: str | None = None


@dataclass(frozen=True, slots=True)
class RetentionReport:
    """Outcome of a max-count trim across all files."""

    max_count: int
    trimmed: dict[str, int] = field(default_factory=dict)
    corrupt: dict[str, str] = field(default_factory=dict)

    @property
    def removed(self) -> int:
        return sum(self.trimmed.values())


@dataclass(frozen=True, slots=True)
class CleanupReport:
    """Outcome of an age-based cleanup across all files."""

    days: int
    cutoff_ms: int
    removed: int = 0
    deleted_files: tuple[str, ...] = ()
    corrupt: dict[str, str] = field(default_factory=dict)


class ChainStore:
    """Owns every revision chain and is the only way to mutate them.

    Example:
        >>> store = ChainStore(MemoryStorage())
        >>> store.upsert_and_append("/tmp/a.txt", "hello").created
        True
        >>> store.upsert_and_append("/tmp/a.txt", "hello world", label="v1").revision_count
        1
        >>> store.reconstruct("/tmp/a.txt", 0)
        'hello world'
    """

    def __init__(
        self,
        storage: StorageAdapter,
        *,
        codec: PatchCodec | None = None,
        max_revisions: int = 50,
        max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES,
    ) -> None:
        self._storage = storage
        self.codec: PatchCodec = codec or DiffMatchPatchCodec()
        self._max_revisions = validate_max_count(max_revisions)
        self.max_content_bytes = max_content_bytes

        self._chains: dict[str, RevisionChain] = {}
        self._unreadable: ChainMap = {}  # kept verbatim so a save never drops them
        self.load_errors: dict[str, str] = {}

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._persist_lock = threading.Lock()

    @property
    def max_revisions(self) -> int:
        return self._max_revisions

    def _lock_for(self, file_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(file_id)
            if lock is None:
                lock = self._locks[file_id] = threading.Lock()
            return lock

    @contextmanager
    def _locked(self, file_id: str) -> Iterator[None]:
        """Hold the lock for one file; a file left without a chain keeps no lock."""
        while True:
            lock = self._lock_for(file_id)
            with lock:
                if self._locks.get(file_id) is not lock:
                    # dropped while we waited; the next caller gets a fresh one
                    continue
                try:
                    yield
                finally:
                    if file_id not in self._chains:
                        with self._locks_guard:
                            self._locks.pop(file_id, None)
                return

    # ─────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────

    def load(self) -> int:
        """Replace in-memory state with the persisted map.

        Entries that cannot be parsed are skipped, reported in
        ``load_errors`` and written back untouched on the next save.

        Returns:
            Number of chains loaded.

        Raises:
            StorageError: If the backing store cannot be read at all
        """
        raw = self._storage.load()
        chains: dict[str, RevisionChain] = {}
        unreadable: ChainMap = {}
        errors: dict[str, str] = {}

        for file_id, data in raw.items():
            try:
                chains[file_id] = RevisionChain.from_dict(data)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                detail = f"{type(e).__name__}: {e}"
                logger.warning("Skipping unreadable history for %s: %s", file_id, detail)
                unreadable[file_id] = data
                errors[file_id] = detail

        with self._persist_lock:
            self._chains = chains
            self._unreadable = unreadable
            self.load_errors = errors
        return len(chains)

    def persist(self) -> None:
        """Hand the full map to the storage adapter.

        Raises:
            StorageError: If the write fails
        """
        with self._persist_lock:
            data: ChainMap = dict(self._unreadable)
            for file_id in list(self._chains):
                with self._locked(file_id):
                    chain = self._chains.get(file_id)
                    if chain is not None:
                        data[file_id] = chain.to_dict()
            self._storage.save(data)

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)

    def files(self) -> list[str]:
        """All tracked file identities, sorted."""
        return sorted(self._chains)

    def get(self, file_id: str) -> RevisionChain | None:
        """Copy of the chain for a file, or None if untracked.

        The copy can be read freely; mutating it does not affect the store.
        """
        with self._locked(file_id):
            chain = self._chains.get(file_id)
            return chain.copy() if chain is not None else None

    def snapshot_view(self, file_id: str) -> dict[str, Any] | None:
        """Plain-data copy of a file's chain in the persisted layout, for display."""
        chain = self.get(file_id)
        return chain.to_dict() if chain is not None else None

    def reconstruct(self, file_id: str, index: int) -> str:
        """Content of a file after revision ``index`` (negative for base).

        Raises:
            NoChainForFileError: If the file has no history
            IndexOutOfRangeError: If index is past the newest revision
            CorruptChainError: If a stored patch fails to apply
        """
        with self._locked(file_id):
            chain = self._require(file_id)
            try:
                return reconstruct(chain, index, self.codec)
            except RevisionsError as e:
                raise e.for_file(file_id)

    def _require(self, file_id: str) -> RevisionChain:
        chain = self._chains.get(file_id)
        if chain is None:
            raise NoChainForFileError(file_id)
        return chain

    # ─────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────

    def create_or_get(self, file_id: str, content: str) -> RevisionChain:
        """Start a chain seeded with ``content`` unless one exists.

        Returns:
            Copy of the (new or existing) chain.
        """
        with self._locked(file_id):
            chain, created = create_or_get_chain(self._chains, file_id, content)
            view = chain.copy()
        if created:
            self.persist()
        return view

    def upsert_and_append(
        self,
        file_id: str,
        content: str,
        label: str | None = None,
        *,
        timestamp: int | None = None,
    ) -> SnapshotResult:
        """Record a snapshot: start a chain, or append and trim to the maximum.

        Content above the byte ceiling is skipped without touching the chain
        or the storage; the result says so.

        Raises:
            CorruptChainError: If the chain's latest content cannot be rebuilt
            StorageError: If persisting fails
        """
        try:
            with self._locked(file_id):
                chain = self._chains.get(file_id)
                if chain is None:
                    size = content_size(content)
                    if size > self.max_content_bytes:
                        raise ContentTooLargeError(size=size, limit=self.max_content_bytes)
                    chain, _ = create_or_get_chain(self._chains, file_id, content)
                    result = SnapshotResult(file_id=file_id, created=True)
                else:
                    revision = append_revision(
                        chain,
                        content,
                        self.codec,
                        label,
                        timestamp=timestamp,
                        max_bytes=self.max_content_bytes,
                    )
                    trimmed = trim_to_max(chain, self._max_revisions, self.codec)
                    result = SnapshotResult(
                        file_id=file_id,
                        revision=revision,
                        revision_count=len(chain),
                        trimmed=trimmed,
                    )
        except ContentTooLargeError as e:
            e.for_file(file_id)
            logger.warning("Skipping snapshot of %s: %s", file_id, e.message)
            return SnapshotResult(file_id=file_id, skipped=True, skip_reason=e.message)
        except RevisionsError as e:
            raise e.for_file(file_id)

        logger.info(
            "Snapshot for %s: created=%s revisions=%d trimmed=%d",
            file_id, result.created, result.revision_count, result.trimmed,
        )
        self.persist()
        return result

    def rename(self, file_id: str, index: int, label: str | None) -> Revision:
        """Set or clear (empty label) the label of one revision.

        Raises:
            NoChainForFileError: If the file has no history
            IndexOutOfRangeError: If index is not a revision index
        """
        with self._locked(file_id):
            chain = self._require(file_id)
            try:
                revision = rename_revision(chain, index, label)
            except RevisionsError as e:
                raise e.for_file(file_id)
        self.persist()
        return revision

    def forget(self, file_id: str) -> bool:
        """Drop a file's history entirely. Returns False if it had none."""
        with self._locked(file_id):
            removed = self._chains.pop(file_id, None) is not None
        if removed:
            self.persist()
        return removed

    def apply_retention(self, max_count: int | None = None) -> RetentionReport:
        """Trim every chain to the newest ``max_count`` revisions.

        Args:
            max_count: New per-file maximum; None re-applies the current one.

        A corrupt chain is reported and left as is; other files still trim.
        """
        if max_count is not None:
            self._max_revisions = validate_max_count(max_count)
        limit = self._max_revisions

        trimmed: dict[str, int] = {}
        corrupt: dict[str, str] = {}
        for file_id in self.files():
            with self._locked(file_id):
                chain = self._chains.get(file_id)
                if chain is None:
                    continue
                try:
                    removed = trim_to_max(chain, limit, self.codec)
                except CorruptChainError as e:
                    logger.error("Cannot trim %s: %s", file_id, e.message)
                    corrupt[file_id] = e.message
                    continue
            if removed:
                trimmed[file_id] = removed

        if trimmed:
            logger.info("Trimmed %d revisions across %d files", sum(trimmed.values()), len(trimmed))
            self.persist()
        return RetentionReport(max_count=limit, trimmed=trimmed, corrupt=corrupt)

    def cleanup_older_than(self, days: int, *, now: int | None = None) -> CleanupReport:
        """Remove revisions older than ``days`` days from every chain.

        Only a leading run of expired revisions is removed from each chain.
        A chain left without revisions is deleted; the next snapshot of that
        file starts a fresh history. A chain whose every revision expired is
        deleted without replaying it, so even a corrupt one is cleaned up.

        Args:
            days: Age threshold; 0 removes everything up to now
            now: Current time in ms (default: wall clock)
        """
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        cutoff = age_cutoff(now_ms() if now is None else now, days)

        removed = 0
        deleted: list[str] = []
        corrupt: dict[str, str] = {}
        for file_id in self.files():
            with self._locked(file_id):
                chain = self._chains.get(file_id)
                if chain is None:
                    continue
                expired = expired_prefix_length(chain.revisions, cutoff)
                if expired == len(chain.revisions):
                    removed += expired
                    del self._chains[file_id]
                    deleted.append(file_id)
                    continue
                try:
                    removed += trim_older_than(chain, cutoff, self.codec)
                except CorruptChainError as e:
                    logger.error("Cannot clean up %s: %s", file_id, e.message)
                    corrupt[file_id] = e.message

        if removed or deleted:
            logger.info("Cleaned up %d revisions, deleted %d files", removed, len(deleted))
            self.persist()
        return CleanupReport(
            days=days,
            cutoff_ms=cutoff,
            removed=removed,
            deleted_files=tuple(deleted),
            corrupt=corrupt,
        )
