"""Chain store and its storage adapters."""

from revisions.store.storage import (
    ChainMap,
    JsonFileStorage,
    MemoryStorage,
    StorageAdapter,
)
from revisions.store.store import (
    ChainStore,
    CleanupReport,
    RetentionReport,
    SnapshotResult,
)

__all__ = [
    "ChainMap",
    "ChainStore",
    "CleanupReport",
    "JsonFileStorage",
    "MemoryStorage",
    "RetentionReport",
    "SnapshotResult",
    "StorageAdapter",
]
