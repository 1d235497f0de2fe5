"""Backing storage for the chain map.

The store hands the whole ``{file_id: chain_dict}`` map to a storage
adapter on every save; there is no incremental persistence.

Storage layout (JsonFileStorage):
    .revisions/history.json
    {
        "version": 1,
        "updated_at": "...",
        "files": {
            "/abs/path.txt": {"base": "...", "revisions": [{"patch": "...", "timestamp": 0}]}
        }
    }

A bare ``{file_id: chain_dict}`` document (no "files" wrapper) is also read.
"""

import copy
import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from revisions.foundation.errors import StorageError
from revisions.foundation.utils.serialization import safe_json_dump

logger = logging.getLogger(__name__)

ChainMap = dict[str, dict[str, Any]]


class StorageAdapter(Protocol):
    """Load and save the complete chain map."""

    def load(self) -> ChainMap:
        """Return the persisted map, empty if nothing was saved yet."""
        ...

    def save(self, chains: ChainMap) -> None:
        """Replace the persisted map with ``chains``."""
        ...


class JsonFileStorage:
    """Persist the chain map as a single JSON document.

    Writes go through a temp file and rename, so a crash mid-save keeps the
    previous history intact. An unreadable file raises StorageError instead
    of silently starting an empty history over the old one.
    """

    FORMAT_VERSION = 1

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> ChainMap:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StorageError(str(self.path), f"invalid JSON at line {e.lineno}", e) from e
        except OSError as e:
            raise StorageError(str(self.path), e.strerror or str(e), e) from e

        if not isinstance(data, dict):
            raise StorageError(str(self.path), "top level must be an object")

        files = data["files"] if "version" in data and "files" in data else data
        if not isinstance(files, dict):
            raise StorageError(str(self.path), "'files' must be an object")
        logger.debug("Loaded %d chains from %s", len(files), self.path)
        return files

    def save(self, chains: ChainMap) -> None:
        document = {
            "version": self.FORMAT_VERSION,
            "updated_at": datetime.now(UTC).isoformat(),
            "files": chains,
        }
        if not safe_json_dump(document, self.path):
            raise StorageError(str(self.path), "write failed (see log for details)")
        logger.debug("Saved %d chains to %s", len(chains), self.path)


class MemoryStorage:
    """In-process storage, for tests and embedding.

    Saved data is deep-copied through JSON so anything that would not survive
    a real round trip fails here too.
    """

    def __init__(self, initial: ChainMap | None = None) -> None:
        self._data: ChainMap = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()
        self.save_count = 0

    def load(self) -> ChainMap:
        with self._lock:
            return copy.deepcopy(self._data)

    def save(self, chains: ChainMap) -> None:
        snapshot = json.loads(json.dumps(chains))
        with self._lock:
            self._data = snapshot
            self.save_count += 1

    @property
    def data(self) -> ChainMap:
        with self._lock:
            return copy.deepcopy(self._data)
