"""Typed errors for the revision engine.

Every failure the core can report carries an ErrorCode, a context dict used
to render a short human-readable message, an optional underlying cause and
a severity level the host uses when surfacing it:

- ``info``: nothing to show (no history for a file)
- ``warning``: soft failure, the operation was skipped (content too large)
- ``error``: the operation failed for this file only

Errors are always file-scoped. Batch operations report them per file and
keep going.
"""

from enum import Enum
from typing import Any, Literal

ErrorLevel = Literal["info", "warning", "error"]


class ErrorCode(Enum):
    """Stable error identifiers.

    The numeric range encodes the category:
    1xxx chain, 2xxx store, 3xxx config, 9xxx internal.
    """

    CONTENT_TOO_LARGE = 1001
    CHAIN_CORRUPT = 1002
    INDEX_OUT_OF_RANGE = 1003
    NO_CHAIN_FOR_FILE = 2001
    STORAGE_FAILED = 2002
    CONFIG_INVALID = 3001
    INTERNAL_ERROR = 9001

    @property
    def category(self) -> str:
        return {1: "chain", 2: "store", 3: "config", 9: "internal"}[self.value // 1000]


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CONTENT_TOO_LARGE: (
        "Content is {size} bytes, above the {limit} byte limit; snapshot skipped"
    ),
    ErrorCode.CHAIN_CORRUPT: "History is corrupt at revision {index}: {detail}",
    ErrorCode.INDEX_OUT_OF_RANGE: (
        "Revision index {index} is out of range (history has {length} revisions)"
    ),
    ErrorCode.NO_CHAIN_FOR_FILE: "No revisions found for this file",
    ErrorCode.STORAGE_FAILED: "Could not access revision storage at {path}: {detail}",
    ErrorCode.CONFIG_INVALID: "Invalid configuration value for {key}: {detail}",
    ErrorCode.INTERNAL_ERROR: "Unexpected internal error: {detail}",
}

RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.CONTENT_TOO_LARGE: [
        "Raise max_content_bytes with: revisions config set max_content_bytes <bytes>",
    ],
    ErrorCode.CHAIN_CORRUPT: [
        "Older revisions may still be readable; try a lower index",
        "Run 'revisions cleanup' or remove the file's entry to start a fresh history",
    ],
    ErrorCode.INDEX_OUT_OF_RANGE: [
        "List valid indices with: revisions history <path>",
    ],
    ErrorCode.NO_CHAIN_FOR_FILE: [
        "Create the first snapshot with: revisions snapshot <path>",
    ],
    ErrorCode.STORAGE_FAILED: [
        "Check that the store file is readable, writable and valid JSON",
    ],
    ErrorCode.CONFIG_INVALID: [
        "Show the active configuration with: revisions config show",
    ],
    ErrorCode.INTERNAL_ERROR: [
        "Re-run with --debug to log the traceback",
    ],
}

ERROR_LEVELS: dict[ErrorCode, ErrorLevel] = {
    ErrorCode.CONTENT_TOO_LARGE: "warning",
    ErrorCode.NO_CHAIN_FOR_FILE: "info",
}


class _Missing(dict):
    def __missing__(self, key: str) -> str:
        return "?"


class RevisionsError(Exception):
    """Base error with a code, render context and optional cause."""

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.code = code
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause
        super().__init__(self.message)

    @property
    def message(self) -> str:
        template = ERROR_MESSAGES.get(self.code, self.code.name)
        return template.format_map(_Missing(self.context))

    @property
    def level(self) -> ErrorLevel:
        return ERROR_LEVELS.get(self.code, "error")

    @property
    def recovery_hints(self) -> list[str]:
        return RECOVERY_HINTS.get(self.code, [])

    @property
    def file_id(self) -> str | None:
        return self.context.get("file_id")

    def for_file(self, file_id: str) -> "RevisionsError":
        """Attach the file identity the error belongs to and return self."""
        self.context.setdefault("file_id", file_id)
        return self

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "error_id": f"RV-{self.code.value}",
            "code": self.code.name,
            "category": self.code.category,
            "level": self.level,
            "message": self.message,
            "context": {k: v for k, v in self.context.items() if _is_plain(v)},
            "recovery_hints": self.recovery_hints,
        }


def _is_plain(value: Any) -> bool:
    return isinstance(value, str | int | float | bool) or value is None


class ContentTooLargeError(RevisionsError):
    """New content exceeds the configured byte ceiling. Soft: append is skipped."""

    def __init__(self, size: int, limit: int, file_id: str | None = None) -> None:
        self.size = size
        self.limit = limit
        context: dict[str, Any] = {"size": size, "limit": limit}
        if file_id is not None:
            context["file_id"] = file_id
        super().__init__(ErrorCode.CONTENT_TOO_LARGE, context)


class CorruptChainError(RevisionsError):
    """A stored patch could not be parsed or applied during replay."""

    def __init__(
        self,
        index: int,
        detail: str,
        cause: BaseException | None = None,
        file_id: str | None = None,
    ) -> None:
        self.index = index
        context: dict[str, Any] = {"index": index, "detail": detail}
        if file_id is not None:
            context["file_id"] = file_id
        super().__init__(ErrorCode.CHAIN_CORRUPT, context, cause)


class IndexOutOfRangeError(RevisionsError):
    """A revision index does not exist in the chain."""

    def __init__(self, index: int, length: int, file_id: str | None = None) -> None:
        self.index = index
        self.length = length
        context: dict[str, Any] = {"index": index, "length": length}
        if file_id is not None:
            context["file_id"] = file_id
        super().__init__(ErrorCode.INDEX_OUT_OF_RANGE, context)


class NoChainForFileError(RevisionsError):
    """History was requested for a file that has none."""

    def __init__(self, file_id: str) -> None:
        super().__init__(ErrorCode.NO_CHAIN_FOR_FILE, {"file_id": file_id})


class StorageError(RevisionsError):
    """Persisted state could not be read or written."""

    def __init__(self, path: str, detail: str, cause: BaseException | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_FAILED, {"path": path, "detail": detail}, cause)


class ConfigError(RevisionsError):
    """A configuration value is missing, mistyped or out of range."""

    def __init__(self, key: str, detail: str, value: Any = None) -> None:
        super().__init__(
            ErrorCode.CONFIG_INVALID,
            {"key": key, "detail": detail, "value": value},
        )
