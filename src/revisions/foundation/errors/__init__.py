"""Error system for Revisions."""

from revisions.foundation.errors.errors import (
    ERROR_LEVELS,
    ERROR_MESSAGES,
    RECOVERY_HINTS,
    ConfigError,
    ContentTooLargeError,
    CorruptChainError,
    ErrorCode,
    ErrorLevel,
    IndexOutOfRangeError,
    NoChainForFileError,
    RevisionsError,
    StorageError,
)

__all__ = [
    "ERROR_LEVELS",
    "ERROR_MESSAGES",
    "RECOVERY_HINTS",
    "ConfigError",
    "ContentTooLargeError",
    "CorruptChainError",
    "ErrorCode",
    "ErrorLevel",
    "IndexOutOfRangeError",
    "NoChainForFileError",
    "RevisionsError",
    "StorageError",
]
