"""Foundation domain - config, errors, logging and serialization.

Everything else in revisions imports from here; nothing here imports from
the rest of the package.
"""

from revisions.foundation.config import (
    RevisionsConfig,
    load_config,
)
from revisions.foundation.errors import (
    ConfigError,
    ContentTooLargeError,
    CorruptChainError,
    ErrorCode,
    IndexOutOfRangeError,
    NoChainForFileError,
    RevisionsError,
    StorageError,
)

__all__ = [
    "ConfigError",
    "ContentTooLargeError",
    "CorruptChainError",
    "ErrorCode",
    "IndexOutOfRangeError",
    "NoChainForFileError",
    "RevisionsConfig",
    "RevisionsError",
    "StorageError",
    "load_config",
]
