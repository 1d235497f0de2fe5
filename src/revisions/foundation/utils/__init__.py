"""Foundation utilities - serialization helpers."""

from revisions.foundation.utils.serialization import (
    safe_json_dump,
    safe_yaml_dump,
    safe_yaml_load,
)

__all__ = [
    "safe_json_dump",
    "safe_yaml_dump",
    "safe_yaml_load",
]
