"""Serialization helpers for the history file and config files.

History writes go through a temp file and ``os.replace`` so a crash mid-save
never leaves a half-written history behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def safe_json_dump(obj: dict[str, Any] | list[Any], path: Path, *, indent: int | None = 2) -> bool:
    """Atomically write ``obj`` as JSON, creating parent directories.

    Returns:
        True if the file was replaced, False if writing or encoding failed
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(obj, indent=indent, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(suffix=".tmp", prefix=path.stem + "_", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        return True
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        return False
    except (TypeError, ValueError) as e:
        logger.error("Failed to encode JSON for %s: %s", path, e)
        return False


def safe_yaml_loads(content: str) -> dict[str, Any]:
    """Parse a YAML mapping; an empty document is an empty dict.

    Raises:
        ValueError: If the YAML is invalid or not a mapping
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML must contain a mapping, got {type(data).__name__}")
    return data


def safe_yaml_load(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from ``path``.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the YAML is invalid, prefixed with the path
    """
    try:
        return safe_yaml_loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


def safe_yaml_dump(obj: dict[str, Any], path: Path) -> None:
    """Write a mapping as block-style YAML, keeping key order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(obj, default_flow_style=False, sort_keys=False), encoding="utf-8")
