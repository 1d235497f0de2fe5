"""Revisions configuration management.

Loads configuration from .revisions/config.yaml with sensible defaults.
All settings can be overridden via environment variables (REVISIONS_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .revisions/config.yaml (project-local)
3. ~/.revisions/config.yaml (user-global)
4. Built-in defaults

Every call to load_config() reads the files again; callers keep the result.
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from revisions.foundation.errors import ConfigError
from revisions.foundation.utils.serialization import safe_yaml_dump, safe_yaml_load

logger = logging.getLogger(__name__)

ENV_PREFIX = "REVISIONS_"
PROJECT_CONFIG_PATH = Path(".revisions") / "config.yaml"
USER_CONFIG_PATH = Path.home() / ".revisions" / "config.yaml"

MIN_REVISIONS_PER_FILE = 1
MAX_REVISIONS_PER_FILE = 1000


@dataclass(frozen=True, slots=True)
class RevisionsConfig:
    """Root configuration for Revisions."""

    max_revisions_per_file: int = 50
    """Cap on revisions kept per file; re-applied on startup and on change."""

    max_content_bytes: int = 1024 * 1024
    """Snapshots of content larger than this (UTF-8 bytes) are skipped."""

    store_path: str = ".revisions/history.json"
    """Where the history of every tracked file is persisted."""

    watch_extensions: tuple[str, ...] = ()
    """File suffixes the watcher snapshots. Empty means every text file."""

    watch_debounce_ms: int = 1600
    """How long the watcher groups file changes before snapshotting."""

    debug: bool = False
    """Enable debug logging by default."""


def _coerce(value: str) -> Any:
    """Coerce an environment or CLI string to bool, int, float or str."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _field_names() -> set[str]:
    return {f.name for f in fields(RevisionsConfig)}


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables follow the pattern REVISIONS_<KEY>, e.g.

        REVISIONS_MAX_REVISIONS_PER_FILE=100
        REVISIONS_WATCH_EXTENSIONS=.py,.md
    """
    known = _field_names()
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name not in known:
            continue
        if name == "watch_extensions":
            config_dict[name] = [part.strip() for part in value.split(",") if part.strip()]
        elif name == "store_path":
            config_dict[name] = value
        else:
            config_dict[name] = _coerce(value)
    return config_dict


def validate_max_revisions(value: Any) -> int:
    """Check max_revisions_per_file is an int within [1, 1000]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError("max_revisions_per_file", "must be an integer", value)
    if not MIN_REVISIONS_PER_FILE <= value <= MAX_REVISIONS_PER_FILE:
        raise ConfigError(
            "max_revisions_per_file",
            f"must be between {MIN_REVISIONS_PER_FILE} and {MAX_REVISIONS_PER_FILE}",
            value,
        )
    return value


def _dict_to_config(data: dict[str, Any]) -> RevisionsConfig:
    """Convert a dict to RevisionsConfig, validating each value."""
    unknown = set(data) - _field_names()
    for key in sorted(unknown):
        logger.warning("Ignoring unknown config key: %s", key)

    max_revisions = validate_max_revisions(data["max_revisions_per_file"])

    max_bytes = data["max_content_bytes"]
    if isinstance(max_bytes, bool) or not isinstance(max_bytes, int) or max_bytes < 1:
        raise ConfigError("max_content_bytes", "must be a positive integer", max_bytes)

    debounce = data["watch_debounce_ms"]
    if isinstance(debounce, bool) or not isinstance(debounce, int) or debounce < 0:
        raise ConfigError("watch_debounce_ms", "must be a non-negative integer", debounce)

    extensions = data["watch_extensions"] or ()
    if isinstance(extensions, str):
        extensions = [extensions]
    normalized = tuple(ext if ext.startswith(".") else f".{ext}" for ext in extensions)

    return RevisionsConfig(
        max_revisions_per_file=max_revisions,
        max_content_bytes=max_bytes,
        store_path=str(data["store_path"]),
        watch_extensions=normalized,
        watch_debounce_ms=debounce,
        debug=bool(data["debug"]),
    )


def load_config(path: str | Path | None = None) -> RevisionsConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (REVISIONS_*)
    2. Explicit path if provided
    3. .revisions/config.yaml (project-local)
    4. ~/.revisions/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged RevisionsConfig instance.

    Raises:
        ConfigError: If a value is invalid.
    """
    # Defaults come from the dataclass itself
    config_dict: dict[str, Any] = asdict(RevisionsConfig())

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([PROJECT_CONFIG_PATH, USER_CONFIG_PATH])

    for config_path in config_paths:
        if config_path.exists():
            try:
                config_dict.update(safe_yaml_load(config_path))
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable config file %s: %s", config_path, e)
                continue
            logger.debug("Loaded config from %s", config_path)
            break  # Use first found config

    config_dict = _apply_env_overrides(config_dict)

    return _dict_to_config(config_dict)


def save_config_value(key: str, raw_value: str, path: Path | None = None) -> RevisionsConfig:
    """Persist a single key to a config file and reload.

    The new value is validated before anything is written.

    Args:
        key: Config field name, e.g. "max_revisions_per_file"
        raw_value: String value as typed by the user
        path: Config file to update (default: project-local)

    Returns:
        The reloaded configuration.
    """
    if key not in _field_names():
        raise ConfigError(key, "unknown configuration key", raw_value)

    target = path or PROJECT_CONFIG_PATH
    existing = safe_yaml_load(target) if target.exists() else {}

    value: Any
    if key == "watch_extensions":
        value = [part.strip() for part in raw_value.split(",") if part.strip()]
    elif key == "store_path":
        value = raw_value
    else:
        value = _coerce(raw_value)

    candidate = asdict(RevisionsConfig())
    candidate.update(existing)
    candidate[key] = value
    _dict_to_config(candidate)

    existing[key] = value
    safe_yaml_dump(existing, target)
    return load_config(target)


def save_default_config(path: Path | None = None) -> Path:
    """Write the default configuration to a file and return its path."""
    target = path or PROJECT_CONFIG_PATH
    data = asdict(RevisionsConfig())
    data["watch_extensions"] = list(data["watch_extensions"])
    safe_yaml_dump(data, target)
    return target
