"""Configuration management for Revisions."""

from revisions.foundation.config.loader import (
    MAX_REVISIONS_PER_FILE,
    MIN_REVISIONS_PER_FILE,
    PROJECT_CONFIG_PATH,
    USER_CONFIG_PATH,
    RevisionsConfig,
    load_config,
    save_config_value,
    save_default_config,
    validate_max_revisions,
)

__all__ = [
    "MAX_REVISIONS_PER_FILE",
    "MIN_REVISIONS_PER_FILE",
    "PROJECT_CONFIG_PATH",
    "USER_CONFIG_PATH",
    "RevisionsConfig",
    "load_config",
    "save_config_value",
    "save_default_config",
    "validate_max_revisions",
]
