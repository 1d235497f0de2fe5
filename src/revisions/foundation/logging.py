"""Logging setup for the revisions CLI.

Level resolution, highest priority first:
    1. ``level`` argument
    2. REVISIONS_LOG_LEVEL (DEBUG, INFO, WARNING, ... or a number)
    3. REVISIONS_DEBUG=true
    4. ``debug=True`` (``--debug`` or ``debug: true`` in config)
    5. WARNING

With ``log_dir`` set, every record down to DEBUG is also written to a
per-session file there, and only the newest sessions are kept.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

DEFAULT_LOG_DIR = Path(".revisions") / "logs"

_VERBOSE_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_SHORT_FORMAT = "%(name)s: %(message)s"

# watchfiles reports every batch of changes at INFO
_QUIET_LOGGERS = ("watchfiles", "watchfiles.main")

KEEP_SESSIONS = 10


def _resolve_level(debug: bool, level: int | str | None) -> int:
    if level is not None:
        return _parse_level(level)
    if env_level := os.environ.get("REVISIONS_LOG_LEVEL"):
        return _parse_level(env_level)
    if debug or os.environ.get("REVISIONS_DEBUG", "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    return logging.WARNING


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    named = logging.getLevelName(level.strip().upper())
    if isinstance(named, int):
        return named
    return int(level) if level.strip().isdigit() else logging.WARNING


def _prune_sessions(log_dir: Path, keep: int) -> None:
    sessions = sorted(log_dir.glob("session_*.log"), key=lambda p: p.stat().st_mtime)
    for stale in sessions[: max(len(sessions) - keep, 0)]:
        stale.unlink(missing_ok=True)


def _session_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    _prune_sessions(log_dir, KEEP_SESSIONS - 1)
    stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    handler = logging.FileHandler(log_dir / f"session_{stamp}.log", mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT))
    return handler


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: TextIO | None = None,
    log_dir: Path | None = None,
) -> None:
    """Install console (and optionally session file) handlers on the root logger.

    Args:
        debug: Log at DEBUG with timestamps
        level: Explicit level, overriding flags and env vars
        stream: Console stream (default: stderr)
        log_dir: Directory for persistent session logs
    """
    console_level = _resolve_level(debug, level)

    root = logging.getLogger()
    root.handlers.clear()
    # the session file wants DEBUG even when the console is quieter
    root.setLevel(logging.DEBUG if log_dir is not None else console_level)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_VERBOSE_FORMAT if console_level <= logging.DEBUG else _SHORT_FORMAT)
    )
    root.addHandler(console)

    if log_dir is not None:
        try:
            root.addHandler(_session_handler(log_dir))
        except OSError as e:
            sys.stderr.write(f"Warning: session log disabled: {e}\n")

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, session_dir=%s",
        logging.getLevelName(console_level),
        log_dir,
    )
