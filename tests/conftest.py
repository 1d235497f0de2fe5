"""Pytest fixtures for Revisions tests."""

import logging
import os
from pathlib import Path

import pytest

from revisions.codec import DiffMatchPatchCodec
from revisions.store import ChainStore, MemoryStorage


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test from an empty directory, with no user config or env overrides."""
    for key in list(os.environ):
        if key.startswith("REVISIONS_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(
        "revisions.foundation.config.loader.USER_CONFIG_PATH",
        tmp_path / "home" / ".revisions" / "config.yaml",
    )
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def codec() -> DiffMatchPatchCodec:
    return DiffMatchPatchCodec()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> ChainStore:
    """An empty store backed by memory."""
    return ChainStore(storage)


@pytest.fixture
def versions() -> list[str]:
    """Five successive versions of a small document."""
    return [
        "line one\n",
        "line one\nline two\n",
        "line one\nline 2\n",
        "line one\nline 2\nline three\n",
        "LINE ONE\nline 2\nline three\n",
    ]
