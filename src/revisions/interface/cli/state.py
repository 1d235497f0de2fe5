"""Per-invocation CLI state shared by every command."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import click

from revisions.foundation.config import RevisionsConfig
from revisions.interface.host import RevisionsHost
from revisions.store import ChainStore, JsonFileStorage

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Resolved options plus a lazily started host."""

    config: RevisionsConfig
    store_path: Path
    json_errors: bool = False
    _host: RevisionsHost | None = field(default=None, repr=False)

    @property
    def host(self) -> RevisionsHost:
        """The host, loading history from disk on first use."""
        if self._host is None:
            store = ChainStore(
                JsonFileStorage(self.store_path),
                max_revisions=self.config.max_revisions_per_file,
                max_content_bytes=self.config.max_content_bytes,
            )
            host = RevisionsHost(store)
            startup = host.start()
            for file_id, detail in startup.unreadable.items():
                logger.warning("History for %s is unreadable and was left untouched: %s", file_id, detail)
            self._host = host
        return self._host


def file_identity(path: str | Path) -> str:
    """Stable key for a file: its absolute, resolved path."""
    return str(Path(path).expanduser().resolve())


def load_text(path: str | Path) -> str:
    """Decode a file as UTF-8 with its line endings left as stored.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not UTF-8 text
    """
    return Path(path).read_bytes().decode("utf-8")


def read_text(path: str | Path) -> str:
    """Read a tracked file as UTF-8 text.

    Raises:
        click.ClickException: If the file is unreadable or not text
    """
    try:
        return load_text(path)
    except UnicodeDecodeError as e:
        raise click.ClickException(f"{path} is not a UTF-8 text file") from e
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e.strerror or e}") from e


def write_text(path: str | Path, content: str) -> None:
    """Write restored content back without translating newlines."""
    Path(path).write_text(content, encoding="utf-8", newline="")


class RevisionIndex(click.ParamType):
    """A reconstruction index: an integer, or 'base' (same as -1)."""

    name = "index"

    def convert(self, value: object, param: click.Parameter | None, ctx: click.Context | None) -> int:
        if isinstance(value, int):
            return value
        text = str(value).strip().lower()
        if text == "base":
            return -1
        try:
            return int(text)
        except ValueError:
            self.fail(f"{value!r} is not a revision index (use a number or 'base')", param, ctx)


REVISION_INDEX = RevisionIndex()
