"""Revision chain data models.

A chain is one fully materialized base plus an ordered list of revisions,
oldest first. Each revision stores only the patch from the content before
it to the content after it, so a revision is meaningless without every
revision that precedes it.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Revision:
    """One recorded change step."""

    patch: str
    """Serialized patch from the previous content to this revision's content."""

    timestamp: int
    """Creation time in milliseconds since the epoch."""

    label: str | None = None
    """Optional user-assigned name."""

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, UTC)

    def display_name(self, index: int) -> str:
        """Label if set, else the 1-based position ("Revision 3")."""
        return self.label or f"Revision {index + 1}"

    def with_label(self, label: str | None) -> "Revision":
        """Return a copy with the label set, or cleared when empty."""
        cleaned = label.strip() if label else ""
        return replace(self, label=cleaned or None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted layout; ``label`` is omitted when unset."""
        data: dict[str, Any] = {"patch": self.patch, "timestamp": self.timestamp}
        if self.label:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Revision":
        """Deserialize from dict.

        Accepts the older ``diff`` key in place of ``patch``.
        """
        patch = data["patch"] if "patch" in data else data["diff"]
        if not isinstance(patch, str):
            raise TypeError(f"patch must be a string, got {type(patch).__name__}")
        timestamp = data["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
            raise TypeError(f"timestamp must be a number, got {type(timestamp).__name__}")
        label = data.get("label")
        return cls(patch=patch, timestamp=int(timestamp), label=label or None)


@dataclass(slots=True)
class RevisionChain:
    """Base snapshot plus the ordered revisions replayed on top of it.

    Mutated only through the functions in revisions.chain.operations and
    revisions.chain.retention, which keep every index reconstructable.
    """

    base: str
    revisions: list[Revision] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.revisions)

    @property
    def last_index(self) -> int:
        """Index of the newest revision, -1 (base) when there are none."""
        return len(self.revisions) - 1

    @property
    def latest_timestamp(self) -> int | None:
        return self.revisions[-1].timestamp if self.revisions else None

    def copy(self) -> "RevisionChain":
        """Shallow copy; revisions are immutable so sharing them is safe."""
        return RevisionChain(base=self.base, revisions=list(self.revisions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "base": self.base,
            "revisions": [r.to_dict() for r in self.revisions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RevisionChain":
        """Deserialize from dict.

        Accepts the older ``baseContent`` key in place of ``base``.
        """
        base = data["base"] if "base" in data else data["baseContent"]
        if not isinstance(base, str):
            raise TypeError(f"base must be a string, got {type(base).__name__}")
        raw_revisions = data.get("revisions", [])
        if not isinstance(raw_revisions, list):
            raise TypeError("revisions must be a list")
        return cls(
            base=base,
            revisions=[Revision.from_dict(r) for r in raw_revisions],
        )
