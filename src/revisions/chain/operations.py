"""Revision chain operations: create, append, reconstruct, rename, rebase.

Reconstruction replays patches from the base, so reading index ``i`` costs
``i + 1`` patch applications. Only the base is kept materialized; storage
stays compact at the price of O(n) random access.

Every mutating function here either completes or leaves the chain exactly
as it was: anything that can fail (reconstruction, size checks) runs before
the chain is touched.
"""

import logging
import time
from collections.abc import MutableMapping
from dataclasses import dataclass

from revisions.chain.models import Revision, RevisionChain
from revisions.codec import PatchApplyError, PatchCodec
from revisions.foundation.errors import (
    ContentTooLargeError,
    CorruptChainError,
    IndexOutOfRangeError,
)

logger = logging.getLogger(__name__)

BASE_INDEX = -1
BASE_NAME = "Base Version"
DEFAULT_MAX_CONTENT_BYTES = 1024 * 1024


@dataclass(frozen=True, slots=True)
class RevisionSummary:
    """One history row; ``index`` is what reconstruct expects."""

    index: int
    name: str
    timestamp: int | None
    label: str | None = None


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def content_size(content: str) -> int:
    """Size of content in UTF-8 bytes."""
    return len(content.encode("utf-8"))


def create_or_get_chain(
    chains: MutableMapping[str, RevisionChain],
    file_id: str,
    initial_content: str,
) -> tuple[RevisionChain, bool]:
    """Return the chain for ``file_id``, creating it from ``initial_content``.

    Returns:
        (chain, created) where created is True if a new chain was made.
    """
    chain = chains.get(file_id)
    if chain is not None:
        return chain, False
    chain = RevisionChain(base=initial_content)
    chains[file_id] = chain
    logger.debug("Created chain for %s (%d chars base)", file_id, len(initial_content))
    return chain, True


def reconstruct(chain: RevisionChain, index: int, codec: PatchCodec) -> str:
    """Rebuild the content after revision ``index``.

    Args:
        chain: Chain to read
        index: Negative for the base, otherwise a revision index
        codec: Codec the patches were written with

    Returns:
        Full content at that index

    Raises:
        IndexOutOfRangeError: If index >= len(chain)
        CorruptChainError: If any patch up to index fails to apply
    """
    if index < 0:
        return chain.base
    if index >= len(chain.revisions):
        raise IndexOutOfRangeError(index=index, length=len(chain.revisions))

    content = chain.base
    for position in range(index + 1):
        content = _apply(chain, position, content, codec)
    return content


def _apply(chain: RevisionChain, position: int, content: str, codec: PatchCodec) -> str:
    try:
        return codec.apply_patch(content, chain.revisions[position].patch)
    except PatchApplyError as e:
        raise CorruptChainError(index=position, detail=str(e), cause=e) from e


def latest_content(chain: RevisionChain, codec: PatchCodec) -> str:
    """Content after the newest revision (the base if there are none)."""
    return reconstruct(chain, chain.last_index, codec)


def append_revision(
    chain: RevisionChain,
    new_content: str,
    codec: PatchCodec,
    label: str | None = None,
    *,
    timestamp: int | None = None,
    max_bytes: int | None = DEFAULT_MAX_CONTENT_BYTES,
) -> Revision:
    """Record ``new_content`` as a new revision at the end of the chain.

    Identical content is still recorded: every append is a timestamped event.
    Timestamps never go backwards, so age cleanup always removes a prefix.

    Args:
        chain: Chain to extend
        new_content: Full content of the new version
        codec: Codec to diff with
        label: Optional name for the revision
        timestamp: Milliseconds since epoch (default: now)
        max_bytes: Size ceiling; None disables the check

    Returns:
        The appended Revision

    Raises:
        ContentTooLargeError: Content exceeds max_bytes; chain unchanged
        CorruptChainError: Latest content could not be rebuilt; chain unchanged
    """
    if max_bytes is not None:
        size = content_size(new_content)
        if size > max_bytes:
            raise ContentTooLargeError(size=size, limit=max_bytes)

    previous = latest_content(chain, codec)
    stamp = now_ms() if timestamp is None else timestamp
    if chain.latest_timestamp is not None and stamp < chain.latest_timestamp:
        logger.debug("Clock went backwards (%d < %d); clamping", stamp, chain.latest_timestamp)
        stamp = chain.latest_timestamp

    revision = Revision(
        patch=codec.make_patch(previous, new_content),
        timestamp=stamp,
    ).with_label(label)
    chain.revisions.append(revision)
    return revision


def revision_summaries(chain: RevisionChain) -> list[RevisionSummary]:
    """Display rows for a history view: the base first, then each revision."""
    rows = [RevisionSummary(index=BASE_INDEX, name=BASE_NAME, timestamp=None)]
    rows.extend(
        RevisionSummary(
            index=i,
            name=revision.display_name(i),
            timestamp=revision.timestamp,
            label=revision.label,
        )
        for i, revision in enumerate(chain.revisions)
    )
    return rows


def rename_revision(chain: RevisionChain, index: int, label: str | None) -> Revision:
    """Set the label of ``revisions[index]``; an empty label clears it.

    Raises:
        IndexOutOfRangeError: If index is not a valid revision index
    """
    if not 0 <= index < len(chain.revisions):
        raise IndexOutOfRangeError(index=index, length=len(chain.revisions))
    renamed = chain.revisions[index].with_label(label)
    chain.revisions[index] = renamed
    return renamed


def rebase(chain: RevisionChain, index: int, codec: PatchCodec) -> int:
    """Fold revisions ``0..=index`` into the base.

    The content at ``index`` becomes the new base and those revisions are
    dropped. Later revisions were diffed against exactly that content, so
    they keep reconstructing to the same text.

    Returns:
        Number of revisions removed.

    Raises:
        IndexOutOfRangeError: If index >= len(chain)
        CorruptChainError: If the cut point cannot be rebuilt; chain unchanged
    """
    if index < 0:
        return 0
    new_base = reconstruct(chain, index, codec)
    removed = index + 1
    chain.base = new_base
    del chain.revisions[:removed]
    return removed
