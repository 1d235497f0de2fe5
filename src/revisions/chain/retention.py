"""Retention policy: max-count trimming and age-based cleanup.

Both rules only ever drop the oldest revisions, and both fold the dropped
prefix into a new base before discarding it. The cut-point content is
rebuilt first, so a failure leaves the chain untouched.
"""

import logging
from collections.abc import Sequence

from revisions.chain.models import Revision, RevisionChain
from revisions.chain.operations import rebase
from revisions.codec import PatchCodec
from revisions.foundation.config import validate_max_revisions as validate_max_count

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000


def excess_count(length: int, max_count: int) -> int:
    """How many of ``length`` revisions exceed ``max_count``."""
    return max(0, length - max_count)


def age_cutoff(now_ms: int, days: int) -> int:
    """Timestamp at or before which revisions are eligible for cleanup."""
    return now_ms - days * MS_PER_DAY


def expired_prefix_length(revisions: Sequence[Revision], cutoff_ms: int) -> int:
    """Length of the leading run of revisions with ``timestamp <= cutoff_ms``.

    Stops at the first revision newer than the cutoff. An old revision that
    follows a newer one is never counted, since removing it would leave a
    gap in the replay sequence.
    """
    count = 0
    for revision in revisions:
        if revision.timestamp > cutoff_ms:
            break
        count += 1
    return count


def trim_to_max(chain: RevisionChain, max_count: int, codec: PatchCodec) -> int:
    """Keep only the newest ``max_count`` revisions.

    Returns:
        Number of revisions removed.
    """
    if max_count < 0:
        raise ValueError(f"max_count must be non-negative, got {max_count}")
    excess = excess_count(len(chain.revisions), max_count)
    if not excess:
        return 0
    return rebase(chain, excess - 1, codec)


def trim_older_than(chain: RevisionChain, cutoff_ms: int, codec: PatchCodec) -> int:
    """Drop the expired prefix of the chain.

    Returns:
        Number of revisions removed. When this equals the chain length the
        chain is left base-only and the caller decides whether to keep it.
    """
    expired = expired_prefix_length(chain.revisions, cutoff_ms)
    if not expired:
        return 0

    stragglers = sum(1 for r in chain.revisions[expired:] if r.timestamp <= cutoff_ms)
    if stragglers:
        logger.warning(
            "%d expired revision(s) follow newer ones and were kept", stragglers
        )
    return rebase(chain, expired - 1, codec)
