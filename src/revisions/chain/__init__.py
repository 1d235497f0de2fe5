"""Revision chains: a base snapshot plus replayable patches.

Example:
    >>> from revisions.chain import RevisionChain, append_revision, reconstruct
    >>> from revisions.codec import DiffMatchPatchCodec
    >>> codec = DiffMatchPatchCodec()
    >>> chain = RevisionChain(base="hello")
    >>> _ = append_revision(chain, "hello world", codec, label="v1")
    >>> reconstruct(chain, 0, codec)
    'hello world'
"""

from revisions.chain.models import Revision, RevisionChain
from revisions.chain.operations import (
    BASE_INDEX,
    BASE_NAME,
    DEFAULT_MAX_CONTENT_BYTES,
    RevisionSummary,
    append_revision,
    content_size,
    create_or_get_chain,
    latest_content,
    now_ms,
    rebase,
    reconstruct,
    rename_revision,
    revision_summaries,
)
from revisions.chain.retention import (
    MS_PER_DAY,
    age_cutoff,
    excess_count,
    expired_prefix_length,
    trim_older_than,
    trim_to_max,
    validate_max_count,
)

__all__ = [
    "BASE_INDEX",
    "BASE_NAME",
    "DEFAULT_MAX_CONTENT_BYTES",
    "MS_PER_DAY",
    "Revision",
    "RevisionChain",
    "RevisionSummary",
    "age_cutoff",
    "append_revision",
    "content_size",
    "create_or_get_chain",
    "excess_count",
    "expired_prefix_length",
    "latest_content",
    "now_ms",
    "rebase",
    "reconstruct",
    "rename_revision",
    "revision_summaries",
    "trim_older_than",
    "trim_to_max",
    "validate_max_count",
]
