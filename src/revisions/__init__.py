"""Revisions - per-file version history stored as patch chains.

Each tracked file keeps a base snapshot plus an ordered list of patches;
any past version is rebuilt by replaying patches onto the base.
"""

__version__ = "0.1.0"

from revisions.chain import Revision, RevisionChain
from revisions.codec import DiffMatchPatchCodec, PatchCodec
from revisions.foundation.errors import RevisionsError
from revisions.store import ChainStore, JsonFileStorage, MemoryStorage

__all__ = [
    "ChainStore",
    "DiffMatchPatchCodec",
    "JsonFileStorage",
    "MemoryStorage",
    "PatchCodec",
    "Revision",
    "RevisionChain",
    "RevisionsError",
    "__version__",
]
