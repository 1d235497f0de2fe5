"""Patch codec: the text-diff capability the revision chain is built on.

A codec turns two strings into a storable patch text and applies such a
patch back onto a string. The chain only ever stores and replays the text
form, so any codec satisfying PatchCodec can back it.

The default codec wraps diff-match-patch. Patches are produced from a
semantically cleaned diff and stored with ``patch_toText``.
"""

import logging
from typing import Protocol, runtime_checkable

from diff_match_patch import diff_match_patch

logger = logging.getLogger(__name__)


class PatchApplyError(ValueError):
    """A patch text could not be parsed, or did not apply cleanly."""


@runtime_checkable
class PatchCodec(Protocol):
    """Produce and apply serialized patches."""

    def make_patch(self, old: str, new: str) -> str:
        """Return patch text transforming ``old`` into ``new``."""
        ...

    def apply_patch(self, content: str, patch_text: str) -> str:
        """Apply ``patch_text`` to ``content`` and return the result.

        Raises:
            PatchApplyError: If the patch is malformed or any hunk fails.
        """
        ...


class DiffMatchPatchCodec:
    """PatchCodec backed by Google's diff-match-patch.

    Example:
        >>> codec = DiffMatchPatchCodec()
        >>> patch = codec.make_patch("hello", "hello world")
        >>> codec.apply_patch("hello", patch)
        'hello world'
    """

    def __init__(self, *, diff_timeout: float = 1.0) -> None:
        """Initialize the codec.

        Args:
            diff_timeout: Seconds diff_main may spend before settling for a
                coarser (still correct) diff. 0 means no limit.
        """
        self._dmp = diff_match_patch()
        self._dmp.Diff_Timeout = diff_timeout

    def make_patch(self, old: str, new: str) -> str:
        diffs = self._dmp.diff_main(old, new)
        self._dmp.diff_cleanupSemantic(diffs)
        patches = self._dmp.patch_make(old, diffs)
        return self._dmp.patch_toText(patches)

    def apply_patch(self, content: str, patch_text: str) -> str:
        if not patch_text:
            return content

        try:
            patches = self._dmp.patch_fromText(patch_text)
        except (ValueError, IndexError) as e:
            raise PatchApplyError(f"malformed patch: {e}") from e

        patched, results = self._dmp.patch_apply(patches, content)
        failed = results.count(False)
        if failed:
            logger.debug("Patch apply failed: %d of %d hunks rejected", failed, len(results))
            raise PatchApplyError(f"{failed} of {len(results)} hunks did not apply")
        return patched
