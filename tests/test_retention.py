"""Tests for max-count trimming and age-based cleanup of a single chain."""

import pytest

from revisions.chain import (
    MS_PER_DAY,
    Revision,
    RevisionChain,
    age_cutoff,
    append_revision,
    excess_count,
    expired_prefix_length,
    reconstruct,
    trim_older_than,
    trim_to_max,
    validate_max_count,
)
from revisions.codec import DiffMatchPatchCodec
from revisions.foundation.errors import ConfigError, CorruptChainError


def chain_with_stamps(codec: DiffMatchPatchCodec, stamps: list[int]) -> tuple[RevisionChain, list[str]]:
    """Chain whose revision i has content "v<i>" and timestamp stamps[i]."""
    chain = RevisionChain(base="base\n")
    contents = []
    for i, stamp in enumerate(stamps):
        content = "".join(f"line {n}\n" for n in range(i + 1)) + f"v{i}\n"
        append_revision(chain, content, codec, timestamp=stamp)
        contents.append(content)
    return chain, contents


class TestPureRules:
    def test_excess_count(self) -> None:
        assert excess_count(5, 2) == 3
        assert excess_count(2, 5) == 0
        assert excess_count(3, 3) == 0

    def test_age_cutoff(self) -> None:
        assert age_cutoff(10 * MS_PER_DAY, 3) == 7 * MS_PER_DAY
        assert age_cutoff(12345, 0) == 12345

    def test_expired_prefix_stops_at_first_newer(self) -> None:
        revisions = [Revision("", t) for t in (1, 2, 10, 3, 4)]
        assert expired_prefix_length(revisions, 5) == 2

    def test_expired_prefix_includes_cutoff_itself(self) -> None:
        revisions = [Revision("", t) for t in (5, 5, 6)]
        assert expired_prefix_length(revisions, 5) == 2

    def test_expired_prefix_of_empty(self) -> None:
        assert expired_prefix_length([], 100) == 0

    @pytest.mark.parametrize("value", [1, 50, 1000])
    def test_validate_max_count_accepts(self, value: int) -> None:
        assert validate_max_count(value) == value

    @pytest.mark.parametrize("value", [0, 1001, -5, "10", 2.5, True])
    def test_validate_max_count_rejects(self, value: object) -> None:
        with pytest.raises(ConfigError):
            validate_max_count(value)


class TestTrimToMax:
    def test_five_revisions_max_two(self, codec: DiffMatchPatchCodec) -> None:
        """Five revisions trimmed to two keep the newest two and re-base."""
        chain, contents = chain_with_stamps(codec, [1, 2, 3, 4, 5])

        removed = trim_to_max(chain, 2, codec)

        assert removed == 3
        assert len(chain) == 2
        assert chain.base == contents[2]
        assert reconstruct(chain, 0, codec) == contents[3]
        assert reconstruct(chain, 1, codec) == contents[4]
        assert [r.timestamp for r in chain.revisions] == [4, 5]

    def test_within_limit_is_noop(self, codec: DiffMatchPatchCodec) -> None:
        chain, _ = chain_with_stamps(codec, [1, 2])
        base = chain.base
        assert trim_to_max(chain, 2, codec) == 0
        assert chain.base == base

    def test_labels_survive_trim(self, codec: DiffMatchPatchCodec) -> None:
        chain, _ = chain_with_stamps(codec, [1, 2, 3])
        chain.revisions[2] = chain.revisions[2].with_label("keep me")
        trim_to_max(chain, 1, codec)
        assert chain.revisions[0].label == "keep me"

    def test_negative_max_rejected(self, codec: DiffMatchPatchCodec) -> None:
        chain, _ = chain_with_stamps(codec, [1])
        with pytest.raises(ValueError):
            trim_to_max(chain, -1, codec)


class TestTrimOlderThan:
    def test_expired_prefix_is_folded_into_base(self, codec: DiffMatchPatchCodec) -> None:
        chain, contents = chain_with_stamps(codec, [100, 200, 300, 400])

        removed = trim_older_than(chain, 250, codec)

        assert removed == 2
        assert chain.base == contents[1]
        assert reconstruct(chain, 0, codec) == contents[2]
        assert reconstruct(chain, 1, codec) == contents[3]

    def test_nothing_expired(self, codec: DiffMatchPatchCodec) -> None:
        chain, _ = chain_with_stamps(codec, [100, 200])
        assert trim_older_than(chain, 50, codec) == 0
        assert len(chain) == 2

    def test_everything_expired_leaves_base_only(self, codec: DiffMatchPatchCodec) -> None:
        chain, contents = chain_with_stamps(codec, [100, 200])
        assert trim_older_than(chain, 200, codec) == 2
        assert chain.revisions == []
        assert chain.base == contents[1]

    def test_old_revision_after_newer_one_is_kept(self, codec: DiffMatchPatchCodec) -> None:
        chain = RevisionChain(
            base="a",
            revisions=[Revision("", 100), Revision("", 900), Revision("", 150)],
        )
        assert trim_older_than(chain, 500, codec) == 1
        assert [r.timestamp for r in chain.revisions] == [900, 150]

    def test_corrupt_prefix_raises_and_leaves_chain(self, codec: DiffMatchPatchCodec) -> None:
        chain = RevisionChain(
            base="a",
            revisions=[Revision("garbage", 100), Revision("", 900)],
        )
        with pytest.raises(CorruptChainError):
            trim_older_than(chain, 500, codec)
        assert len(chain) == 2
        assert chain.base == "a"
