"""Tests for Revision and RevisionChain serialization."""

import pytest

from revisions.chain import Revision, RevisionChain


class TestRevision:
    def test_to_dict_omits_unset_label(self) -> None:
        assert Revision(patch="p", timestamp=5).to_dict() == {"patch": "p", "timestamp": 5}

    def test_to_dict_keeps_label(self) -> None:
        data = Revision(patch="p", timestamp=5, label="draft").to_dict()
        assert data["label"] == "draft"

    def test_from_dict_accepts_legacy_diff_key(self) -> None:
        revision = Revision.from_dict({"diff": "@@ -1 +1 @@", "timestamp": 10})
        assert revision.patch == "@@ -1 +1 @@"
        assert revision.label is None

    def test_from_dict_truncates_float_timestamp(self) -> None:
        assert Revision.from_dict({"patch": "", "timestamp": 12.9}).timestamp == 12

    @pytest.mark.parametrize(
        "data",
        [
            {"patch": 3, "timestamp": 1},
            {"patch": "", "timestamp": "yesterday"},
            {"patch": "", "timestamp": True},
        ],
    )
    def test_from_dict_rejects_wrong_types(self, data: dict) -> None:
        with pytest.raises(TypeError):
            Revision.from_dict(data)

    def test_from_dict_requires_timestamp(self) -> None:
        with pytest.raises(KeyError):
            Revision.from_dict({"patch": ""})

    def test_display_name(self) -> None:
        assert Revision(patch="", timestamp=0).display_name(2) == "Revision 3"
        assert Revision(patch="", timestamp=0, label="v1").display_name(2) == "v1"

    def test_with_label_strips_and_clears(self) -> None:
        revision = Revision(patch="", timestamp=0)
        assert revision.with_label("  named  ").label == "named"
        assert revision.with_label("   ").label is None
        assert revision.with_label(None).label is None

    def test_created_at_is_utc(self) -> None:
        created = Revision(patch="", timestamp=0).created_at
        assert created.year == 1970
        assert created.utcoffset().total_seconds() == 0


class TestRevisionChain:
    def test_round_trip(self) -> None:
        chain = RevisionChain(
            base="base",
            revisions=[Revision("p1", 1), Revision("p2", 2, "named")],
        )
        assert RevisionChain.from_dict(chain.to_dict()) == chain

    def test_from_dict_accepts_legacy_base_key(self) -> None:
        chain = RevisionChain.from_dict(
            {"baseContent": "old", "revisions": [{"diff": "", "timestamp": 1}]}
        )
        assert chain.base == "old"
        assert len(chain) == 1

    def test_from_dict_missing_revisions_is_empty(self) -> None:
        assert RevisionChain.from_dict({"base": "x"}).revisions == []

    def test_from_dict_rejects_bad_shapes(self) -> None:
        with pytest.raises(TypeError):
            RevisionChain.from_dict({"base": None})
        with pytest.raises(TypeError):
            RevisionChain.from_dict({"base": "x", "revisions": {}})

    def test_copy_is_independent(self) -> None:
        chain = RevisionChain(base="x", revisions=[Revision("p", 1)])
        clone = chain.copy()
        clone.revisions.append(Revision("q", 2))
        clone.base = "changed"
        assert len(chain) == 1
        assert chain.base == "x"

    def test_last_index_and_latest_timestamp(self) -> None:
        empty = RevisionChain(base="")
        assert empty.last_index == -1
        assert empty.latest_timestamp is None

        chain = RevisionChain(base="", revisions=[Revision("a", 1), Revision("b", 7)])
        assert chain.last_index == 1
        assert chain.latest_timestamp == 7
