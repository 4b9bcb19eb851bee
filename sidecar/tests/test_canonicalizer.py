"""Tests for signal ID canonicalization and the join diagnostic."""

import copy

import pytest

from api.models import Signal
from rules.canonicalizer import SignalCanonicalizer, canonicalize_signal_id, diff_join


@pytest.fixture
def canonicalizer():
    return SignalCanonicalizer({
        "timeliness_sch": {"SCH_TimelinessBreach": "on_time_19h", "nv_flag": "neurovascular_exam"},
    })


class TestCanonicalize:
    def test_alias_mapped(self, canonicalizer):
        assert canonicalizer.canonicalize("timeliness_sch", "SCH_TimelinessBreach") == "on_time_19h"

    def test_identity_without_alias(self, canonicalizer):
        assert canonicalizer.canonicalize("timeliness_sch", "ortho_consult") == "ortho_consult"
        assert canonicalizer.canonicalize("other_module", "SCH_TimelinessBreach") == "SCH_TimelinessBreach"
        assert canonicalizer.canonicalize(None, "SCH_TimelinessBreach") == "SCH_TimelinessBreach"

    def test_builtin_table(self):
        assert canonicalize_signal_id("timeliness_sch", "SCH_TimelinessBreach") == "on_time_19h"


class TestCanonicalizeAll:
    def test_maps_only_id_and_keeps_order(self, canonicalizer):
        signals = [
            {"id": "nv_flag", "status": "fail", "evidence": "cold hand"},
            {"id": "ortho_consult", "status": "pass"},
            {"id": "SCH_TimelinessBreach", "status": "caution"},
        ]
        original = copy.deepcopy(signals)
        mapped = canonicalizer.canonicalize_all("timeliness_sch", signals)
        assert [s["id"] for s in mapped] == ["neurovascular_exam", "ortho_consult", "on_time_19h"]
        assert mapped[0]["evidence"] == "cold hand"
        assert mapped[2]["status"] == "caution"
        assert signals == original

    def test_models_are_copied(self, canonicalizer):
        signal = Signal(id="nv_flag", label="NV", group="Core")
        [mapped] = canonicalizer.canonicalize_all("timeliness_sch", [signal])
        assert mapped.id == "neurovascular_exam"
        assert mapped.label == "NV"
        assert signal.id == "nv_flag"


class TestDiffJoin:
    def test_partitions(self, canonicalizer):
        produced = [{"id": "a"}, {"id": "b"}, {"id": "x"}]
        expected = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        report = canonicalizer.diff_join(produced, expected)
        assert report.matched == ["a", "b"]
        assert report.missing == ["c"]
        assert report.extra == ["x"]

    def test_set_identities(self, canonicalizer):
        produced = ["SCH_TimelinessBreach", "p1", "p2", "shared"]
        expected = ["on_time_19h", "e1", "shared", "p2"]
        report = canonicalizer.diff_join(produced, expected, module_id="timeliness_sch")
        produced_ids = {"on_time_19h", "p1", "p2", "shared"}
        expected_ids = {"on_time_19h", "e1", "shared", "p2"}
        assert set(report.matched) | set(report.missing) == expected_ids
        assert set(report.matched) | set(report.extra) == produced_ids
        assert not set(report.matched) & set(report.missing)
        assert not set(report.matched) & set(report.extra)

    def test_aliases_applied_before_join(self, canonicalizer):
        report = canonicalizer.diff_join(
            [{"id": "SCH_TimelinessBreach"}],
            [Signal(id="on_time_19h")],
            module_id="timeliness_sch",
        )
        assert report.matched == ["on_time_19h"]
        assert report.missing == []
        assert report.extra == []

    def test_duplicates_collapse(self, canonicalizer):
        report = canonicalizer.diff_join([{"id": "a"}, {"id": "a"}], [{"id": "a"}, {"id": "b"}, {"id": "b"}])
        assert report.matched == ["a"]
        assert report.missing == ["b"]

    def test_empty_inputs(self):
        report = diff_join([], [])
        assert report.matched == report.missing == report.extra == []

    def test_entries_without_id_skipped(self, canonicalizer):
        report = canonicalizer.diff_join([{"status": "pass"}, {"id": "a"}], [{"id": "a"}])
        assert report.matched == ["a"]
        assert report.extra == []
