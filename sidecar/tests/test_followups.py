"""Tests for conditional follow-up visibility and form completion."""

import pytest

from api.models import Followup
from rules.followups import FollowupDependencyResolver, dependency_met, is_answered


@pytest.fixture
def resolver():
    return FollowupDependencyResolver()


@pytest.fixture
def followups():
    return [
        Followup(followup_name="A", followup_type="yesno"),
        Followup(followup_name="B", followup_type="text", depends_on="A"),
        Followup(followup_name="C", followup_type="number"),
    ]


def _names(items):
    return [f.followup_name for f in items]


class TestVisibility:
    def test_negative_answer_hides_dependent(self, resolver, followups):
        assert _names(resolver.visible_followups(followups, {"A": "no"})) == ["A", "C"]

    def test_positive_answer_shows_dependent(self, resolver, followups):
        assert _names(resolver.visible_followups(followups, {"A": "yes"})) == ["A", "B", "C"]

    def test_missing_answer_hides_dependent(self, resolver, followups):
        assert _names(resolver.hidden_followups(followups, {})) == ["B"]

    @pytest.mark.parametrize("value", ["", 0, False, None, "No", " false "])
    def test_falsy_dependency_values(self, value):
        assert dependency_met(value) is False

    @pytest.mark.parametrize("value", ["yes", "maybe", 1, -2, True, {}, []])
    def test_truthy_dependency_values(self, value):
        assert dependency_met(value) is True

    def test_adding_answer_only_adds_dependents(self, resolver, followups):
        before = set(_names(resolver.visible_followups(followups, {"C": 4})))
        after = set(_names(resolver.visible_followups(followups, {"C": 4, "A": "yes"})))
        assert before <= after
        assert after - before == {"B"}

    def test_cycle_is_inert(self, resolver):
        cyclic = [
            Followup(followup_name="X", depends_on="Y"),
            Followup(followup_name="Y", depends_on="X"),
        ]
        state = resolver.resolve(cyclic, {})
        assert state.visible == []
        assert _names(state.hidden) == ["X", "Y"]
        assert state.complete is True


class TestCompletion:
    def test_zero_and_false_are_answers(self):
        assert is_answered(0)
        assert is_answered(False)
        assert not is_answered(None)
        assert not is_answered("")

    def test_incomplete_when_visible_unanswered(self, resolver, followups):
        state = resolver.resolve(followups, {"A": "yes", "C": 0})
        assert state.complete is False
        assert state.total_count == 3

    def test_complete_with_falsy_answers(self, resolver, followups):
        state = resolver.resolve(followups, {"A": "yes", "B": False, "C": 0})
        assert state.complete is True

    def test_hidden_followups_do_not_block_completion(self, resolver, followups):
        state = resolver.resolve(followups, {"A": "no", "C": 12})
        assert state.complete is True
        assert _names(state.hidden) == ["B"]

    def test_visibility_recomputed_on_each_change(self, resolver, followups):
        values = {"A": "yes", "C": 1}
        assert resolver.resolve(followups, values).complete is False
        values["A"] = "no"
        assert resolver.resolve(followups, values).complete is True
