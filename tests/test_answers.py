"""
Tests for the Answer Store.

Answers are stored verbatim; only multi-select sizes are validated, and a
rejected write leaves the store untouched.
"""

import pytest

from surveynav.answers import AnswerStore
from surveynav.errors import ValidationError


class TestChoiceAnswers:
    """Test choice answer writes."""

    def test_multi_stored_in_caller_order(self, graph):
        store = AnswerStore()
        store.update_choice_answer(graph.get_node("Q2"), ["C", "A"])
        assert store.get_choice_answer("Q2") == ["C", "A"]

    def test_multi_above_max_rejected_without_mutation(self, graph):
        store = AnswerStore()
        q2 = graph.get_node("Q2")
        store.update_choice_answer(q2, ["A"])
        with pytest.raises(ValidationError):
            store.update_choice_answer(q2, ["A", "B", "C"])
        assert store.get_choice_answer("Q2") == ["A"]

    def test_multi_below_min_rejected(self, graph):
        store = AnswerStore()
        with pytest.raises(ValidationError):
            store.update_choice_answer(graph.get_node("Q2"), [])
        assert not store.has_answer_for("Q2")

    def test_multi_unknown_key_accepted(self, graph):
        store = AnswerStore()
        store.update_choice_answer(graph.get_node("Q2"), ["Z"])
        assert store.get_choice_answer("Q2") == ["Z"]

    def test_single_overwrites(self, graph):
        store = AnswerStore()
        q1 = graph.get_node("Q1")
        store.update_choice_answer(q1, ["Yes"])
        previous = store.update_choice_answer(q1, ["Maybe"])
        assert previous == ["Yes"]
        assert store.get_choice_answer("Q1") == ["Maybe"]

    @pytest.mark.parametrize("selection", [None, [], ["  "]])
    def test_single_blank_clears(self, graph, selection):
        store = AnswerStore()
        q1 = graph.get_node("Q1")
        store.update_choice_answer(q1, ["Yes"])
        store.update_choice_answer(q1, selection)
        assert store.get_choice_answer("Q1") is None
        assert not store.has_answer_for("Q1")

    def test_returned_answer_is_a_copy(self, graph):
        store = AnswerStore()
        store.update_choice_answer(graph.get_node("Q2"), ["A"])
        store.get_choice_answer("Q2").append("B")
        assert store.get_choice_answer("Q2") == ["A"]


class TestTextAnswers:
    """Test free-text answers and merged reads."""

    def test_text_overwrite(self):
        store = AnswerStore()
        store.update_text_answer("Q3", "first")
        store.update_text_answer("Q3", "second")
        assert store.get_text_answer("Q3") == "second"

    def test_text_none_removes(self):
        store = AnswerStore()
        store.update_text_answer("Q3", "x")
        store.update_text_answer("Q3", None)
        assert store.get_text_answer("Q3") is None

    def test_all_answers_merges_both_maps(self, graph):
        store = AnswerStore()
        store.update_text_answer("Q3", "t")
        store.update_choice_answer(graph.get_node("Q1"), ["Yes"])
        assert store.all_answers() == {"Q3": "t", "Q1": ["Yes"]}

    def test_clear_empties_both(self, graph):
        store = AnswerStore()
        store.update_text_answer("Q3", "t")
        store.update_choice_answer(graph.get_node("Q1"), ["Yes"])
        store.clear()
        assert store.all_answers() == {}

    def test_copy_is_independent(self, graph):
        store = AnswerStore()
        store.update_choice_answer(graph.get_node("Q2"), ["A"])
        clone = store.copy()
        clone.choice_answers["Q2"].append("B")
        clone.update_text_answer("Q3", "x")
        assert store.get_choice_answer("Q2") == ["A"]
        assert store.get_text_answer("Q3") is None
