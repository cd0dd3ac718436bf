"""
Tests for the Pending Queue & Origin Map.

Tests cover:
    - Canonical child ordering (lexical keys, declared targets)
    - External scheduling rules
    - Front insertion vs. tail union
    - Cascade invalidation of abandoned branches
"""

from surveynav.answers import AnswerStore
from surveynav.model import END, START, Graph, Node
from surveynav.pending import (
    PendingEntry,
    PendingQueue,
    apply_answer,
    compute_children,
    invalidate_subtree_from_roots,
)


def answer(graph, queue, visited, answers, node_id, selections, replace_queued=True):
    node = graph.get_node(node_id)
    previous = answers.update_choice_answer(node, selections)
    return apply_answer(
        graph, queue, visited, answers, node, previous,
        answers.choice_answers.get(node_id), replace_queued=replace_queued,
    )


class TestComputeChildren:
    """Test canonical child-set computation."""

    def test_keys_sorted_lexically(self, graph):
        q2 = graph.get_node("Q2")
        assert compute_children(graph, q2, ["C", "A"]) == ["Q2_A1", "Q2_A2", "Q2_C1"]
        assert compute_children(graph, q2, ["A", "C"]) == ["Q2_A1", "Q2_A2", "Q2_C1"]

    def test_option_order_is_ignored(self, graph):
        q2 = graph.get_node("Q2")
        assert q2.option_order[0] == "B"
        assert compute_children(graph, q2, ["B", "A"]) == ["Q2_A1", "Q2_A2", "Q2_B1"]

    def test_duplicate_keys_collapse(self, graph):
        assert compute_children(graph, graph.get_node("Q2"), ["A", "A"]) == ["Q2_A1", "Q2_A2"]

    def test_end_dropped(self, graph):
        assert compute_children(graph, graph.get_node("Q1"), ["No"]) == []

    def test_unknown_keys_and_targets_dropped(self):
        graph = Graph.from_nodes(START, [
            Node(id=START, options={"x": ["Ghost", "Q3", END]}),
            Node(id="Q3"),
        ])
        node = graph.get_node(START)
        assert compute_children(graph, node, ["x", "nope"]) == ["Q3"]
        assert compute_children(graph, node, None) == []

    def test_case_sensitive_keys(self, graph):
        assert compute_children(graph, graph.get_node("Q2"), ["a"]) == []


class TestEnqueue:
    """Test external scheduling."""

    def test_enqueue_once(self, graph):
        queue = PendingQueue()
        assert queue.enqueue(graph, "Q3") is True
        assert queue.enqueue(graph, "Q3") is False
        assert queue.entries == [PendingEntry("Q3", None)]

    def test_enqueue_end_or_unknown_rejected(self, graph):
        queue = PendingQueue()
        assert queue.enqueue(graph, END) is False
        assert queue.enqueue(graph, "NOPE") is False
        assert queue.entries == []

    def test_enqueue_rejects_id_queued_by_origin(self, graph):
        queue = PendingQueue()
        answer(graph, queue, set(), AnswerStore(), "Q2", ["B"])
        assert queue.enqueue(graph, "Q2_B1") is False


class TestApplyAnswer:
    """Test insertion policies."""

    def test_replace_inserts_block_at_front(self, graph):
        queue = PendingQueue()
        queue.enqueue(graph, "Q3")
        answer(graph, queue, set(), AnswerStore(), "Q2", ["A"])
        assert queue.ids() == ["Q2_A1", "Q2_A2", "Q3"]
        assert queue.origin_map == {"Q2": ["Q2_A1", "Q2_A2"]}

    def test_replace_discards_previous_children(self, graph):
        queue, visited, answers = PendingQueue(), set(), AnswerStore()
        answer(graph, queue, visited, answers, "Q2", ["B"])
        answer(graph, queue, visited, answers, "Q2", ["A"])
        assert queue.ids() == ["Q2_A1", "Q2_A2"]
        assert queue.origin_map == {"Q2": ["Q2_A1", "Q2_A2"]}

    def test_replace_with_no_children_removes_origin_key(self, graph):
        queue, visited, answers = PendingQueue(), set(), AnswerStore()
        answer(graph, queue, visited, answers, "Q1", ["Yes"])
        answer(graph, queue, visited, answers, "Q1", None)
        assert queue.ids() == []
        assert "Q1" not in queue.origin_map

    def test_union_appends_at_tail(self, graph):
        queue, visited, answers = PendingQueue(), set(), AnswerStore()
        answer(graph, queue, visited, answers, "Q2", ["B"])
        queue.enqueue(graph, "Q3")
        added = answer(graph, queue, visited, answers, "Q2", ["A", "B"], replace_queued=False)
        assert added == ["Q2_A1", "Q2_A2"]
        assert queue.ids() == ["Q2_B1", "Q3", "Q2_A1", "Q2_A2"]
        assert queue.origin_map["Q2"] == ["Q2_B1", "Q2_A1", "Q2_A2"]

    def test_abandoned_children_lose_answers(self, graph):
        queue, visited, answers = PendingQueue(), set(), AnswerStore()
        answer(graph, queue, visited, answers, "Q2", ["A", "B"])
        answers.update_text_answer("Q2_A2", "temp")
        answer(graph, queue, visited, answers, "Q2", ["B"])
        assert answers.get_text_answer("Q2_A2") is None
        assert queue.ids() == ["Q2_B1"]


class TestPopFront:
    """Test consumption."""

    def test_pop_prunes_origin_map(self, graph):
        queue = PendingQueue()
        answer(graph, queue, set(), AnswerStore(), "Q1", ["Yes"])
        assert queue.pop_front() == PendingEntry("Q2", "Q1")
        assert queue.origin_map == {}

    def test_pop_empty(self):
        assert PendingQueue().pop_front() is None


class TestCascade:
    """Test invalidate_subtree_from_roots."""

    def test_descendants_cleared_depth_first(self, graph):
        queue = PendingQueue(entries=[PendingEntry("L", "M")], origin_map={"M": ["L"]})
        visited = {"M"}
        answers = AnswerStore(
            choice_answers={"M": ["x"]},
            text_answers={"M": "m", "L": "l"},
        )
        invalidate_subtree_from_roots(graph, queue, visited, answers, ["M"])
        assert queue.entries == []
        assert queue.origin_map == {}
        assert visited == set()
        assert answers.all_answers() == {}

    def test_other_origins_untouched(self, graph):
        queue = PendingQueue(
            entries=[PendingEntry("L", "M"), PendingEntry("Q3", None)],
            origin_map={"M": ["L"]},
        )
        invalidate_subtree_from_roots(graph, queue, set(), AnswerStore(), ["M"])
        assert queue.ids() == ["Q3"]
