"""
Tests for the graph model.

These tests verify:
    - Node defaults and immutability
    - Graph construction invariants
    - Lookup and NotFound behaviour
"""

import dataclasses

import pytest

from surveynav.errors import GraphDefinitionError, NodeNotFoundError
from surveynav.model import END, START, Graph, Node


class TestNode:
    """Test Node objects."""

    def test_minimal_node(self):
        """Should default to no options, single-select, END successor."""
        node = Node(id="Q1", text="First")
        assert node.options == {}
        assert node.allow_multi is False
        assert node.max_select is None
        assert node.default_next == END

    def test_none_default_next_becomes_end(self):
        node = Node(id="Q1", default_next=None)
        assert node.default_next == END

    def test_options_preserve_target_order(self):
        node = Node(id="Q2", options={"A": ["Q2_A2", "Q2_A1"]})
        assert node.targets_for("A") == ("Q2_A2", "Q2_A1")
        assert node.targets_for("Z") == ()

    def test_node_is_frozen(self):
        node = Node(id="Q1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.text = "changed"

    def test_options_cannot_be_mutated(self):
        source = {"A": ["X"]}
        node = Node(id="Q1", options=source)
        with pytest.raises(TypeError):
            node.options["B"] = ("Y",)
        source["A"].append("Y")
        assert node.targets_for("A") == ("X",)


class TestGraph:
    """Test Graph construction and lookup."""

    def test_get_node(self):
        graph = Graph.from_nodes(START, [Node(id=START, default_next="Q1"), Node(id="Q1")])
        assert graph.get_node("Q1").id == "Q1"

    def test_get_node_unknown_raises(self):
        graph = Graph.from_nodes(START, [Node(id=START)])
        with pytest.raises(NodeNotFoundError) as exc:
            graph.get_node("NOPE")
        assert exc.value.node_id == "NOPE"
        assert isinstance(exc.value, KeyError)

    def test_end_is_always_resolvable(self):
        graph = Graph.from_nodes(START, [Node(id=START)])
        assert graph.has_node(END)
        assert graph.get_node(END).options == {}

    def test_has_node_rejects_blank(self):
        graph = Graph.from_nodes(START, [Node(id=START)])
        assert not graph.has_node("")
        assert not graph.has_node(None)

    def test_duplicate_ids_rejected(self):
        with pytest.raises(GraphDefinitionError):
            Graph.from_nodes(START, [Node(id=START), Node(id=START)])

    def test_unknown_start_rejected(self):
        with pytest.raises(GraphDefinitionError):
            Graph.from_nodes("Missing", [Node(id=START)])

    def test_negative_max_history_rejected(self):
        with pytest.raises(GraphDefinitionError):
            Graph.from_nodes(START, [Node(id=START)], max_history=-1)

    def test_inverted_select_bounds_rejected(self):
        with pytest.raises(GraphDefinitionError):
            Graph.from_nodes(START, [Node(id=START, allow_multi=True, min_select=3, max_select=1)])

    def test_catalogue_key_must_match_id(self):
        with pytest.raises(GraphDefinitionError):
            Graph(start_id=START, nodes={START: Node(id="Other")})

    def test_node_ids(self, graph):
        ids = graph.node_ids()
        assert START in ids
        assert "Q2_C1" in ids
        assert END in ids
