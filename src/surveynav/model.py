"""
Core Graph Model Objects

Defines the immutable question catalogue the navigator walks over:
    - Nodes (questions / screens)
    - Graph (entry point, catalogue, undo depth)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about rendering or input widgets
        - Are immutable once constructed
        - Are fully serializable
        - Represent structure, not navigation state
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from surveynav.errors import GraphDefinitionError, NodeNotFoundError


START = "Start"
END = "End"


@dataclass(frozen=True)
class Node:
    """
    A single question definition with branching options.

    Properties:
        id:
            Unique identifier, stable across sessions
            Examples: "Q1", "Q2_A1"

        text:
            Prompt shown to the respondent

        options:
            Option key -> ordered target node ids
            A key may map to an empty sequence (selectable, schedules nothing)
            Example: {"A": ("Q2_A1", "Q2_A2"), "B": ("Q2_B1",)}

        option_order:
            Display order hint for option keys.
            Only a presentation layer reads this. The navigator always
            orders children by ascending option key.

        min_select / max_select:
            Selection bounds, enforced for multi-select nodes only.
            max_select of None means unbounded.

        allow_multi:
            True if several option keys may be selected at once

        default_next:
            Successor used when nothing is pending (defaults to END)
    """

    id: str
    text: str = ""
    options: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    option_order: Optional[Tuple[str, ...]] = None
    min_select: int = 0
    max_select: Optional[int] = None
    allow_multi: bool = False
    default_next: str = END

    def __post_init__(self):
        frozen_options = {key: tuple(targets) for key, targets in dict(self.options).items()}
        object.__setattr__(self, "options", MappingProxyType(frozen_options))
        if self.option_order is not None:
            object.__setattr__(self, "option_order", tuple(self.option_order))
        if self.default_next is None:
            object.__setattr__(self, "default_next", END)

    def __hash__(self) -> int:
        return hash(self.id)

    def targets_for(self, key: str) -> Tuple[str, ...]:
        """Declared targets of an option key (empty for unknown keys)."""
        return self.options.get(key, ())


@dataclass(frozen=True)
class Graph:
    """
    Root container for a branching survey definition.

    Properties:
        start_id:
            Entry node id

        nodes:
            Catalogue, id -> Node. END is always resolvable; a bare END node
            is added when the catalogue does not declare one.

        max_history:
            Maximum number of retained undo snapshots (None = unbounded)

    INVARIANTS:
        - start_id exists in nodes
        - Node ids are unique
        - min_select <= max_select for every bounded node
    """

    start_id: str
    nodes: Mapping[str, Node]
    max_history: Optional[int] = None

    def __post_init__(self):
        catalogue = dict(self.nodes)
        for node_id, node in catalogue.items():
            if node.id != node_id:
                raise GraphDefinitionError(f"Catalogue key {node_id!r} does not match node id {node.id!r}")
            if node.max_select is not None and node.min_select > node.max_select:
                raise GraphDefinitionError(
                    f"Node {node_id!r}: min_select {node.min_select} exceeds max_select {node.max_select}"
                )
        if END not in catalogue:
            catalogue[END] = Node(id=END, default_next=END)
        if self.start_id not in catalogue:
            raise GraphDefinitionError(f"Start node {self.start_id!r} is not defined")
        if self.max_history is not None and self.max_history < 0:
            raise GraphDefinitionError(f"max_history must be >= 0, got {self.max_history}")
        object.__setattr__(self, "nodes", MappingProxyType(catalogue))

    @classmethod
    def from_nodes(cls, start_id: str, nodes: Iterable[Node], max_history: Optional[int] = None) -> Graph:
        """
        Build a graph from a node sequence.

        Raises:
            GraphDefinitionError: on duplicate node ids
        """
        catalogue: Dict[str, Node] = {}
        for node in nodes:
            if node.id in catalogue:
                raise GraphDefinitionError(f"Duplicate node id: {node.id!r}")
            catalogue[node.id] = node
        return cls(start_id=start_id, nodes=catalogue, max_history=max_history)

    def get_node(self, node_id: str) -> Node:
        """
        Retrieve a node by ID.

        Raises:
            NodeNotFoundError: if the id is not in the catalogue
        """
        try:
            return self.nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def has_node(self, node_id: Optional[str]) -> bool:
        return bool(node_id) and node_id in self.nodes

    def node_ids(self) -> List[str]:
        return list(self.nodes.keys())
