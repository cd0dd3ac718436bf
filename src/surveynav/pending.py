"""
Pending Queue & Origin Map — scheduling of answer-driven follow-up nodes.

An answer on a node schedules that node's *runtime children*: the targets of
the selected option keys. They wait in the pending queue ahead of the graph's
static default path. The origin map remembers which origin scheduled which
ids so that a changed answer can tear down exactly the branch it abandoned.

Ordering rules:
    - Children are built from the selected keys in ascending lexical order,
      each key contributing its targets in declared order.
      Node.option_order is never consulted.
    - replace_queued=True puts the origin's children at the absolute front
      of the queue as one contiguous block.
    - replace_queued=False appends the missing children at the tail.
    - A node id appears at most once in the queue, whatever its origin.
    - END and ids unknown to the graph are never queued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from surveynav.answers import AnswerStore
from surveynav.model import END, Graph, Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingEntry:
    """
    A scheduled node.

    origin is the node whose answer scheduled it, or None when an external
    caller enqueued it directly.
    """

    node_id: str
    origin: Optional[str] = None


def compute_children(graph: Graph, node: Node, selections: Optional[Sequence[str]]) -> List[str]:
    """Canonical runtime children of a node for the given selection."""
    children: List[str] = []
    seen: Set[str] = set()
    for key in sorted(set(selections or ())):
        for target in node.targets_for(key):
            if target == END or not graph.has_node(target) or target in seen:
                continue
            seen.add(target)
            children.append(target)
    return children


@dataclass
class PendingQueue:
    """Ordered, id-unique queue of PendingEntry plus its origin map."""

    entries: List[PendingEntry] = field(default_factory=list)
    origin_map: Dict[str, List[str]] = field(default_factory=dict)

    def ids(self) -> List[str]:
        return [entry.node_id for entry in self.entries]

    def contains(self, node_id: str) -> bool:
        return any(entry.node_id == node_id for entry in self.entries)

    def peek(self) -> Optional[PendingEntry]:
        return self.entries[0] if self.entries else None

    def enqueue(self, graph: Graph, node_id: str) -> bool:
        """Append an externally scheduled node; False for END, unknown or duplicate ids."""
        if node_id == END or not graph.has_node(node_id):
            logger.debug("enqueue rejected: %r is END or unknown", node_id)
            return False
        if self.contains(node_id):
            logger.debug("enqueue rejected: %r already pending", node_id)
            return False
        self.entries.append(PendingEntry(node_id=node_id, origin=None))
        return True

    def pop_front(self) -> Optional[PendingEntry]:
        """Consume the front entry, pruning it from its origin's list."""
        if not self.entries:
            return None
        entry = self.entries.pop(0)
        if entry.origin is not None:
            self._forget(entry.origin, entry.node_id)
        return entry

    def remove(self, node_id: str) -> None:
        kept = []
        for entry in self.entries:
            if entry.node_id == node_id:
                if entry.origin is not None:
                    self._forget(entry.origin, node_id)
            else:
                kept.append(entry)
        self.entries = kept

    def remove_origin(self, origin: str) -> List[str]:
        """Drop every entry scheduled by origin and its origin-map key."""
        removed = [entry.node_id for entry in self.entries if entry.origin == origin]
        self.entries = [entry for entry in self.entries if entry.origin != origin]
        self.origin_map.pop(origin, None)
        return removed

    def _forget(self, origin: str, node_id: str) -> None:
        children = self.origin_map.get(origin)
        if children is None:
            return
        if node_id in children:
            children.remove(node_id)
        if not children:
            del self.origin_map[origin]

    def copy(self) -> PendingQueue:
        return PendingQueue(
            entries=list(self.entries),
            origin_map={origin: list(children) for origin, children in self.origin_map.items()},
        )


def runtime_children(
    graph: Graph,
    queue: PendingQueue,
    visited: Set[str],
    node_id: str,
    selections: Optional[Sequence[str]],
) -> List[str]:
    """
    Ids a node has scheduled so far.

    The origin map only lists children still waiting in the queue; children
    already consumed are recovered from the node's answer and the visited set.
    """
    children = list(queue.origin_map.get(node_id, ()))
    if graph.has_node(node_id):
        for child in compute_children(graph, graph.get_node(node_id), selections):
            if child in visited and child not in children:
                children.append(child)
    return children


def invalidate_subtree_from_roots(
    graph: Graph,
    queue: PendingQueue,
    visited: Set[str],
    answers: AnswerStore,
    roots: Iterable[str],
    _seen: Optional[Set[str]] = None,
) -> None:
    """
    Discard abandoned branches, depth-first.

    For each root its own runtime children are invalidated first, then the
    root leaves the queue and the visited set and loses its answers.
    """
    seen = _seen if _seen is not None else set()
    for root in roots:
        if root in seen:
            continue
        seen.add(root)
        descendants = runtime_children(graph, queue, visited, root, answers.choice_answers.get(root))
        if descendants:
            invalidate_subtree_from_roots(graph, queue, visited, answers, descendants, seen)
        queue.remove(root)
        queue.origin_map.pop(root, None)
        visited.discard(root)
        answers.clear_node(root)
        logger.debug("invalidated %r", root)


def apply_answer(
    graph: Graph,
    queue: PendingQueue,
    visited: Set[str],
    answers: AnswerStore,
    node: Node,
    previous_selections: Optional[Sequence[str]],
    selections: Optional[Sequence[str]],
    replace_queued: bool = True,
) -> List[str]:
    """
    Reconcile the queue with a node's new answer.

    previous_selections is the answer stored before this write; answers must
    already hold the new one. Returns the ids newly scheduled by this call.
    """
    new_children = compute_children(graph, node, selections)

    if not replace_queued:
        queued = set(queue.ids())
        appended = [child for child in new_children if child not in queued]
        queue.entries.extend(PendingEntry(node_id=child, origin=node.id) for child in appended)
        existing = queue.origin_map.get(node.id, [])
        if existing or appended:
            queue.origin_map[node.id] = existing + appended
        return appended

    previous = runtime_children(graph, queue, visited, node.id, previous_selections)
    queue.remove_origin(node.id)

    abandoned = [child for child in previous if child not in new_children and child != node.id]
    if abandoned:
        logger.debug("answer on %r abandons %s", node.id, abandoned)
        invalidate_subtree_from_roots(graph, queue, visited, answers, abandoned, {node.id})

    queued = set(queue.ids())
    fresh = [
        child for child in new_children
        if child not in queued and not (child in previous and child in visited)
    ]
    queue.entries[0:0] = [PendingEntry(node_id=child, origin=node.id) for child in fresh]
    if fresh:
        queue.origin_map[node.id] = fresh
    return fresh
