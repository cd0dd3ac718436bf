"""
Serialization helpers for graphs and navigation state.

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit.

Restoring state against a graph drops queue entries that cannot be
navigated to (END, unknown ids) and collapses duplicate ids to their first
occurrence, warning about each.
"""
from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from surveynav.answers import AnswerStore
from surveynav.errors import SnapshotError
from surveynav.history import HistoryEntry, HistoryStack
from surveynav.model import END, Graph, Node
from surveynav.pending import PendingEntry, PendingQueue
from surveynav.state import NavigationState


# ---------------------------------------------------------------------------
# Graph definitions
# ---------------------------------------------------------------------------


def node_to_dict(n: Node) -> Dict[str, Any]:
    return {
        "id": n.id,
        "text": n.text,
        "options": {key: list(targets) for key, targets in n.options.items()},
        "option_order": list(n.option_order) if n.option_order is not None else None,
        "min_select": n.min_select,
        "max_select": n.max_select,
        "allow_multi": n.allow_multi,
        "default_next": n.default_next,
    }


def node_from_dict(d: Dict[str, Any]) -> Node:
    return Node(
        id=d["id"],
        text=d.get("text", ""),
        options={key: list(targets or []) for key, targets in (d.get("options") or {}).items()},
        option_order=d.get("option_order"),
        min_select=d.get("min_select", 0),
        max_select=d.get("max_select"),
        allow_multi=d.get("allow_multi", False),
        default_next=d.get("default_next") or END,
    )


def graph_to_dict(g: Graph) -> Dict[str, Any]:
    return {
        "start_id": g.start_id,
        "max_history": g.max_history,
        "nodes": [node_to_dict(n) for n in g.nodes.values()],
    }


def graph_from_dict(d: Dict[str, Any]) -> Graph:
    nodes = [node_from_dict(n) for n in d.get("nodes", [])]
    g = Graph.from_nodes(d["start_id"], nodes, max_history=d.get("max_history"))
    for n in nodes:
        for key, targets in n.options.items():
            for target in targets:
                if target != END and not g.has_node(target):
                    warnings.warn(f"Option {key!r} of {n.id} targets undefined node {target!r}", UserWarning)
    return g


def graph_to_json(g: Graph) -> str:
    return json.dumps(graph_to_dict(g), sort_keys=True)


def graph_from_json(s: str) -> Graph:
    return graph_from_dict(json.loads(s))


def graph_to_yaml(g: Graph) -> str:
    return yaml.safe_dump(graph_to_dict(g), sort_keys=False)


def graph_from_yaml(s: str) -> Graph:
    return graph_from_dict(yaml.safe_load(s))


def load_graph(filepath: Union[str, Path]) -> Graph:
    """
    Load a graph definition file.

    .json files are parsed as JSON, anything else as YAML.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Graph file not found: {filepath}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return graph_from_json(text)
    return graph_from_yaml(text)


# ---------------------------------------------------------------------------
# Navigation state
# ---------------------------------------------------------------------------


def entry_to_dict(e: PendingEntry) -> Dict[str, Any]:
    return {"node_id": e.node_id, "origin": e.origin}


def entry_from_dict(d: Dict[str, Any]) -> PendingEntry:
    return PendingEntry(node_id=d["node_id"], origin=d.get("origin"))


def _queue_from_list(items: List[Dict[str, Any]], graph: Optional[Graph]) -> List[PendingEntry]:
    entries: List[PendingEntry] = []
    seen = set()
    for item in items:
        e = entry_from_dict(item)
        if graph is not None and (e.node_id == END or not graph.has_node(e.node_id)):
            warnings.warn(f"Dropping pending entry {e.node_id!r}: not a navigable node", UserWarning)
            continue
        if e.node_id in seen:
            warnings.warn(f"Dropping duplicate pending entry {e.node_id!r}", UserWarning)
            continue
        seen.add(e.node_id)
        entries.append(e)
    return entries


def history_entry_to_dict(h: HistoryEntry) -> Dict[str, Any]:
    return {
        "current_node_id": h.current_node_id,
        "pending_queue": [entry_to_dict(e) for e in h.pending_queue],
        "origin_map": h.origin_map_dict(),
        "visited": sorted(h.visited),
    }


def _checked_node_id(node_id: Any, graph: Optional[Graph], field_name: str) -> str:
    if not isinstance(node_id, str):
        raise SnapshotError(f"{field_name} must be a string, got {node_id!r}")
    if graph is not None and not graph.has_node(node_id):
        raise SnapshotError(f"{field_name} {node_id!r} is not a node of the graph")
    return node_id


def _choice_answers_from_dict(d: Dict[str, Any]) -> Dict[str, List[str]]:
    choices: Dict[str, List[str]] = {}
    for node_id, values in d.items():
        if not isinstance(values, list):
            raise SnapshotError(f"Choice answer for {node_id!r} must be a list, got {values!r}")
        choices[node_id] = list(values)
    return choices


def history_entry_from_dict(d: Dict[str, Any], graph: Optional[Graph] = None) -> HistoryEntry:
    return HistoryEntry.capture(
        _checked_node_id(d["current_node_id"], graph, "history current_node_id"),
        _queue_from_list(d.get("pending_queue", []), graph),
        {origin: list(children) for origin, children in (d.get("origin_map") or {}).items()},
        set(d.get("visited", [])),
    )


def state_to_dict(s: NavigationState) -> Dict[str, Any]:
    return {
        "current_node_id": s.current_node_id,
        "pending_queue": [entry_to_dict(e) for e in s.queue.entries],
        "origin_map": {origin: list(children) for origin, children in s.queue.origin_map.items()},
        "visited": sorted(s.visited),
        "choice_answers": {node_id: list(values) for node_id, values in s.answers.choice_answers.items()},
        "text_answers": dict(s.answers.text_answers),
        "history": [history_entry_to_dict(h) for h in s.history.entries],
    }


def state_from_dict(d: Dict[str, Any], graph: Optional[Graph] = None) -> NavigationState:
    """
    Rebuild a NavigationState.

    With a graph, queue entries are checked against it, current node ids
    (including those in history) must exist in it, and the history
    capacity follows graph.max_history.

    Raises:
        SnapshotError: if required fields are missing or mistyped, or a
            current node id is unknown to the graph
    """
    try:
        queue = PendingQueue(
            entries=_queue_from_list(d.get("pending_queue", []), graph),
            origin_map={origin: list(children) for origin, children in (d.get("origin_map") or {}).items()},
        )
        answers = AnswerStore(
            choice_answers=_choice_answers_from_dict(d.get("choice_answers") or {}),
            text_answers=dict(d.get("text_answers") or {}),
        )
        history = HistoryStack(
            entries=tuple(history_entry_from_dict(h, graph) for h in d.get("history", [])),
            max_size=graph.max_history if graph is not None else None,
        )
        return NavigationState(
            current_node_id=_checked_node_id(d["current_node_id"], graph, "current_node_id"),
            queue=queue,
            visited=set(d.get("visited", [])),
            answers=answers,
            history=history,
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise SnapshotError(f"Malformed navigation snapshot: {e}") from e


def state_to_json(s: NavigationState) -> str:
    return json.dumps(state_to_dict(s), sort_keys=True)


def state_from_json(s: str, graph: Optional[Graph] = None) -> NavigationState:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON snapshot: {e}") from e
    if not isinstance(d, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    return state_from_dict(d, graph)


def state_to_yaml(s: NavigationState) -> str:
    return yaml.safe_dump(state_to_dict(s))


def state_from_yaml(s: str, graph: Optional[Graph] = None) -> NavigationState:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise SnapshotError(f"Invalid YAML snapshot: {e}") from e
    if not isinstance(d, dict):
        raise SnapshotError("Snapshot must be a YAML mapping")
    return state_from_dict(d, graph)
