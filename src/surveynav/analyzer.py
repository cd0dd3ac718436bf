"""
Graph Analyzer — early diagnostics for branching survey graphs.

This module provides lightweight analysis of Graph objects:
    - Node inventory (multi-select, terminal-adjacent)
    - Reachability from the start node
    - Dangling option / default targets
    - Cycles and dead ends that never reach END
    - Warning flags for authoring mistakes

IMPORTANT: It does NOT modify the graph. Dangling targets are legal (the
navigator silently skips them) but almost always an authoring error, so
run this when a graph is loaded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from surveynav.model import END, Graph


def _successors(graph: Graph, node_id: str) -> List[str]:
    """Every id a node can lead to: option targets, then default_next."""
    node = graph.get_node(node_id)
    targets: List[str] = []
    for key in sorted(node.options):
        targets.extend(node.options[key])
    if node.default_next:
        targets.append(node.default_next)
    return targets


def _find_cycle_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                    rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycle_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class GraphReport:
    """Analysis report for a graph."""

    start_id: str
    total_nodes: int = 0
    total_edges: int = 0
    multi_select_nodes: List[str] = field(default_factory=list)

    reachable: Set[str] = field(default_factory=set)
    unreachable: Set[str] = field(default_factory=set)
    # node id -> undefined ids it points at
    dangling_targets: Dict[str, List[str]] = field(default_factory=dict)
    # reachable nodes from which END cannot be reached
    dead_ends: Set[str] = field(default_factory=set)
    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def is_clean(self) -> bool:
        return not self.warnings


def analyze_graph(graph: Graph) -> GraphReport:
    """
    Inspect a graph without walking it.

    Returns a GraphReport with metrics and warnings.
    """
    report = GraphReport(start_id=graph.start_id)
    report.total_nodes = len(graph.nodes)

    outgoing: Dict[str, List[str]] = {}
    for node_id, node in graph.nodes.items():
        if node.allow_multi:
            report.multi_select_nodes.append(node_id)
        if node_id == END:
            continue
        known: List[str] = []
        for target in _successors(graph, node_id):
            if graph.has_node(target):
                known.append(target)
            else:
                report.dangling_targets.setdefault(node_id, []).append(target)
        outgoing[node_id] = known
        report.total_edges += len(known)

    # Reachability from start
    stack = [graph.start_id]
    while stack:
        current = stack.pop()
        if current in report.reachable:
            continue
        report.reachable.add(current)
        stack.extend(n for n in outgoing.get(current, []) if n not in report.reachable)
    report.unreachable = set(graph.nodes) - report.reachable

    # Nodes that can reach END (reverse walk)
    incoming: Dict[str, List[str]] = {}
    for source, targets in outgoing.items():
        for target in targets:
            incoming.setdefault(target, []).append(source)
    finishing: Set[str] = set()
    stack = [END]
    while stack:
        current = stack.pop()
        if current in finishing:
            continue
        finishing.add(current)
        stack.extend(incoming.get(current, []))
    report.dead_ends = report.reachable - finishing

    visited: Set[str] = set()
    for node_id in outgoing:
        if node_id not in visited:
            cycle = _find_cycle_dfs(outgoing, node_id, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = cycle
                break

    if report.unreachable:
        report.add_warning(f"Unreachable nodes: {', '.join(sorted(report.unreachable))}")
    for node_id in sorted(report.dangling_targets):
        report.add_warning(
            f"Node {node_id} points at undefined nodes: {', '.join(report.dangling_targets[node_id])}"
        )
    if report.dead_ends:
        report.add_warning(f"Nodes that can never finish: {', '.join(sorted(report.dead_ends))}")
    if report.has_cycles:
        report.add_warning(f"Cycle detected: {' -> '.join(report.cycle_example)}")

    return report
