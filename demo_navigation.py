#!/usr/bin/env python3
"""
Demo: walk the example branching survey and print the navigation trace.

Shows:
1. Graph analysis
2. Answer-driven scheduling and forward navigation
3. Back navigation
4. JSON snapshot / restore
"""

import logging

from surveynav.analyzer import analyze_graph
from surveynav.engine import SurveyNavigator
from surveynav.examples import build_example_branching_survey


def print_position(nav):
    pending = [e.node_id for e in nav.pending_queue_snapshot()]
    print(f"   at {nav.current_node_id:<6} next={nav.peek_next():<6} pending={pending}")


def main():
    logging.basicConfig(level=logging.DEBUG)
    graph = build_example_branching_survey(max_history=10)

    print("=" * 70)
    print("BRANCHING SURVEY NAVIGATION DEMO")
    print("=" * 70)

    print("\n1. ANALYZING GRAPH...")
    report = analyze_graph(graph)
    print(f"   ✓ Nodes: {report.total_nodes}")
    print(f"   ✓ Edges: {report.total_edges}")
    print(f"   ✓ Multi-select: {report.multi_select_nodes}")
    for warning in report.warnings:
        print(f"      - {warning}")

    print("\n2. NAVIGATING...")
    nav = SurveyNavigator(graph)
    print_position(nav)
    nav.advance_to_next()
    nav.update_single_answer("Q1", "Yes")
    print_position(nav)
    nav.advance_to_next()
    nav.update_multi_answer("Q2", ["C", "A"])
    print_position(nav)
    nav.advance_to_next()
    print_position(nav)

    print("\n3. GOING BACK...")
    nav.on_back()
    print_position(nav)
    print(f"   ✓ History: {nav.get_history_node_ids()}")

    print("\n4. SNAPSHOT / RESTORE...")
    payload = nav.snapshot_json()
    restored = SurveyNavigator(graph)
    restored.restore_from_json(payload)
    print_position(restored)
    print(f"   ✓ Answers: {restored.all_answers()}")

    print("\n" + "=" * 70)


if __name__ == "__main__":
    main()
