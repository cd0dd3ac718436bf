"""
Example survey builder used by the demo script and the tests.

    Start -> Q1 (single: Yes -> Q2, No -> END)
    Q2 (multi, 1..2: A -> [Q2_A1, Q2_A2], B -> [Q2_B1], C -> [Q2_C1])
    every follow-up -> Q3 -> END
"""
from typing import Optional

from surveynav.model import END, START, Graph, Node


def build_example_branching_survey(max_history: Optional[int] = None) -> Graph:
    nodes = [
        Node(id=START, text="Welcome", default_next="Q1"),
        Node(
            id="Q1",
            text="Single choice (Yes -> continue, No -> finish)",
            options={"Yes": ["Q2"], "No": [END]},
            min_select=1,
            allow_multi=False,
        ),
        Node(
            id="Q2",
            text="Pick up to two",
            options={
                "A": ["Q2_A1", "Q2_A2"],
                "B": ["Q2_B1"],
                "C": ["Q2_C1"],
            },
            min_select=1,
            max_select=2,
            allow_multi=True,
            # display hint only; scheduling stays A, B, C
            option_order=["B", "A", "C"],
            default_next="Q3",
        ),
        Node(id="Q2_A1", text="Follow-up 1 for A", default_next="Q3"),
        Node(id="Q2_A2", text="Follow-up 2 for A", default_next="Q3"),
        Node(id="Q2_B1", text="Follow-up for B", default_next="Q3"),
        Node(id="Q2_C1", text="Follow-up for C", default_next="Q3"),
        Node(id="Q3", text="Summary", default_next=END),
        Node(id=END, text="Finished", default_next=END),
    ]
    return Graph.from_nodes(START, nodes, max_history=max_history)
