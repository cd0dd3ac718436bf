"""
Branching Survey Navigator

Drives a questionnaire whose next question depends on the answers given so
far: answer-driven scheduling of follow-up questions, forward navigation,
multi-level back navigation and full state snapshots.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering or input widgets
    - Transition animation
    - Where snapshots are stored

A presentation layer reads the navigator and dispatches gestures into it.
"""

from surveynav.engine import SurveyNavigator, transition
from surveynav.errors import (
    GraphDefinitionError,
    NodeNotFoundError,
    SnapshotError,
    SurveyNavError,
    ValidationError,
)
from surveynav.model import END, START, Graph, Node
from surveynav.pending import PendingEntry
from surveynav.state import NavigationState

__version__ = "0.1.0"

__all__ = [
    "END",
    "START",
    "Graph",
    "GraphDefinitionError",
    "NavigationState",
    "Node",
    "NodeNotFoundError",
    "PendingEntry",
    "SnapshotError",
    "SurveyNavError",
    "SurveyNavigator",
    "ValidationError",
    "transition",
]
