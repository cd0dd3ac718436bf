"""
Exception taxonomy for the survey navigator.

    NodeNotFoundError     -- lookup of an id absent from the graph
    ValidationError       -- rejected answer write (nothing is mutated)
    GraphDefinitionError  -- graph could not be constructed
    SnapshotError         -- serialized state could not be restored

Silent no-ops (enqueue of END / unknown / duplicate ids, back past the
bottom of history) are reported through return values, not exceptions.
"""


class SurveyNavError(Exception):
    """Base class for all navigator errors."""
    pass


class NodeNotFoundError(SurveyNavError, KeyError):
    """Raised when a node id is not part of the graph."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class ValidationError(SurveyNavError, ValueError):
    """Raised when an answer violates the node's selection bounds."""
    pass


class GraphDefinitionError(SurveyNavError, ValueError):
    """Raised when a graph definition is structurally invalid."""
    pass


class SnapshotError(SurveyNavError, ValueError):
    """Raised when a serialized navigation state is malformed."""
    pass
