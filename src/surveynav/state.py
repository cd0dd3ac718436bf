"""
Navigation state and the commands that transform it.

NavigationState is a plain value: everything the navigator knows, in one
serializable object. Commands are immutable requests; the engine applies a
command to a state and returns a new state, leaving the input untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from surveynav.answers import AnswerStore
from surveynav.history import HistoryStack
from surveynav.model import Graph
from surveynav.pending import PendingQueue


@dataclass
class NavigationState:
    """
    Complete navigator state.

    Properties:
        current_node_id: node the respondent is on
        queue: pending entries and origin map
        visited: ids advanced onto (END excluded)
        answers: choice and text answers
        history: pre-move snapshots for back navigation
    """

    current_node_id: str
    queue: PendingQueue = field(default_factory=PendingQueue)
    visited: Set[str] = field(default_factory=set)
    answers: AnswerStore = field(default_factory=AnswerStore)
    history: HistoryStack = field(default_factory=HistoryStack)

    @classmethod
    def initial(cls, graph: Graph) -> NavigationState:
        return cls(
            current_node_id=graph.start_id,
            history=HistoryStack(max_size=graph.max_history),
        )

    def copy(self) -> NavigationState:
        # HistoryStack is immutable and can be shared
        return NavigationState(
            current_node_id=self.current_node_id,
            queue=self.queue.copy(),
            visited=set(self.visited),
            answers=self.answers.copy(),
            history=self.history,
        )


@dataclass(frozen=True)
class UpdateChoiceAnswer:
    node_id: str
    selections: Optional[Tuple[str, ...]]
    replace_queued: bool = True


@dataclass(frozen=True)
class UpdateTextAnswer:
    node_id: str
    text: Optional[str]


@dataclass(frozen=True)
class Enqueue:
    node_id: str


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class ClearAll:
    pass


@dataclass(frozen=True)
class Restore:
    state: NavigationState
