"""
Navigation Engine — advance / peek / back over a branching survey graph.

Two layers:

    transition(graph, state, command) -> (state, result)
        Pure state machine. The input state is never modified; a command
        that changes nothing returns the very same state object.

    SurveyNavigator
        Holds one state behind a re-entrant lock so every command executes
        atomically, notifies subscribers after each change, and hands out
        defensive copies from its read accessors. Listeners run under the
        lock, each in isolation: an exception from one is logged and the
        remaining listeners still run.

Next-node resolution:
    1. Front of the pending queue, if any
    2. Otherwise the current node's default_next, sanitized to END when
       blank or unknown
    END is terminal: peeking or advancing from it yields END.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from surveynav.errors import SnapshotError
from surveynav.history import HistoryEntry, HistoryStack
from surveynav.model import END, Graph, Node
from surveynav.pending import PendingEntry, PendingQueue, apply_answer
from surveynav.serialization import state_from_json, state_to_json
from surveynav.state import (
    Advance,
    Back,
    ClearAll,
    Enqueue,
    NavigationState,
    Restore,
    UpdateChoiceAnswer,
    UpdateTextAnswer,
)

logger = logging.getLogger(__name__)

Command = Union[UpdateChoiceAnswer, UpdateTextAnswer, Enqueue, Advance, Back, ClearAll, Restore]
Listener = Callable[[NavigationState], None]


def peek_next_from(graph: Graph, node_id: str) -> str:
    """Static successor of a node from the graph alone; END when unresolvable."""
    if not graph.has_node(node_id):
        return END
    target = graph.get_node(node_id).default_next
    if not target or not target.strip() or not graph.has_node(target):
        return END
    return target


def peek_next(graph: Graph, state: NavigationState) -> str:
    if state.current_node_id == END:
        return END
    front = state.queue.peek()
    if front is not None:
        return front.node_id
    return peek_next_from(graph, state.current_node_id)


def get_next_from(graph: Graph, state: NavigationState, node_id: str) -> str:
    if node_id == state.current_node_id:
        return peek_next(graph, state)
    return peek_next_from(graph, node_id)


def _advance(graph: Graph, state: NavigationState) -> Tuple[NavigationState, str]:
    if state.current_node_id == END:
        return state, END

    new_state = state.copy()
    new_state.history = state.history.push(
        HistoryEntry.capture(
            state.current_node_id,
            state.queue.entries,
            state.queue.origin_map,
            state.visited,
        )
    )
    entry = new_state.queue.pop_front()
    destination = entry.node_id if entry is not None else peek_next_from(graph, state.current_node_id)

    new_state.current_node_id = destination
    if destination != END:
        new_state.visited.add(destination)
    logger.debug("advance %s -> %s", state.current_node_id, destination)
    return new_state, destination


def _back(state: NavigationState) -> Tuple[NavigationState, bool]:
    entry, remaining = state.history.pop()
    if entry is None:
        return state, False

    new_state = state.copy()
    new_state.current_node_id = entry.current_node_id
    new_state.queue = PendingQueue(
        entries=list(entry.pending_queue),
        origin_map=entry.origin_map_dict(),
    )
    new_state.visited = set(entry.visited)
    new_state.history = remaining
    logger.debug("back %s -> %s", state.current_node_id, entry.current_node_id)
    return new_state, True


def _restore(graph: Graph, incoming: NavigationState) -> NavigationState:
    for node_id in [incoming.current_node_id] + incoming.history.node_ids():
        if not graph.has_node(node_id):
            raise SnapshotError(f"Snapshot is positioned on unknown node {node_id!r}")
    new_state = incoming.copy()
    entries = new_state.history.entries
    if graph.max_history is not None and len(entries) > graph.max_history:
        entries = entries[len(entries) - graph.max_history:]
    new_state.history = HistoryStack(entries=entries, max_size=graph.max_history)
    return new_state


def transition(graph: Graph, state: NavigationState, command: Command) -> Tuple[NavigationState, Any]:
    """
    Apply one command.

    Results:
        UpdateChoiceAnswer -> ids newly scheduled by the answer
        UpdateTextAnswer   -> None
        Enqueue            -> bool
        Advance            -> destination id
        Back               -> bool
        ClearAll           -> None
        Restore            -> None

    Raises:
        NodeNotFoundError: UpdateChoiceAnswer on an unknown node
        ValidationError: multi-select answer outside its bounds
        SnapshotError: Restore of a state whose current or history node
            ids are unknown to the graph
    """
    if isinstance(command, Advance):
        return _advance(graph, state)

    if isinstance(command, Back):
        return _back(state)

    if isinstance(command, UpdateChoiceAnswer):
        node = graph.get_node(command.node_id)
        new_state = state.copy()
        previous = new_state.answers.update_choice_answer(node, command.selections)
        scheduled = apply_answer(
            graph,
            new_state.queue,
            new_state.visited,
            new_state.answers,
            node,
            previous,
            new_state.answers.choice_answers.get(node.id),
            replace_queued=command.replace_queued,
        )
        return new_state, scheduled

    if isinstance(command, UpdateTextAnswer):
        new_state = state.copy()
        new_state.answers.update_text_answer(command.node_id, command.text)
        return new_state, None

    if isinstance(command, Enqueue):
        new_state = state.copy()
        if not new_state.queue.enqueue(graph, command.node_id):
            return state, False
        return new_state, True

    if isinstance(command, ClearAll):
        return NavigationState.initial(graph), None

    if isinstance(command, Restore):
        return _restore(graph, command.state), None

    raise TypeError(f"Unsupported command: {type(command)}")


class SurveyNavigator:
    """
    Thread-safe facade over the navigation state machine.

    A presentation layer reads current_node / peek_next / can_go_back,
    dispatches the respondent's gestures into the mutators, and may
    subscribe() to be told about every state change.
    """

    def __init__(self, graph: Graph, state: Optional[NavigationState] = None):
        self._graph = graph
        self._lock = threading.RLock()
        self._state = _restore(graph, state) if state is not None else NavigationState.initial(graph)
        self._listeners: List[Listener] = []

    @property
    def graph(self) -> Graph:
        return self._graph

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, command: Command) -> Any:
        with self._lock:
            new_state, result = transition(self._graph, self._state, command)
            if new_state is not self._state:
                self._state = new_state
                self._notify(new_state)
            return result

    def _notify(self, state: NavigationState) -> None:
        # The state is already committed; a failing listener must not hide
        # that from the caller or starve the listeners after it.
        for listener in list(self._listeners):
            try:
                listener(state.copy())
            except Exception:
                logger.exception("state listener %r failed", listener)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Graph lookups
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Node:
        return self._graph.get_node(node_id)

    def node_exists(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    @property
    def current_node_id(self) -> str:
        with self._lock:
            return self._state.current_node_id

    @property
    def current_node(self) -> Node:
        return self._graph.get_node(self.current_node_id)

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def update_choice_answer(
        self,
        node_id: str,
        selections: Optional[Sequence[str]],
        replace_queued: bool = True,
    ) -> List[str]:
        frozen = tuple(selections) if selections is not None else None
        return self.dispatch(UpdateChoiceAnswer(node_id, frozen, replace_queued))

    def update_multi_answer(self, node_id: str, selections: Sequence[str], replace_queued: bool = True) -> List[str]:
        return self.update_choice_answer(node_id, selections, replace_queued)

    def update_single_answer(self, node_id: str, selection: Optional[str], replace_queued: bool = True) -> List[str]:
        return self.update_choice_answer(node_id, [selection] if selection else None, replace_queued)

    def update_text_answer(self, node_id: str, text: Optional[str]) -> None:
        self.dispatch(UpdateTextAnswer(node_id, text))

    update_free_text = update_text_answer

    def get_choice_answer(self, node_id: str) -> Optional[List[str]]:
        with self._lock:
            return self._state.answers.get_choice_answer(node_id)

    def get_text_answer(self, node_id: str) -> Optional[str]:
        with self._lock:
            return self._state.answers.get_text_answer(node_id)

    def has_answer_for(self, node_id: str) -> bool:
        with self._lock:
            return self._state.answers.has_answer_for(node_id)

    def all_answers(self) -> Dict[str, Union[List[str], str]]:
        with self._lock:
            return self._state.answers.all_answers()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def enqueue(self, node_id: str) -> bool:
        return self.dispatch(Enqueue(node_id))

    def peek_next(self) -> str:
        with self._lock:
            return peek_next(self._graph, self._state)

    def peek_next_from(self, node_id: str) -> str:
        return peek_next_from(self._graph, node_id)

    def get_next_from(self, node_id: str) -> str:
        with self._lock:
            return get_next_from(self._graph, self._state, node_id)

    def advance_to_next(self) -> str:
        return self.dispatch(Advance())

    def on_back(self) -> bool:
        return self.dispatch(Back())

    def can_go_back(self) -> bool:
        with self._lock:
            return bool(self._state.history)

    def can_go_next(self) -> bool:
        return self.peek_next() != END

    def is_finished(self) -> bool:
        return self.peek_next() == END

    def get_history_node_ids(self) -> List[str]:
        with self._lock:
            return self._state.history.node_ids()

    def clear_all(self) -> None:
        self.dispatch(ClearAll())

    # ------------------------------------------------------------------
    # Snapshots (defensive copies)
    # ------------------------------------------------------------------

    def peek_pending_count(self) -> int:
        with self._lock:
            return len(self._state.queue.entries)

    def pending_queue_snapshot(self) -> List[PendingEntry]:
        with self._lock:
            return list(self._state.queue.entries)

    def origin_map_snapshot(self) -> Dict[str, List[str]]:
        with self._lock:
            return {origin: list(children) for origin, children in self._state.queue.origin_map.items()}

    def visited_snapshot(self) -> Set[str]:
        with self._lock:
            return set(self._state.visited)

    def choice_answers_snapshot(self) -> Dict[str, List[str]]:
        with self._lock:
            return self._state.answers.choice_answers_snapshot()

    def text_answers_snapshot(self) -> Dict[str, str]:
        with self._lock:
            return self._state.answers.text_answers_snapshot()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def snapshot(self) -> NavigationState:
        with self._lock:
            return self._state.copy()

    def restore(self, snapshot: NavigationState) -> None:
        self.dispatch(Restore(snapshot))

    def snapshot_json(self) -> str:
        with self._lock:
            return state_to_json(self._state)

    def restore_from_json(self, text: str) -> None:
        self.restore(state_from_json(text, self._graph))
