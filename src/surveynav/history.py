"""
History Stack — bounded undo log of navigation snapshots.

Each entry records the navigation fields as they were immediately before a
forward move. Answers are deliberately absent: going back never rewinds what
the respondent typed or selected.

Once the stack is full the oldest entry is dropped on push. Trimmed steps are
gone for good; on_back() reports False past that point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from surveynav.pending import PendingEntry


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable pre-move snapshot of the navigation fields."""

    current_node_id: str
    pending_queue: Tuple[PendingEntry, ...] = ()
    origin_map: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    visited: FrozenSet[str] = frozenset()

    @classmethod
    def capture(
        cls,
        current_node_id: str,
        pending_queue: List[PendingEntry],
        origin_map: Dict[str, List[str]],
        visited: set,
    ) -> HistoryEntry:
        return cls(
            current_node_id=current_node_id,
            pending_queue=tuple(pending_queue),
            origin_map=tuple(sorted((origin, tuple(children)) for origin, children in origin_map.items())),
            visited=frozenset(visited),
        )

    def origin_map_dict(self) -> Dict[str, List[str]]:
        return {origin: list(children) for origin, children in self.origin_map}


@dataclass(frozen=True)
class HistoryStack:
    """
    Fixed-capacity LIFO of HistoryEntry values.

    Operations return new stacks; an instance is never modified in place,
    so a stack can be shared between navigation states safely.

    Properties:
        entries: oldest first
        max_size: capacity (None = unbounded, 0 = keep nothing)
    """

    entries: Tuple[HistoryEntry, ...] = ()
    max_size: Optional[int] = None

    def push(self, entry: HistoryEntry) -> HistoryStack:
        entries = self.entries + (entry,)
        if self.max_size is not None and len(entries) > self.max_size:
            entries = entries[len(entries) - self.max_size:]
        return HistoryStack(entries=entries, max_size=self.max_size)

    def pop(self) -> Tuple[Optional[HistoryEntry], HistoryStack]:
        if not self.entries:
            return None, self
        return self.entries[-1], HistoryStack(entries=self.entries[:-1], max_size=self.max_size)

    def node_ids(self) -> List[str]:
        return [entry.current_node_id for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
