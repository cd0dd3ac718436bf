"""
Answer Store — per-node choice and free-text answers.

Answers are respondent data, not navigation state: back-navigation never
reverts them. Choice selections are stored verbatim (caller order, duplicates
kept); canonical ordering only matters when children are scheduled.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from surveynav.errors import ValidationError
from surveynav.model import Node


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


@dataclass
class AnswerStore:
    """Two maps keyed by node id: selected option keys and free text."""

    choice_answers: Dict[str, List[str]] = field(default_factory=dict)
    text_answers: Dict[str, str] = field(default_factory=dict)

    def update_choice_answer(self, node: Node, selections: Optional[Sequence[str]]) -> Optional[List[str]]:
        """
        Store the selection for a node and return the previously stored one.

        Multi-select nodes must satisfy min_select <= len(selections) <= max_select.
        Unknown option keys are accepted. A single-select answer with no
        non-blank key (None, empty, blanks only) clears the stored value, as
        does a valid empty multi-select answer.

        Raises:
            ValidationError: multi-select size outside the node's bounds.
                The store is left untouched.
        """
        values = list(selections) if selections is not None else []

        if node.allow_multi:
            count = len(values)
            upper = node.max_select
            if count < node.min_select or (upper is not None and count > upper):
                bound = "inf" if upper is None else upper
                raise ValidationError(
                    f"Node {node.id!r} expects between {node.min_select} and {bound} "
                    f"selections, got {count}"
                )
        else:
            values = [v for v in values if not _is_blank(v)]

        previous = self.choice_answers.get(node.id)
        if values:
            self.choice_answers[node.id] = values
        else:
            self.choice_answers.pop(node.id, None)
        return list(previous) if previous is not None else None

    def update_text_answer(self, node_id: str, text: Optional[str]) -> None:
        """Unconditional overwrite; None removes the text answer."""
        if text is None:
            self.text_answers.pop(node_id, None)
        else:
            self.text_answers[node_id] = text

    def get_choice_answer(self, node_id: str) -> Optional[List[str]]:
        value = self.choice_answers.get(node_id)
        return list(value) if value is not None else None

    def get_text_answer(self, node_id: str) -> Optional[str]:
        return self.text_answers.get(node_id)

    def has_answer_for(self, node_id: str) -> bool:
        return node_id in self.choice_answers or node_id in self.text_answers

    def all_answers(self) -> Dict[str, Union[List[str], str]]:
        """Merged view; a node with both kinds of answer reports its choice."""
        merged: Dict[str, Union[List[str], str]] = dict(self.text_answers)
        for node_id, values in self.choice_answers.items():
            merged[node_id] = list(values)
        return merged

    def clear_node(self, node_id: str) -> None:
        self.choice_answers.pop(node_id, None)
        self.text_answers.pop(node_id, None)

    def clear(self) -> None:
        self.choice_answers.clear()
        self.text_answers.clear()

    def choice_answers_snapshot(self) -> Dict[str, List[str]]:
        return copy.deepcopy(self.choice_answers)

    def text_answers_snapshot(self) -> Dict[str, str]:
        return dict(self.text_answers)

    def copy(self) -> AnswerStore:
        return AnswerStore(
            choice_answers=self.choice_answers_snapshot(),
            text_answers=self.text_answers_snapshot(),
        )
