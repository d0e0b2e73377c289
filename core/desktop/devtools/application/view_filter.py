"""Filter predicates for the outline: free text plus view mode."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable

from core.node import Node


class ViewMode(Enum):
    ALL = "all"
    ACTIVE = "active"
    READY = "ready"

    def next(self) -> "ViewMode":
        order = list(ViewMode)
        return order[(order.index(self) + 1) % len(order)]

    @property
    def label_key(self) -> str:
        return f"VIEW_MODE_{self.name}"

    @classmethod
    def from_string(cls, value: str) -> "ViewMode":
        token = (value or "").strip().lower()
        for mode in cls:
            if mode.value == token:
                return mode
        raise ValueError(f"unknown view mode: {value!r}")


@dataclass(frozen=True)
class FilterEval:
    matches: bool
    has_matching_descendant: bool

    @property
    def included(self) -> bool:
        return self.matches or self.has_matching_descendant


def _strip_prefix(issue_id: str) -> str:
    head, sep, tail = issue_id.partition("-")
    return tail if sep and head else issue_id


def matches_text(filter_lower: str, node: Node) -> bool:
    """Case-insensitive substring on title, id, and id without its prefix."""
    if not filter_lower:
        return True
    if filter_lower in node.issue.title.lower():
        return True
    issue_id = node.id.lower()
    if filter_lower in issue_id:
        return True
    return filter_lower in _strip_prefix(issue_id)


def matches_view_mode(mode: ViewMode, node: Node) -> bool:
    if mode is ViewMode.ACTIVE:
        return not node.issue.is_closed
    if mode is ViewMode.READY:
        return node.is_ready
    return True


def is_filter_active(filter_text: str, mode: ViewMode) -> bool:
    return bool(filter_text) or mode is not ViewMode.ALL


def evaluate(roots: Iterable[Node], filter_text: str, mode: ViewMode) -> Dict[str, FilterEval]:
    """Evaluate every reachable node once; shared subtrees reuse their result.

    Children are settled before their parent, so a node's result can look at
    its children's results directly.
    """
    filter_lower = (filter_text or "").lower()
    evals: Dict[str, FilterEval] = {}
    stack = [(root, False) for root in roots]
    while stack:
        node, children_done = stack.pop()
        if node.id in evals:
            continue
        if not children_done:
            stack.append((node, True))
            stack.extend((child, False) for child in node.children if child.id not in evals)
            continue
        matches = matches_view_mode(mode, node) and matches_text(filter_lower, node)
        has_match = any(evals[child.id].included for child in node.children)
        evals[node.id] = FilterEval(matches, has_match)
    return evals


__all__ = [
    "ViewMode",
    "FilterEval",
    "matches_text",
    "matches_view_mode",
    "is_filter_active",
    "evaluate",
]
