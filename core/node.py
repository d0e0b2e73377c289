"""In-memory DAG node wrapping one issue, plus the TreeRow projection."""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from .issue import Issue
from .sort_key import SortKey, self_sort_key


@dataclass(eq=False)
class Node:
    issue: Issue
    children: List["Node"] = field(default_factory=list)
    parents: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = None

    blocked_by: List["Node"] = field(default_factory=list)
    blocks: List["Node"] = field(default_factory=list)
    related: List["Node"] = field(default_factory=list)
    discovered_from: List["Node"] = field(default_factory=list)

    is_blocked: bool = False
    has_in_progress: bool = False
    has_ready: bool = False
    expanded: bool = False
    tree_depth: int = 0
    sort_key: Optional[SortKey] = None

    comments_loaded: bool = False
    comment_error: str = ""

    def __post_init__(self) -> None:
        if self.sort_key is None:
            self.sort_key = self_sort_key(self)

    def __repr__(self) -> str:
        return f"Node({self.issue.id!r}, children={len(self.children)}, parents={len(self.parents)})"

    @property
    def id(self) -> str:
        return self.issue.id

    @property
    def title(self) -> str:
        return self.issue.title

    @property
    def status(self) -> str:
        return self.issue.status

    @property
    def is_ready(self) -> bool:
        return self.issue.is_open and not self.is_blocked

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def has_multiple_parents(self) -> bool:
        return len(self.parents) > 1

    def refresh_blocked(self) -> bool:
        self.is_blocked = any(not b.issue.is_closed for b in self.blocked_by)
        return self.is_blocked


class TreeRow(NamedTuple):
    """One occurrence of a node under one parent context."""

    node: Node
    parent: Optional[Node] = None
    depth: int = 0

    @property
    def parent_id(self) -> str:
        return self.parent.id if self.parent is not None else ""

    @property
    def has_multiple_parents(self) -> bool:
        return self.node.has_multiple_parents

    @property
    def instance_key(self) -> Tuple[str, str]:
        return (self.parent_id, self.node.id)


def walk_nodes(roots: List[Node]):
    """Yield every reachable node once, depth-first, in child order."""
    seen = set()
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        yield node
        stack.extend(reversed(node.children))


def index_nodes(roots: List[Node]) -> dict:
    return {node.id: node for node in walk_nodes(roots)}


__all__ = ["Node", "TreeRow", "walk_nodes", "index_nodes"]
