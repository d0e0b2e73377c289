"""Local insertion of one newly created issue into the live DAG.

Uses the same sort-key policy as the graph builder, so the node lands where
the next full rebuild would put it. A delayed full refresh is scheduled
afterwards to pick up anything inferred differently (e.g. the parent).
"""

import logging
import time
from typing import Callable, List, Optional

from core.errors import InjectionError
from core.issue import Issue
from core.node import Node
from core.sort_key import insert_sorted
from core.desktop.devtools.application.error_state import ErrorOrigin, ErrorState
from core.desktop.devtools.application.refresh import EVENTUAL_REFRESH_DELAY, RefreshReconciler
from core.desktop.devtools.application.tree_view import TreeView

logger = logging.getLogger("beadtree.inject")

INJECTION_BUDGET = 0.05


def construct_node(issue: Issue) -> Node:
    """Conservative node: collapsed, no known blockers, own aggregates only."""
    node = Node(issue)
    node.has_in_progress = issue.is_in_progress
    node.has_ready = issue.is_open
    return node


def _containers(view: TreeView, node: Node) -> List[List[Node]]:
    if node.parents:
        return [parent.children for parent in node.parents]
    return [view.roots]


def _reposition(view: TreeView, node: Node) -> None:
    for siblings in _containers(view, node):
        for idx, existing in enumerate(siblings):
            if existing is node:
                del siblings[idx]
                break
        insert_sorted(siblings, node)


def propagate(view: TreeView, node: Node) -> int:
    """Bubble flags and sort key through every ancestor of `node`.

    A branch stops as soon as an ancestor already dominates what is being
    pushed up. Returns the number of ancestors touched.
    """
    touched = 0
    stack = [node]
    while stack:
        child = stack.pop()
        for parent in child.parents:
            changed = False
            if child.has_in_progress:
                parent.expanded = True
                if not parent.has_in_progress:
                    parent.has_in_progress = True
                    changed = True
            if child.has_ready and not parent.has_ready:
                parent.has_ready = True
                changed = True
            if child.sort_key < parent.sort_key:
                parent.sort_key = child.sort_key
                _reposition(view, parent)
                changed = True
            if changed:
                touched += 1
                stack.append(parent)
    return touched


class FastInjector:
    def __init__(
        self,
        view: TreeView,
        errors: ErrorState,
        reconciler: Optional[RefreshReconciler] = None,
        *,
        budget: float = INJECTION_BUDGET,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.view = view
        self.errors = errors
        self.reconciler = reconciler
        self.budget = budget
        self._clock = clock

    def inject(self, issue: Issue, parent_hint: str = "") -> Node:
        start = self._clock()
        node = self._insert(issue, parent_hint)
        elapsed = self._clock() - start
        if elapsed > self.budget:
            message = f"injection took {elapsed * 1000:.0f}ms (target: <{self.budget * 1000:.0f}ms)"
            logger.warning(message)
            self.errors.record(message, ErrorOrigin.OPERATION, warning=True)
        if self.reconciler is not None:
            self.reconciler.schedule_eventual_refresh(EVENTUAL_REFRESH_DELAY)
        return node

    def inject_or_refresh(self, issue: Issue, parent_hint: str = "") -> Optional[Node]:
        """Inject, or fall back to a full refresh when the fast path cannot place the issue."""
        try:
            return self.inject(issue, parent_hint)
        except InjectionError as exc:
            if self.reconciler is None:
                raise
            logger.warning("fast injection failed, refreshing: %s", exc)
            self.reconciler.force_refresh()
            return None

    def _insert(self, issue: Issue, parent_hint: str) -> Node:
        view = self.view
        if view.find_node(issue.id) is not None:
            raise InjectionError(f"issue {issue.id} is already in the tree")

        node = construct_node(issue)
        parent_id = parent_hint
        if not parent_id:
            parents = issue.parent_ids()
            parent_id = parents[0] if parents else ""

        parent: Optional[Node] = None
        if parent_id:
            parent = view.find_node(parent_id)
            if parent is None:
                raise InjectionError(f"parent node not found: {parent_id}")
            node.parents = [parent]
            node.parent = parent
            node.tree_depth = parent.tree_depth + 1
            insert_sorted(parent.children, node)
            view.reveal(parent)
        else:
            insert_sorted(view.roots, node)

        propagate(view, node)
        if issue.is_in_progress:
            self._expand_ancestors(node)

        view.recalc_visible_rows()
        view.relocate_cursor(node.id, parent_id, view.cursor)
        return node

    @staticmethod
    def _expand_ancestors(node: Node) -> None:
        seen = set()
        stack = list(node.parents)
        while stack:
            current = stack.pop()
            if current.id in seen:
                continue
            seen.add(current.id)
            current.expanded = True
            stack.extend(current.parents)


__all__ = ["INJECTION_BUDGET", "construct_node", "propagate", "FastInjector"]
