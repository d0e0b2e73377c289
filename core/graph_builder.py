"""Build the linked, sorted issue DAG from a flat export."""

import logging
from typing import Dict, Iterable, List, Set

from .dependency_validator import build_parent_graph, ensure_acyclic, find_dangling_references
from .errors import DanglingReferenceError, InvalidIssueDataError
from .issue import DEP_BLOCKS, DEP_DISCOVERED_FROM, DEP_PARENT_CHILD, DEP_RELATED, Issue
from .node import Node
from .sort_key import self_sort_key, sort_nodes

logger = logging.getLogger("beadtree.graph")


def _append_unique(items: List[Node], node: Node) -> None:
    if all(existing.id != node.id for existing in items):
        items.append(node)


class GraphBuilder:
    """Turn an issue export into root nodes.

    With ``strict`` (the default) any dangling edge aborts the build. Without
    it, dangling ``blocks``/``related``/``discovered-from`` edges are dropped
    and logged; dangling parent-child edges and cycles abort either way.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def build(self, issues: Iterable[Issue]) -> List[Node]:
        issues = list(issues)
        if not issues:
            return []

        nodes: Dict[str, Node] = {}
        for issue in issues:
            if issue.id in nodes:
                raise InvalidIssueDataError(f"duplicate issue id {issue.id}")
            nodes[issue.id] = Node(issue)

        self._check_references(issues, set(nodes))
        ensure_acyclic(build_parent_graph(issues))

        for issue in issues:
            self._link(nodes[issue.id], nodes)

        roots: List[Node] = []
        for node in nodes.values():
            if node.parents:
                node.parent = node.parents[0]
                for parent in node.parents:
                    _append_unique(parent.children, node)
            else:
                roots.append(node)

        depths: Dict[str, int] = {}
        for node in nodes.values():
            node.tree_depth = self._depth(node, depths)
            node.blocks.sort(key=lambda n: (n.issue.created_at, n.id))
            node.refresh_blocked()

        done: Set[str] = set()
        for root in roots:
            self._compute(root, done)
            if root.has_in_progress:
                root.expanded = True
        sort_nodes(roots)
        logger.debug("built graph: %d issues, %d roots", len(nodes), len(roots))
        return roots

    def _check_references(self, issues: List[Issue], known: Set[str]) -> None:
        for problem in find_dangling_references(issues, known):
            if self.strict or problem.dep_type == DEP_PARENT_CHILD:
                raise DanglingReferenceError(problem.issue_id, problem.target_id, problem.dep_type or "untyped")
            logger.warning("dropping dangling edge %s", problem)

    @staticmethod
    def _link(node: Node, nodes: Dict[str, Node]) -> None:
        for dep in node.issue.dependencies:
            target = nodes.get(dep.target_id)
            if target is None:
                continue
            if dep.dep_type == DEP_PARENT_CHILD:
                _append_unique(node.parents, target)
            elif dep.dep_type == DEP_BLOCKS:
                _append_unique(node.blocked_by, target)
                _append_unique(target.blocks, node)
            elif dep.dep_type == DEP_RELATED:
                _append_unique(node.related, target)
                _append_unique(target.related, node)
            elif dep.dep_type == DEP_DISCOVERED_FROM:
                _append_unique(node.discovered_from, target)
        for dep in node.issue.dependents:
            if dep.dep_type != DEP_PARENT_CHILD:
                continue
            child = nodes.get(dep.issue_id)
            if child is not None:
                _append_unique(child.parents, node)

    @staticmethod
    def _depth(node: Node, memo: Dict[str, int]) -> int:
        """Longest parent chain above `node`, memoized across calls."""
        stack = [(node, False)]
        while stack:
            current, parents_done = stack.pop()
            if current.id in memo:
                continue
            if not parents_done:
                stack.append((current, True))
                stack.extend((parent, False) for parent in current.parents if parent.id not in memo)
                continue
            memo[current.id] = max((memo[parent.id] + 1 for parent in current.parents), default=0)
        return memo[node.id]

    @staticmethod
    def _compute(root: Node, done: Set[str]) -> None:
        """Post-order aggregate pass; shared children are computed once."""
        stack = [(root, False)]
        while stack:
            node, children_done = stack.pop()
            if not children_done:
                if node.id in done:
                    continue
                done.add(node.id)
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.children) if child.id not in done)
                continue
            node.has_in_progress = node.issue.is_in_progress
            node.has_ready = node.is_ready
            key = self_sort_key(node)
            for child in node.children:
                if child.has_in_progress:
                    node.has_in_progress = True
                    node.expanded = True
                if child.has_ready:
                    node.has_ready = True
                key = min(key, child.sort_key)
            node.sort_key = key
            sort_nodes(node.children)


def build_graph(issues: Iterable[Issue], *, strict: bool = True) -> List[Node]:
    return GraphBuilder(strict=strict).build(issues)


__all__ = ["GraphBuilder", "build_graph"]
