"""Structural validation of issue edges with cycle detection.

Pure domain logic: receives issue data as parameters, performs no I/O.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .errors import CyclicDependencyError
from .issue import DEP_PARENT_CHILD, Issue


@dataclass(frozen=True)
class DependencyError:
    """Represents a dependency validation error."""

    issue_id: str
    error_type: str  # "missing", "cycle", "self"
    details: str
    dep_type: str = ""
    target_id: str = ""

    def __str__(self) -> str:
        return f"{self.issue_id}: {self.error_type} - {self.details}"


def find_dangling_references(issues: Iterable[Issue], existing_ids: Set[str]) -> List[DependencyError]:
    """Report edges that point at issues missing from the export.

    Args:
        issues: All issues of one export
        existing_ids: Set of all exported issue IDs

    Returns:
        One error per dangling edge, in export order
    """
    errors: List[DependencyError] = []
    for issue in issues:
        for dep in issue.dependencies:
            if dep.target_id and dep.target_id not in existing_ids:
                errors.append(
                    DependencyError(
                        issue.id,
                        "missing",
                        f"{dep.dep_type or 'untyped'} target '{dep.target_id}' not found",
                        dep_type=dep.dep_type,
                        target_id=dep.target_id,
                    )
                )
        for dep in issue.dependents:
            if dep.dep_type == DEP_PARENT_CHILD and dep.issue_id and dep.issue_id not in existing_ids:
                errors.append(
                    DependencyError(
                        issue.id,
                        "missing",
                        f"parent-child dependent '{dep.issue_id}' not found",
                        dep_type=dep.dep_type,
                        target_id=dep.issue_id,
                    )
                )
    return errors


def detect_cycle(parent_graph: Dict[str, List[str]]) -> Optional[List[str]]:
    """Find a cycle in a child -> parents mapping.

    Uses DFS with path tracking, starting from every node in sorted order so the
    reported cycle is deterministic. The walk keeps its own stack of neighbor
    iterators, so arbitrarily deep parent chains are fine.

    Returns:
        List of issue IDs forming the cycle (first id repeated at the end),
        or None if the graph is acyclic
    """
    visited: Set[str] = set()
    rec_stack: Set[str] = set()
    path: List[str] = []

    def enter(node: str, pending: List[Iterator[str]]) -> None:
        visited.add(node)
        rec_stack.add(node)
        path.append(node)
        pending.append(iter(parent_graph.get(node, [])))

    for start in sorted(parent_graph):
        if start in visited:
            continue
        pending: List[Iterator[str]] = []
        enter(start, pending)
        while pending:
            neighbor = next(pending[-1], None)
            if neighbor is None:
                pending.pop()
                rec_stack.remove(path.pop())
            elif neighbor not in visited:
                enter(neighbor, pending)
            elif neighbor in rec_stack:
                cycle_start = path.index(neighbor)
                return path[cycle_start:] + [neighbor]
    return None


def ensure_acyclic(parent_graph: Dict[str, List[str]]) -> None:
    """Raise CyclicDependencyError when parent-child links loop back."""
    cycle = detect_cycle(parent_graph)
    if cycle:
        raise CyclicDependencyError(cycle)


def build_parent_graph(issues: Iterable[Issue]) -> Dict[str, List[str]]:
    """Child -> parent ids from both outgoing and reverse parent-child edges."""
    graph: Dict[str, List[str]] = {}
    for issue in issues:
        parents = graph.setdefault(issue.id, [])
        for parent_id in issue.parent_ids():
            if parent_id not in parents:
                parents.append(parent_id)
    for issue in issues:
        for dep in issue.dependents:
            if dep.dep_type != DEP_PARENT_CHILD or not dep.issue_id:
                continue
            parents = graph.setdefault(dep.issue_id, [])
            if issue.id not in parents:
                parents.append(issue.id)
    return graph


__all__ = [
    "DependencyError",
    "find_dangling_references",
    "detect_cycle",
    "ensure_acyclic",
    "build_parent_graph",
]
