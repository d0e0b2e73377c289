"""Ordering policy shared by the graph builder and the fast-path injector.

Both update paths (full rebuild and local insertion) must call into this module
so that an injected node lands exactly where the next rebuild would put it.
"""

from bisect import bisect_left
from datetime import timezone
from typing import TYPE_CHECKING, List, NamedTuple, Tuple

from .issue import parse_timestamp

if TYPE_CHECKING:  # pragma: no cover
    from .node import Node

BUCKET_IN_PROGRESS = 1
BUCKET_READY = 2
BUCKET_OPEN = 3
BUCKET_CLOSED = 4

MISSING_RECENCY = float("inf")


class SortKey(NamedTuple):
    bucket: int
    priority: int
    recency: float  # negated epoch seconds: most recent first


def status_bucket(node: "Node") -> int:
    status = (node.issue.status or "").strip().lower()
    if status == "in_progress":
        return BUCKET_IN_PROGRESS
    if status == "closed":
        return BUCKET_CLOSED
    if status == "open" and not node.is_blocked:
        return BUCKET_READY
    return BUCKET_OPEN


def _recency(*values: str) -> float:
    for value in values:
        parsed = parse_timestamp(value)
        if parsed is None:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return -parsed.timestamp()
    return MISSING_RECENCY


def self_sort_key(node: "Node") -> SortKey:
    issue = node.issue
    bucket = status_bucket(node)
    if bucket == BUCKET_IN_PROGRESS:
        recency = _recency(issue.updated_at, issue.created_at)
    elif bucket == BUCKET_CLOSED:
        recency = _recency(issue.closed_at, issue.updated_at, issue.created_at)
    else:
        recency = _recency(issue.created_at)
    return SortKey(bucket, int(issue.priority), recency)


def node_order(node: "Node") -> Tuple[SortKey, str]:
    return (node.sort_key, node.id)


def sort_nodes(nodes: List["Node"]) -> None:
    nodes.sort(key=node_order)


def insert_position(nodes: List["Node"], node: "Node") -> int:
    """Binary search for the index keeping `nodes` ordered by node_order."""
    return bisect_left(nodes, node_order(node), key=node_order)


def insert_sorted(nodes: List["Node"], node: "Node") -> int:
    pos = insert_position(nodes, node)
    nodes.insert(pos, node)
    return pos


__all__ = [
    "BUCKET_IN_PROGRESS",
    "BUCKET_READY",
    "BUCKET_OPEN",
    "BUCKET_CLOSED",
    "SortKey",
    "status_bucket",
    "self_sort_key",
    "node_order",
    "sort_nodes",
    "insert_position",
    "insert_sorted",
]
