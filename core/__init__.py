from .status import Status
from .issue import (
    Issue,
    Comment,
    Dependency,
    Dependent,
    DEP_PARENT_CHILD,
    DEP_BLOCKS,
    DEP_RELATED,
    DEP_DISCOVERED_FROM,
)
from .node import Node, TreeRow, walk_nodes, index_nodes
from .sort_key import SortKey, self_sort_key, node_order, sort_nodes, insert_position
from .errors import (
    ErrorCode,
    BeadtreeError,
    GraphBuildError,
    CyclicDependencyError,
    DanglingReferenceError,
    InvalidIssueDataError,
    SourceError,
    CliError,
    IssueLinkError,
    RefreshTimeoutError,
    InjectionError,
    ConfigError,
)
from .dependency_validator import (
    DependencyError,
    detect_cycle,
    find_dangling_references,
)
from .graph_builder import GraphBuilder, build_graph

__all__ = [
    "Status",
    # Issues
    "Issue",
    "Comment",
    "Dependency",
    "Dependent",
    "DEP_PARENT_CHILD",
    "DEP_BLOCKS",
    "DEP_RELATED",
    "DEP_DISCOVERED_FROM",
    # Graph
    "Node",
    "TreeRow",
    "walk_nodes",
    "index_nodes",
    "SortKey",
    "self_sort_key",
    "node_order",
    "sort_nodes",
    "insert_position",
    "GraphBuilder",
    "build_graph",
    # Errors
    "ErrorCode",
    "BeadtreeError",
    "GraphBuildError",
    "CyclicDependencyError",
    "DanglingReferenceError",
    "InvalidIssueDataError",
    "SourceError",
    "CliError",
    "IssueLinkError",
    "RefreshTimeoutError",
    "InjectionError",
    "ConfigError",
    # Dependencies
    "DependencyError",
    "detect_cycle",
    "find_dangling_references",
]
