"""Visible-row materialization over the issue DAG.

`TreeView` owns everything the outline needs between rebuilds: the current
roots, filter text and view mode, per-occurrence expansion overrides, the
filter-session override sets, cursor and scroll offsets. Every mutator leaves
`rows` recomputed and the cursor inside ``[0, len(rows) - 1]``.

Expansion rules:
  * unfiltered: a node with several parents consults the per-occurrence map
    keyed by ``(parent_id, node_id)`` first, then the node's own ``expanded``;
  * filtered: ``filter_collapsed`` wins, then ``filter_forced_expanded``, then
    "has a matching descendant", then the node's own ``expanded``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from core.node import Node, TreeRow, walk_nodes
from core.desktop.devtools.application.view_filter import (
    FilterEval,
    ViewMode,
    evaluate,
    is_filter_active,
)

InstanceKey = Tuple[str, str]

SCROLL_MARGIN = 1


class Focus(Enum):
    TREE = "tree"
    DETAILS = "details"


@dataclass(frozen=True)
class Stats:
    total: int = 0
    in_progress: int = 0
    ready: int = 0
    blocked: int = 0
    closed: int = 0


class TreeView:
    def __init__(self, roots: Optional[List[Node]] = None, viewport_height: int = 20):
        self.roots: List[Node] = list(roots or [])
        self.rows: List[TreeRow] = []
        self.cursor = 0
        self.scroll_offset = 0
        self.viewport_height = viewport_height
        self.filter_text = ""
        self.view_mode = ViewMode.ALL
        self.expanded_instances: Dict[InstanceKey, bool] = {}
        self.filter_collapsed: Set[str] = set()
        self.filter_forced_expanded: Set[str] = set()
        self.filter_session = 0
        self.focus = Focus.TREE
        self.show_details = False
        self.detail_scroll = 0
        self.detail_issue_id = ""
        self._filter_eval: Dict[str, FilterEval] = {}
        self.recalc_visible_rows()

    # ------------------------------------------------------------------ rows

    @property
    def filter_active(self) -> bool:
        return is_filter_active(self.filter_text, self.view_mode)

    def recalc_visible_rows(self) -> List[TreeRow]:
        filtered = self.filter_active
        self._filter_eval = evaluate(self.roots, self.filter_text, self.view_mode) if filtered else {}
        rows: List[TreeRow] = []
        stack: List[Tuple[Node, Optional[Node], int]] = [(node, None, 0) for node in reversed(self.roots)]
        while stack:
            node, parent, depth = stack.pop()
            if filtered:
                result = self._filter_eval.get(node.id)
                if result is None or not result.included:
                    continue
            row = TreeRow(node, parent, depth)
            rows.append(row)
            if self.row_expanded(row):
                stack.extend((child, node, depth + 1) for child in reversed(node.children))
        self.rows = rows
        self.clamp_cursor()
        return rows

    def row_expanded(self, row: TreeRow) -> bool:
        node = row.node
        if not node.children:
            return False
        if self.filter_active:
            return self._expand_filtered(node)
        if node.has_multiple_parents:
            override = self.expanded_instances.get(row.instance_key)
            if override is not None:
                return override
        return node.expanded

    def _expand_filtered(self, node: Node) -> bool:
        if node.id in self.filter_collapsed:
            return False
        if node.id in self.filter_forced_expanded:
            return True
        result = self._filter_eval.get(node.id)
        if result is not None and result.has_matching_descendant:
            return True
        return node.expanded

    def filter_eval(self, node_id: str) -> Optional[FilterEval]:
        return self._filter_eval.get(node_id)

    # ---------------------------------------------------------------- cursor

    def clamp_cursor(self) -> None:
        if not self.rows:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor, len(self.rows) - 1))

    @property
    def selected_row(self) -> Optional[TreeRow]:
        if 0 <= self.cursor < len(self.rows):
            return self.rows[self.cursor]
        return None

    @property
    def selected_node(self) -> Optional[Node]:
        row = self.selected_row
        return row.node if row else None

    def move_cursor(self, delta: int) -> None:
        if not self.rows:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor + delta, len(self.rows) - 1))
        self.ensure_cursor_visible()

    def move_to_top(self) -> None:
        self.cursor = 0
        self.ensure_cursor_visible()

    def move_to_bottom(self) -> None:
        self.cursor = max(0, len(self.rows) - 1)
        self.ensure_cursor_visible()

    def ensure_cursor_visible(self, height: Optional[int] = None) -> None:
        if height is not None:
            self.viewport_height = height
        height = max(1, self.viewport_height)
        max_top = max(0, len(self.rows) - height)
        margin = min(SCROLL_MARGIN, height // 2)
        top = max(0, min(self.scroll_offset, max_top))
        if self.cursor < top + margin:
            top = self.cursor - margin
        if self.cursor > top + height - 1 - margin:
            top = self.cursor - (height - 1 - margin)
        self.scroll_offset = max(0, min(top, max_top))

    def find_row(self, node_id: str, parent_id: Optional[str] = None) -> int:
        """Index of the row for `node_id` (under `parent_id` if given), -1 if absent."""
        for idx, row in enumerate(self.rows):
            if row.node.id != node_id:
                continue
            if parent_id is None or row.parent_id == parent_id:
                return idx
        return -1

    def relocate_cursor(self, node_id: str, parent_id: str = "", fallback_index: int = 0) -> None:
        """Exact occurrence first, then any row with the id, else the clamped index."""
        idx = -1
        if node_id:
            idx = self.find_row(node_id, parent_id)
            if idx < 0:
                idx = self.find_row(node_id)
        self.cursor = idx if idx >= 0 else fallback_index
        self.clamp_cursor()
        self.ensure_cursor_visible()

    def select_node(self, node_id: str, parent_id: Optional[str] = None) -> bool:
        idx = self.find_row(node_id, parent_id)
        if idx < 0 and parent_id is not None:
            idx = self.find_row(node_id)
        if idx < 0:
            return False
        self.cursor = idx
        self.ensure_cursor_visible()
        return True

    def parent_row_index(self, index: Optional[int] = None) -> int:
        """Row index of the occurrence that owns the row at `index`, -1 for roots."""
        index = self.cursor if index is None else index
        if not 0 <= index < len(self.rows):
            return -1
        depth = self.rows[index].depth
        for idx in range(index - 1, -1, -1):
            if self.rows[idx].depth < depth:
                return idx
        return -1

    def _remember_selection(self) -> Tuple[str, str, int]:
        row = self.selected_row
        if row is None:
            return "", "", self.cursor
        return row.node.id, row.parent_id, self.cursor

    # ------------------------------------------------------------- expansion

    def expand_row(self, row: TreeRow) -> None:
        node = row.node
        if node.has_multiple_parents:
            self.expanded_instances[row.instance_key] = True
        else:
            node.expanded = True
        if self.filter_active:
            self.filter_collapsed.discard(node.id)
            self.filter_forced_expanded.add(node.id)

    def collapse_row(self, row: TreeRow) -> None:
        node = row.node
        if node.has_multiple_parents:
            self.expanded_instances[row.instance_key] = False
        else:
            node.expanded = False
        if self.filter_active:
            self.filter_collapsed.add(node.id)
            self.filter_forced_expanded.discard(node.id)

    def toggle_row(self, index: Optional[int] = None) -> bool:
        """Flip the expansion of one occurrence; returns the new state."""
        index = self.cursor if index is None else index
        if not 0 <= index < len(self.rows):
            return False
        row = self.rows[index]
        if not row.node.children:
            return False
        expanded = not self.row_expanded(row)
        if expanded:
            self.expand_row(row)
        else:
            self.collapse_row(row)
        self._recalc_keeping_selection()
        return expanded

    def expand_selected(self) -> bool:
        row = self.selected_row
        if row is None or not row.node.children or self.row_expanded(row):
            return False
        self.expand_row(row)
        self._recalc_keeping_selection()
        return True

    def collapse_selected(self) -> bool:
        """Collapse the selected occurrence, or jump to its parent row."""
        row = self.selected_row
        if row is None:
            return False
        if row.node.children and self.row_expanded(row):
            self.collapse_row(row)
            self._recalc_keeping_selection()
            return True
        parent_idx = self.parent_row_index()
        if parent_idx >= 0:
            self.cursor = parent_idx
            self.ensure_cursor_visible()
        return False

    def _recalc_keeping_selection(self) -> None:
        node_id, parent_id, index = self._remember_selection()
        self.recalc_visible_rows()
        self.relocate_cursor(node_id, parent_id, index)

    # --------------------------------------------------------------- filters

    def apply_filter_text(self, value: str) -> None:
        """Set the filter text without recomputing rows.

        Starting a filter or clearing it opens a new filter session: the
        session-scoped override sets are emptied. Switching the view mode to
        or from ``ALL`` with no text does the same in `set_view_mode`.
        """
        value = value or ""
        if value == self.filter_text:
            return
        prev_empty = not self.filter_text
        self.filter_text = value
        if not value or prev_empty:
            self.filter_collapsed = set()
            self.filter_forced_expanded = set()
            self.filter_session += 1

    def set_filter_text(self, value: str) -> None:
        if (value or "") == self.filter_text:
            return
        node_id, parent_id, index = self._remember_selection()
        self.apply_filter_text(value)
        self.recalc_visible_rows()
        self.relocate_cursor(node_id, parent_id, index)

    def clear_filter(self) -> bool:
        """Drop the text filter, keeping what the user opened and selected visible."""
        if not self.filter_text:
            return False
        node_id, parent_id, index = self._remember_selection()
        for forced_id in self.filter_forced_expanded:
            node = self.find_node(forced_id)
            if node is not None:
                node.expanded = True
        self._expand_ancestors(self.cursor)
        self.apply_filter_text("")
        self.recalc_visible_rows()
        self.relocate_cursor(node_id, parent_id, index)
        return True

    def _expand_ancestors(self, index: int) -> None:
        """Expand every owning occurrence above the row at `index` in the unfiltered sense."""
        while True:
            index = self.parent_row_index(index)
            if index < 0:
                return
            row = self.rows[index]
            if row.node.has_multiple_parents:
                self.expanded_instances[row.instance_key] = True
            else:
                row.node.expanded = True

    def reveal(self, node: Node) -> None:
        """Expand one chain of occurrences from a root down to `node` so its children show."""
        current: Optional[Node] = node
        while current is not None:
            owner = current.parents[0] if current.parents else None
            if current.has_multiple_parents:
                self.expanded_instances[(owner.id, current.id)] = True
            else:
                current.expanded = True
            if self.filter_active:
                self.filter_collapsed.discard(current.id)
                self.filter_forced_expanded.add(current.id)
            current = owner

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode is self.view_mode:
            return
        node_id, parent_id, index = self._remember_selection()
        was_active = self.filter_active
        self.view_mode = mode
        if self.filter_active != was_active:
            self.filter_collapsed = set()
            self.filter_forced_expanded = set()
            self.filter_session += 1
        self.recalc_visible_rows()
        self.relocate_cursor(node_id, parent_id, index)

    def cycle_view_mode(self) -> ViewMode:
        self.set_view_mode(self.view_mode.next())
        return self.view_mode

    # ----------------------------------------------------------------- nodes

    def find_node(self, node_id: str) -> Optional[Node]:
        for node in walk_nodes(self.roots):
            if node.id == node_id:
                return node
        return None

    def expanded_ids(self) -> Set[str]:
        return {node.id for node in walk_nodes(self.roots) if node.expanded}

    def apply_expanded_ids(self, expanded: Set[str]) -> None:
        for node in walk_nodes(self.roots):
            node.expanded = node.id in expanded

    def stats(self) -> Stats:
        """Counts over visible rows, each node counted once."""
        seen: Set[str] = set()
        counts = {"in_progress": 0, "ready": 0, "blocked": 0, "closed": 0}
        for row in self.rows:
            node = row.node
            if node.id in seen:
                continue
            seen.add(node.id)
            issue = node.issue
            if issue.is_in_progress:
                counts["in_progress"] += 1
            elif issue.is_closed:
                counts["closed"] += 1
            elif node.is_blocked or issue.status == "blocked":
                counts["blocked"] += 1
            else:
                counts["ready"] += 1
        return Stats(total=len(seen), **counts)


__all__ = ["TreeView", "Stats", "Focus", "InstanceKey", "SCROLL_MARGIN"]
