"""Capture and replay outline state across graph replacements.

Node objects do not survive a rebuild, so everything is keyed by issue id.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from core.desktop.devtools.application.tree_view import Focus, InstanceKey, TreeView
from core.desktop.devtools.application.view_filter import ViewMode


@dataclass(frozen=True)
class ViewSnapshot:
    selected_id: str = ""
    selected_parent_id: str = ""
    cursor: int = 0
    scroll_offset: int = 0
    detail_scroll: int = 0
    expanded_ids: FrozenSet[str] = frozenset()
    expanded_instances: Dict[InstanceKey, bool] = field(default_factory=dict)
    filter_text: str = ""
    view_mode: ViewMode = ViewMode.ALL
    filter_collapsed: FrozenSet[str] = frozenset()
    filter_forced_expanded: FrozenSet[str] = frozenset()
    focus: Focus = Focus.TREE


def capture(view: TreeView) -> ViewSnapshot:
    row = view.selected_row
    return ViewSnapshot(
        selected_id=row.node.id if row else "",
        selected_parent_id=row.parent_id if row else "",
        cursor=view.cursor,
        scroll_offset=view.scroll_offset,
        detail_scroll=view.detail_scroll if view.show_details else 0,
        expanded_ids=frozenset(view.expanded_ids()),
        expanded_instances=dict(view.expanded_instances),
        filter_text=view.filter_text,
        view_mode=view.view_mode,
        filter_collapsed=frozenset(view.filter_collapsed),
        filter_forced_expanded=frozenset(view.filter_forced_expanded),
        focus=view.focus,
    )


def restore(view: TreeView, snapshot: ViewSnapshot) -> None:
    """Replay `snapshot` onto the (possibly new) roots held by `view`."""
    view.apply_expanded_ids(set(snapshot.expanded_ids))
    view.expanded_instances = dict(snapshot.expanded_instances)
    view.apply_filter_text(snapshot.filter_text)
    view.filter_collapsed = set(snapshot.filter_collapsed)
    view.filter_forced_expanded = set(snapshot.filter_forced_expanded)
    view.view_mode = snapshot.view_mode
    view.recalc_visible_rows()

    view.scroll_offset = snapshot.scroll_offset
    view.relocate_cursor(snapshot.selected_id, snapshot.selected_parent_id, snapshot.cursor)

    view.focus = snapshot.focus if view.show_details else Focus.TREE
    if view.show_details:
        view.detail_scroll = snapshot.detail_scroll


__all__ = ["ViewSnapshot", "capture", "restore"]
