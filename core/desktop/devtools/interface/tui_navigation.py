"""Navigation helpers for BeadTreeTUI to keep the app class slim."""

from core.desktop.devtools.application.tree_view import Focus


def move_vertical_selection(tui, delta: int) -> None:
    """
    Move the cursor by `delta` rows, clamping to the visible rows.

    With the detail pane focused the pane scrolls instead.
    """
    view = tui.view
    if view.show_details and view.focus is Focus.DETAILS:
        view.detail_scroll = max(0, view.detail_scroll + delta)
    else:
        view.move_cursor(delta)
        sync_detail_target(tui)
    tui.force_render()


def sync_detail_target(tui) -> None:
    """Point the detail pane at the selected issue and reset its scroll."""
    view = tui.view
    node = view.selected_node
    node_id = node.id if node is not None else ""
    if node_id != view.detail_issue_id:
        view.detail_issue_id = node_id
        view.detail_scroll = 0


__all__ = ["move_vertical_selection", "sync_detail_target"]
