from core import Dependency, Issue, build_graph
from core.desktop.devtools.application.tree_view import Focus, TreeView
from core.desktop.devtools.application.view_filter import ViewMode
from core.desktop.devtools.application.view_snapshot import capture, restore


def _issues():
    return [
        Issue(id="e1", title="Epic one"),
        Issue(id="e2", title="Epic two"),
        Issue(id="t", title="Shared task", dependencies=[Dependency("e1", "parent-child"), Dependency("e2", "parent-child")]),
        Issue(id="s", title="Subtask alpha", status="in_progress", dependencies=[Dependency("t", "parent-child")]),
        Issue(id="x", title="Loose end"),
    ]


def _rows(view):
    return [(row.parent_id, row.node.id) for row in view.rows]


def test_capture_restore_round_trip_on_rebuilt_graph():
    view = TreeView(build_graph(_issues()))
    view.cursor = 1
    view.collapse_selected()
    view.move_cursor(2)
    view.show_details = True
    view.focus = Focus.DETAILS
    view.detail_scroll = 3
    before_rows = _rows(view)
    before_row = view.selected_row
    snap = capture(view)

    view.roots = build_graph(_issues())
    restore(view, snap)

    assert _rows(view) == before_rows
    assert view.selected_row.instance_key == before_row.instance_key
    assert view.focus is Focus.DETAILS
    assert view.detail_scroll == 3


def test_restore_carries_filter_state():
    view = TreeView(build_graph(_issues()))
    view.set_filter_text("alpha")
    view.set_view_mode(ViewMode.ACTIVE)
    view.cursor = 1
    view.collapse_selected()
    snap = capture(view)
    assert snap.filter_collapsed == frozenset({"t"})

    view.roots = build_graph(_issues())
    restore(view, snap)
    assert view.filter_text == "alpha"
    assert view.view_mode is ViewMode.ACTIVE
    assert view.filter_collapsed == {"t"}
    assert [r.node.id for r in view.rows] == ["e1", "t", "e2", "t"]


def test_restore_falls_back_to_index_when_selection_vanishes():
    view = TreeView(build_graph(_issues()))
    view.select_node("x")
    index = view.cursor
    snap = capture(view)

    view.roots = build_graph([i for i in _issues() if i.id != "x"])
    restore(view, snap)
    assert view.cursor == min(index, len(view.rows) - 1)


def test_focus_resets_to_tree_without_detail_pane():
    view = TreeView(build_graph(_issues()))
    view.focus = Focus.DETAILS
    snap = capture(view)
    restore(view, snap)
    assert view.focus is Focus.TREE
