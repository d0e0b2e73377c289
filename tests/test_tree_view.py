from core import Dependency, Issue, build_graph
from core.desktop.devtools.application.tree_view import Stats, TreeView
from core.desktop.devtools.application.view_filter import ViewMode


def _issue(issue_id, title, status="open", parents=(), blocks_on=()):
    deps = [Dependency(p, "parent-child") for p in parents]
    deps += [Dependency(b, "blocks") for b in blocks_on]
    return Issue(id=issue_id, title=title, status=status, created_at="2025-01-01T00:00:00Z", dependencies=deps)


def _shared_view(height=20):
    """e1 and e2 both own t; t owns s (in progress, so everything opens)."""
    roots = build_graph(
        [
            _issue("e1", "Epic one"),
            _issue("e2", "Epic two"),
            _issue("t", "Shared task", parents=["e1", "e2"]),
            _issue("s", "Subtask alpha", status="in_progress", parents=["t"]),
        ]
    )
    return TreeView(roots, viewport_height=height)


def _chain_view():
    roots = build_graph(
        [
            _issue("p", "Parent"),
            _issue("c", "Child", parents=["p"]),
            _issue("g", "Grandchild needle", parents=["c"]),
            _issue("q", "Other root"),
        ]
    )
    return TreeView(roots)


def _ids(view):
    return [(row.parent_id, row.node.id, row.depth) for row in view.rows]


def test_shared_node_yields_one_row_per_expanded_parent():
    view = _shared_view()
    assert _ids(view) == [
        ("", "e1", 0),
        ("e1", "t", 1),
        ("t", "s", 2),
        ("", "e2", 0),
        ("e2", "t", 1),
        ("t", "s", 2),
    ]


def test_collapsing_one_occurrence_leaves_the_other_open():
    view = _shared_view()
    view.cursor = 1
    assert view.collapse_selected()
    assert len(view.rows) == 5
    assert _ids(view)[3:] == [("e2", "t", 1), ("t", "s", 2)]
    assert view.selected_row.instance_key == ("e1", "t")
    assert view.rows[1].node.expanded


def test_expanding_occurrence_again_restores_rows():
    view = _shared_view()
    view.cursor = 1
    view.collapse_selected()
    assert view.expand_selected()
    assert len(view.rows) == 6


def test_toggle_twice_is_identity():
    view = _shared_view()
    before = _ids(view)
    view.toggle_row(0)
    assert len(view.rows) == 4
    view.toggle_row(0)
    assert _ids(view) == before


def test_collapse_on_leaf_jumps_to_parent_row():
    view = _shared_view()
    view.cursor = 5
    assert not view.collapse_selected()
    assert view.cursor == 4


def test_filter_keeps_ancestors_of_matches():
    view = _chain_view()
    assert [r.node.id for r in view.rows] == ["p", "q"]
    view.set_filter_text("needle")
    assert [r.node.id for r in view.rows] == ["p", "c", "g"]


def test_filter_matches_id_without_prefix():
    roots = build_graph([_issue("bd-42", "Anything"), _issue("bd-7", "Other")])
    view = TreeView(roots)
    view.set_filter_text("42")
    assert [r.node.id for r in view.rows] == ["bd-42"]


def test_filter_is_idempotent():
    view = _shared_view()
    view.set_filter_text("alpha")
    first = _ids(view)
    view.set_filter_text("alpha")
    view.recalc_visible_rows()
    assert _ids(view) == first


def test_filtered_collapse_wins_over_auto_expand():
    view = _shared_view()
    view.set_filter_text("alpha")
    assert len(view.rows) == 6
    view.cursor = 1
    view.collapse_selected()
    assert "t" in view.filter_collapsed
    assert [r.node.id for r in view.rows] == ["e1", "t", "e2", "t"]


def test_filtered_forced_expansion_survives_without_matching_descendant():
    view = _chain_view()
    view.set_filter_text("p")
    assert [r.node.id for r in view.rows] == ["p"]
    assert view.expand_selected()
    assert "p" in view.filter_forced_expanded
    assert view.row_expanded(view.rows[0])
    view.set_filter_text("pa")
    assert view.row_expanded(view.rows[0])


def test_new_filter_session_clears_overrides():
    view = _shared_view()
    view.set_filter_text("alpha")
    session = view.filter_session
    view.cursor = 1
    view.collapse_selected()
    view.set_filter_text("alph")
    assert view.filter_collapsed == {"t"}
    view.set_filter_text("")
    assert view.filter_collapsed == set()
    assert view.filter_session == session + 1


def test_clear_filter_keeps_selection_visible():
    view = _chain_view()
    view.set_filter_text("needle")
    view.select_node("g")
    assert view.clear_filter()
    assert view.filter_text == ""
    assert view.selected_node.id == "g"
    assert [r.node.id for r in view.rows] == ["p", "c", "g", "q"]


def test_clear_filter_without_filter_is_noop():
    view = _chain_view()
    assert not view.clear_filter()


def test_ready_view_mode_hides_blocked_and_closed():
    roots = build_graph(
        [
            _issue("a", "Ready one"),
            _issue("b", "Blocked", blocks_on=["a"]),
            _issue("c", "Done", status="closed"),
        ]
    )
    view = TreeView(roots)
    view.set_view_mode(ViewMode.READY)
    assert [r.node.id for r in view.rows] == ["a"]
    view.set_view_mode(ViewMode.ACTIVE)
    assert sorted(r.node.id for r in view.rows) == ["a", "b"]


def test_cycle_view_mode_wraps():
    view = _chain_view()
    assert view.cycle_view_mode() is ViewMode.ACTIVE
    assert view.cycle_view_mode() is ViewMode.READY
    assert view.cycle_view_mode() is ViewMode.ALL


def test_cursor_is_clamped_and_follows_into_view():
    view = _shared_view(height=2)
    view.move_cursor(100)
    assert view.cursor == len(view.rows) - 1
    assert view.scroll_offset == len(view.rows) - 2
    view.move_cursor(-100)
    assert view.cursor == 0
    assert view.scroll_offset == 0


def test_cursor_on_empty_view_stays_zero():
    view = TreeView([])
    view.move_cursor(3)
    assert view.cursor == 0
    assert view.selected_node is None


def test_filter_keeps_selected_issue():
    view = _shared_view()
    view.cursor = 2
    view.set_filter_text("alpha")
    assert view.selected_node.id == "s"


def test_stats_count_each_node_once():
    view = _shared_view()
    assert view.stats() == Stats(total=4, in_progress=1, ready=3, blocked=0, closed=0)


def test_expanded_ids_round_trip():
    view = _shared_view()
    expanded = view.expanded_ids()
    assert expanded == {"e1", "e2", "t"}
    view.apply_expanded_ids(set())
    view.recalc_visible_rows()
    assert len(view.rows) == 2
    view.apply_expanded_ids(expanded)
    view.recalc_visible_rows()
    assert len(view.rows) == 6


def _mode_view():
    return TreeView(build_graph([_issue("r", "Root"), _issue("c", "Child", parents=["r"])]))


def test_collapse_wins_over_view_mode_auto_expand():
    view = _mode_view()
    assert [r.node.id for r in view.rows] == ["r"]
    view.set_view_mode(ViewMode.ACTIVE)
    assert [r.node.id for r in view.rows] == ["r", "c"]

    assert view.toggle_row(0) is False
    assert [r.node.id for r in view.rows] == ["r"]
    assert view.filter_collapsed == {"r"}

    assert view.toggle_row(0) is True
    assert [r.node.id for r in view.rows] == ["r", "c"]
    assert view.filter_forced_expanded == {"r"}


def test_switching_between_filtered_modes_keeps_the_session():
    view = _mode_view()
    view.set_view_mode(ViewMode.ACTIVE)
    view.collapse_selected()
    session = view.filter_session
    view.set_view_mode(ViewMode.READY)
    assert view.filter_session == session
    assert [r.node.id for r in view.rows] == ["r"]


def test_returning_to_all_mode_starts_a_new_session():
    view = _mode_view()
    view.set_view_mode(ViewMode.ACTIVE)
    view.collapse_selected()
    view.set_view_mode(ViewMode.ALL)
    assert view.filter_collapsed == set()
    assert [r.node.id for r in view.rows] == ["r"]

    view.set_view_mode(ViewMode.ACTIVE)
    assert [r.node.id for r in view.rows] == ["r", "c"]


def test_reveal_opens_one_occurrence_chain():
    view = _shared_view()
    view.collapse_row(view.rows[1])
    view.find_node("e1").expanded = False
    view.recalc_visible_rows()

    view.reveal(view.find_node("t"))
    view.recalc_visible_rows()
    assert ("e1", "t", 1) in _ids(view)
    assert ("t", "s", 2) in _ids(view)
    assert view.expanded_instances[("e1", "t")] is True


def test_deep_chain_materializes_without_recursion_limits():
    depth = 1500
    issues = [_issue("n0", "Top")]
    issues += [_issue(f"n{i}", f"Level {i}", parents=[f"n{i - 1}"]) for i in range(1, depth)]
    issues[-1] = _issue(f"n{depth - 1}", "Bottom needle", status="in_progress", parents=[f"n{depth - 2}"])
    view = TreeView(build_graph(issues))
    assert len(view.rows) == depth
    assert view.rows[-1].depth == depth - 1

    view.set_filter_text("needle")
    assert len(view.rows) == depth
