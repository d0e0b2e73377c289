"""Rendering helpers for BeadTreeTUI to keep the class slim."""

from typing import List, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText

from core import Node, Status, TreeRow
from core.desktop.devtools.application.tree_view import Focus

Fragments = List[Tuple[str, str]]

MARKER_EXPANDED = "▾"
MARKER_COLLAPSED = "▸"
MULTI_PARENT_MARK = "⧉"
INDENT = "  "


def _merge_style(selected_style: Optional[str], fragment_style: str) -> str:
    if not selected_style:
        return fragment_style
    return f"{selected_style} {fragment_style}".strip()


def node_status(node: Node) -> Status:
    """Status shown for a node; open issues with open blockers render as blocked."""
    status = Status.from_string(node.status)
    if status is Status.OPEN and node.is_blocked:
        return Status.BLOCKED
    return status


def tree_width(tui) -> int:
    width = tui.get_terminal_width()
    if getattr(tui.view, "show_details", False):
        return max(30, (width * 11) // 20)
    return width


def detail_width(tui) -> int:
    return max(20, tui.get_terminal_width() - tree_width(tui) - 1)


def _row_fragments(tui, row: TreeRow, width: int, selected: bool) -> Fragments:
    view = tui.view
    node = row.node
    sel = "class:selected" if selected else None
    status = node_status(node)
    if node.children:
        marker = MARKER_EXPANDED if view.row_expanded(row) else MARKER_COLLAPSED
    else:
        marker = " "
    indent = INDENT * row.depth
    head = f"{indent}{marker} "
    id_text = f"{node.id} "
    prio_text = f"P{node.issue.priority} "
    tail = f" {MULTI_PARENT_MARK}" if row.has_multiple_parents else ""
    used = tui._display_width(head) + 2 + tui._display_width(id_text) + len(prio_text) + tui._display_width(tail)
    title = tui._truncate_display(node.title, max(0, width - used))
    title_style = "class:text.dimmer" if status is Status.CLOSED else "class:text"

    parts: Fragments = [
        (_merge_style(sel, "class:tree.guide"), head),
        (_merge_style(sel, f"class:{status.style}"), f"{status.glyph} "),
        (_merge_style(sel, "class:issue.id"), id_text),
        (_merge_style(sel, "class:priority"), prio_text),
        (_merge_style(sel, title_style), title),
    ]
    if tail:
        parts.append((_merge_style(sel, "class:text.dim"), tail))
    if selected:
        line_width = used + tui._display_width(title)
        if line_width < width:
            parts.append((sel, " " * (width - line_width)))
    return parts


def render_tree_text(tui) -> FormattedText:
    view = tui.view
    height = max(1, tui.tree_height())
    view.ensure_cursor_visible(height)
    if not view.rows:
        key = "EMPTY_FILTERED" if view.filter_active else "EMPTY_TREE"
        return FormattedText([("class:text.dim", tui._t(key))])

    width = tree_width(tui)
    focused = view.focus is Focus.TREE or not view.show_details
    start = view.scroll_offset
    end = min(len(view.rows), start + height)
    parts: Fragments = []
    for idx in range(start, end):
        if idx > start:
            parts.append(("", "\n"))
        selected = idx == view.cursor and focused
        parts.extend(_row_fragments(tui, view.rows[idx], width, selected))
        if idx == view.cursor and not focused:
            parts.append(("class:text.dim", " ◂"))
    return FormattedText(parts)


def detail_node(tui) -> Optional[Node]:
    view = tui.view
    if view.detail_issue_id:
        node = view.find_node(view.detail_issue_id)
        if node is not None:
            return node
    return view.selected_node


def _field_line(tui, label_key: str, value: str) -> Fragments:
    return [
        ("class:text.dim", f"{tui._t(label_key)}: "),
        ("class:text", value or "—"),
        ("", "\n"),
    ]


def _edge_line(tui, label_key: str, nodes: List[Node]) -> Fragments:
    if not nodes:
        return []
    ids = ", ".join(n.id for n in nodes)
    return _field_line(tui, label_key, ids)


def _section(tui, label_key: str, text: str, width: int) -> Fragments:
    if not (text or "").strip():
        return []
    parts: Fragments = [("", "\n"), ("class:header", tui._t(label_key)), ("", "\n")]
    for line in tui._wrap_display(text.strip(), width):
        parts.append(("class:text", line))
        parts.append(("", "\n"))
    return parts


def build_detail_lines(tui, node: Node, width: int) -> Fragments:
    issue = node.issue
    status = node_status(node)
    parts: Fragments = []
    for line in tui._wrap_display(f"{issue.id} {issue.title}", width):
        parts.append(("class:header", line))
        parts.append(("", "\n"))
    parts.append(("class:border", "─" * width))
    parts.append(("", "\n"))
    parts.extend(
        [
            ("class:text.dim", f"{tui._t('DETAIL_STATUS')}: "),
            (f"class:{status.style}", f"{status.glyph} {issue.status}"),
            ("", "\n"),
        ]
    )
    parts.extend(_field_line(tui, "DETAIL_PRIORITY", f"P{issue.priority}"))
    parts.extend(_field_line(tui, "DETAIL_TYPE", issue.issue_type))
    if issue.assignee:
        parts.extend(_field_line(tui, "DETAIL_ASSIGNEE", issue.assignee))
    if issue.labels:
        parts.extend(_field_line(tui, "DETAIL_LABELS", ", ".join(issue.labels)))
    parts.extend(_edge_line(tui, "DETAIL_PARENTS", node.parents))
    parts.extend(_edge_line(tui, "DETAIL_BLOCKED_BY", node.blocked_by))
    parts.extend(_edge_line(tui, "DETAIL_BLOCKS", node.blocks))
    parts.extend(_edge_line(tui, "DETAIL_RELATED", node.related))

    parts.extend(_section(tui, "DETAIL_DESCRIPTION", issue.description, width))
    parts.extend(_section(tui, "DETAIL_DESIGN", issue.design, width))
    parts.extend(_section(tui, "DETAIL_ACCEPTANCE", issue.acceptance_criteria, width))
    parts.extend(_section(tui, "DETAIL_NOTES", issue.notes, width))

    parts.append(("", "\n"))
    parts.append(("class:header", tui._t("DETAIL_COMMENTS")))
    parts.append(("", "\n"))
    if node.comment_error:
        parts.append(("class:error", tui._t("DETAIL_COMMENTS_ERROR", error=node.comment_error)))
        parts.append(("", "\n"))
    elif not node.comments_loaded and not issue.comments:
        parts.append(("class:text.dim", tui._t("DETAIL_COMMENTS_LOADING")))
        parts.append(("", "\n"))
    elif not issue.comments:
        parts.append(("class:text.dim", tui._t("DETAIL_NO_COMMENTS")))
        parts.append(("", "\n"))
    for comment in issue.comments:
        stamp = (comment.created_at or "")[:16].replace("T", " ")
        parts.append(("class:issue.id", f"{comment.author or '?'}"))
        if stamp:
            parts.append(("class:text.dimmer", f"  {stamp}"))
        parts.append(("", "\n"))
        for line in tui._wrap_display(comment.text, max(1, width - 2)):
            parts.append(("class:text", f"  {line}"))
            parts.append(("", "\n"))
    return parts


def _split_lines(fragments: Fragments) -> List[Fragments]:
    lines: List[Fragments] = [[]]
    for style, text in fragments:
        chunks = text.split("\n")
        for idx, chunk in enumerate(chunks):
            if idx > 0:
                lines.append([])
            if chunk:
                lines[-1].append((style, chunk))
    if not lines[-1]:
        lines.pop()
    return lines


def render_detail_text(tui) -> FormattedText:
    node = detail_node(tui)
    if node is None:
        return FormattedText([("class:text.dim", tui._t("DETAIL_EMPTY"))])
    view = tui.view
    width = max(10, detail_width(tui) - 2)
    lines = _split_lines(build_detail_lines(tui, node, width))
    height = max(1, tui.tree_height())
    max_scroll = max(0, len(lines) - height)
    view.detail_scroll = max(0, min(view.detail_scroll, max_scroll))
    visible = lines[view.detail_scroll: view.detail_scroll + height]
    parts: Fragments = []
    for idx, line in enumerate(visible):
        if idx:
            parts.append(("", "\n"))
        parts.extend(line)
    return FormattedText(parts)


__all__ = [
    "node_status",
    "tree_width",
    "detail_width",
    "render_tree_text",
    "detail_node",
    "build_detail_lines",
    "render_detail_text",
]
