#!/usr/bin/env python3
"""TUI application - BeadTreeTUI class and cmd_tui command."""

import logging
import re
import os
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, VSplit, Window
from prompt_toolkit.layout.containers import ConditionalContainer
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import TextArea

from application.ports import IssueSource, IssueWriter
from config import Settings
from core import GraphBuilder, Node, walk_nodes
from core.desktop.devtools.application.comment_loader import CommentLoader
from core.desktop.devtools.application.error_state import ErrorState
from core.desktop.devtools.application.messages import Inbox, IssueCreated, MutationDone
from core.desktop.devtools.application.refresh import RefreshReconciler
from core.desktop.devtools.application.tree_inject import FastInjector
from core.desktop.devtools.application.tree_view import Focus, TreeView
from core.desktop.devtools.interface.i18n import translate, translate_count
from core.desktop.devtools.interface.tui_footer import build_footer_text
from core.desktop.devtools.interface.tui_navigation import move_vertical_selection, sync_detail_target
from core.desktop.devtools.interface.tui_render import render_detail_text, render_tree_text
from core.desktop.devtools.interface.tui_state import maybe_reload as _maybe_reload_helper, prefetch_comments
from core.desktop.devtools.interface.tui_status import build_status_text

from .tui_display import DisplayMixin
from .tui_themes import DEFAULT_THEME, build_style

logger = logging.getLogger("beadtree.tui")

# status bar + footer
CHROME_LINES = 2

STATUS_CYCLE = ("open", "in_progress", "closed")
CONFIRM_ANSWERS = frozenset({"y", "yes", "д", "да"})


def parse_labels(text: str) -> List[str]:
    """Comma or whitespace separated labels, duplicates dropped, order kept."""
    labels: List[str] = []
    for token in re.split(r"[,\s]+", text or ""):
        if token and token not in labels:
            labels.append(token)
    return labels


class BeadTreeTUI(DisplayMixin):
    @staticmethod
    def get_theme_palette(theme: str) -> Dict[str, str]:
        from .tui_themes import get_theme_palette as _get_theme_palette
        return _get_theme_palette(theme)

    @classmethod
    def build_style(cls, theme: str) -> Style:
        return build_style(theme)

    def __init__(
        self,
        roots: Optional[List[Node]] = None,
        source: Optional[IssueSource] = None,
        writer: Optional[IssueWriter] = None,
        db_path: str = "",
        settings: Optional[Settings] = None,
        *,
        mod_time: float = 0.0,
        repo_name: str = "",
    ):
        self.settings = settings or Settings()
        self.source = source
        self.writer = writer
        self.db_path = str(db_path or "")
        self.repo_name = repo_name or _repo_name(self.db_path)
        self.language = self.settings.lang or "en"
        self.theme_name = self.settings.theme or DEFAULT_THEME

        self.view = TreeView(roots, viewport_height=self.tree_height())
        sync_detail_target(self)
        self.errors = ErrorState()
        self.inbox = Inbox(on_post=self.force_render)
        self.reconciler = RefreshReconciler(
            self.view,
            source,
            self.inbox,
            self.errors,
            self.db_path,
            builder=GraphBuilder(strict=self.settings.strict_edges),
        )
        self.reconciler.last_mod_time = mod_time
        self.injector = FastInjector(self.view, self.errors, self.reconciler)
        self.comment_loader = CommentLoader(source, self.inbox)

        self.status_message = ""
        self.status_message_expires = 0.0
        self._last_check = time.time()
        self.search_mode = False
        self.editing_mode = False
        self._pending_create_parent_id = ""
        self._edit_action = "create"
        self._edit_target_id = ""

        self.edit_field = TextArea(multiline=False, focusable=True, prompt=self._edit_prompt)
        self.edit_field.buffer.on_text_changed += lambda _: self.force_render()
        self.edit_buffer = self.edit_field.buffer

        self.style = self.build_style(self.theme_name)

        kb = KeyBindings()
        kb.timeout = 0
        not_editing = Condition(lambda: not getattr(self, "editing_mode", False))
        search_active = not_editing & Condition(lambda: getattr(self, "search_mode", False))
        browsing = not_editing & Condition(lambda: not getattr(self, "search_mode", False))
        editing_active = Condition(lambda: bool(getattr(self, "editing_mode", False)))

        @kb.add("q", filter=browsing)
        @kb.add("й", filter=browsing)
        @kb.add("c-c")
        def _(event):
            self.reconciler.cancel_pending()
            event.app.exit()

        @kb.add("down", filter=not_editing)
        @kb.add("j", filter=browsing)
        @kb.add("о", filter=browsing)
        def _(event):
            move_vertical_selection(self, 1)

        @kb.add("up", filter=not_editing)
        @kb.add("k", filter=browsing)
        @kb.add("л", filter=browsing)
        def _(event):
            move_vertical_selection(self, -1)

        @kb.add(Keys.ScrollDown, filter=not_editing)
        def _(event):
            move_vertical_selection(self, 1)

        @kb.add(Keys.ScrollUp, filter=not_editing)
        def _(event):
            move_vertical_selection(self, -1)

        @kb.add("pagedown", filter=not_editing)
        def _(event):
            move_vertical_selection(self, max(1, self.tree_height() - 1))

        @kb.add("pageup", filter=not_editing)
        def _(event):
            move_vertical_selection(self, -max(1, self.tree_height() - 1))

        @kb.add("g", filter=browsing)
        @kb.add("home", filter=not_editing)
        def _(event):
            self.view.move_to_top()
            sync_detail_target(self)
            self.force_render()

        @kb.add("G", filter=browsing)
        @kb.add("end", filter=not_editing)
        def _(event):
            self.view.move_to_bottom()
            sync_detail_target(self)
            self.force_render()

        @kb.add("l", filter=browsing)
        @kb.add("д", filter=browsing)
        @kb.add("right", filter=not_editing)
        def _(event):
            self.view.expand_selected()
            self.force_render()

        @kb.add("h", filter=browsing)
        @kb.add("р", filter=browsing)
        @kb.add("left", filter=not_editing)
        def _(event):
            self.view.collapse_selected()
            sync_detail_target(self)
            self.force_render()

        @kb.add("space", filter=browsing)
        def _(event):
            self.view.toggle_row()
            self.force_render()

        @kb.add("enter", filter=not_editing)
        def _(event):
            """Enter - leave filter input, otherwise toggle the selected row."""
            if self.search_mode:
                self.search_mode = False
                self.force_render()
                return
            self.view.toggle_row()
            self.force_render()

        @kb.add("/", filter=browsing)
        def _(event):
            """Enter filter input mode (type to filter the tree)."""
            self.search_mode = True
            self.force_render()

        @kb.add("backspace", eager=True, filter=search_active)
        @kb.add("c-h", eager=True, filter=search_active)
        def _(event):
            if self.view.filter_text:
                self.set_filter_text(self.view.filter_text[:-1])
            self.force_render()

        @kb.add("c-u", filter=not_editing)
        def _(event):
            """Clear filter text."""
            self.search_mode = False
            self.clear_filter()

        @kb.add(Keys.Any, eager=True, filter=search_active)
        def _(event):
            """Type-to-filter when search_mode is active."""
            key = event.key_sequence[0].key if event.key_sequence else None
            if not isinstance(key, str):
                return
            # special keys arrive as multi-char tokens like 'up', 'enter'
            if len(key) != 1 or not key.isprintable():
                return
            self.set_filter_text(self.view.filter_text + key)

        @kb.add("v", filter=browsing)
        @kb.add("м", filter=browsing)
        def _(event):
            self.view.cycle_view_mode()
            sync_detail_target(self)
            self.force_render()

        @kb.add("r", filter=browsing)
        @kb.add("к", filter=browsing)
        def _(event):
            self.reconciler.force_refresh()
            self.force_render()

        @kb.add("d", filter=browsing)
        @kb.add("в", filter=browsing)
        def _(event):
            self.toggle_details()

        @kb.add("tab", filter=browsing)
        def _(event):
            self.toggle_focus()

        @kb.add("n", filter=browsing)
        @kb.add("т", filter=browsing)
        def _(event):
            self.start_create()

        @kb.add("s", filter=browsing)
        @kb.add("ы", filter=browsing)
        def _(event):
            self.cycle_status()

        @kb.add("i", filter=browsing)
        @kb.add("ш", filter=browsing)
        def _(event):
            self.change_status("in_progress")

        @kb.add("c", filter=browsing)
        @kb.add("с", filter=browsing)
        def _(event):
            self.change_status("closed")

        @kb.add("o", filter=browsing)
        @kb.add("щ", filter=browsing)
        def _(event):
            self.change_status("open")

        @kb.add("C", filter=browsing)
        def _(event):
            self.start_comment()

        @kb.add("L", filter=browsing)
        def _(event):
            self.start_labels()

        @kb.add("D", filter=browsing)
        def _(event):
            self.start_delete()

        @kb.add("x", filter=browsing)
        @kb.add("ч", filter=browsing)
        def _(event):
            """Dismiss the current error."""
            if self.errors.dismiss():
                self.force_render()

        @kb.add("enter", filter=editing_active)
        def _(event):
            """Enter - submit the prompt (title, comment, labels or delete confirmation)."""
            self.save_edit()

        @kb.add("escape", eager=True)
        def _(event):
            if self.editing_mode:
                self.cancel_edit()
            elif self.search_mode:
                self.search_mode = False
                self.force_render()
            elif self.view.filter_text:
                self.clear_filter()
            elif self.view.show_details:
                self.toggle_details()
            elif self.errors.dismiss():
                self.force_render()

        self.status_bar = Window(content=FormattedTextControl(self.get_status_text), height=1, always_hide_cursor=True)
        self.main_window = Window(
            content=FormattedTextControl(self.get_body_content, focusable=True, show_cursor=False),
            always_hide_cursor=True,
            wrap_lines=False,
        )
        self.detail_view = Window(
            content=FormattedTextControl(self.get_detail_text),
            always_hide_cursor=True,
            wrap_lines=False,
        )
        details_visible = Condition(lambda: self.view.show_details)
        self.body_container = VSplit(
            [
                self.main_window,
                ConditionalContainer(Window(width=1, char="│", style="class:border"), filter=details_visible),
                ConditionalContainer(self.detail_view, filter=details_visible),
            ],
            padding=0,
        )
        self.edit_container = ConditionalContainer(self.edit_field, filter=editing_active)
        self.footer = Window(
            content=FormattedTextControl(self.get_footer_text),
            height=Dimension(min=1, max=1),
            always_hide_cursor=True,
        )

        root = HSplit([self.status_bar, self.body_container, self.edit_container, self.footer])

        self.app = Application(
            layout=Layout(root, focused_element=self.main_window),
            key_bindings=kb,
            style=self.style,
            full_screen=True,
            mouse_support=True,
            refresh_interval=1.0,
        )
        # prompt_toolkit waits 0.5s by default to tell Escape from escape sequences
        try:
            self.app.ttimeoutlen = max(0.0, float(os.getenv("BEADTREE_TUI_TTIMEOUTLEN", "0.05")))
        except ValueError:
            self.app.ttimeoutlen = 0.05

    @staticmethod
    def get_terminal_width() -> int:
        """Get current terminal width, default to 100 if unavailable."""
        try:
            return os.get_terminal_size().columns
        except (AttributeError, ValueError, OSError):
            return 100

    @staticmethod
    def get_terminal_height() -> int:
        try:
            return os.get_terminal_size().lines
        except (AttributeError, ValueError, OSError):
            return 40

    def tree_height(self) -> int:
        extra = 1 if getattr(self, "editing_mode", False) else 0
        return max(1, self.get_terminal_height() - CHROME_LINES - extra)

    def force_render(self) -> None:
        app = getattr(self, "app", None)
        if app:
            app.invalidate()

    def _t(self, key: str, **kwargs) -> str:
        return translate(key, lang=getattr(self, "language", "en"), **kwargs)

    def set_status_message(self, message: str, ttl: float = 4.0) -> None:
        self.status_message = message
        self.status_message_expires = time.time() + ttl

    # ------------------------------------------------------------ rendering

    def get_status_text(self) -> FormattedText:
        return build_status_text(self)

    def get_footer_text(self) -> FormattedText:
        return build_footer_text(self)

    def get_body_content(self) -> FormattedText:
        self.maybe_reload()
        return render_tree_text(self)

    def get_detail_text(self) -> FormattedText:
        return render_detail_text(self)

    def maybe_reload(self, now: Optional[float] = None) -> None:
        _maybe_reload_helper(self, now)

    # -------------------------------------------------------------- actions

    def set_filter_text(self, value: str) -> None:
        self.view.set_filter_text(value)
        sync_detail_target(self)
        self.force_render()

    def clear_filter(self) -> None:
        self.view.clear_filter()
        sync_detail_target(self)
        self.force_render()

    def toggle_details(self) -> None:
        view = self.view
        view.show_details = not view.show_details
        if view.show_details:
            sync_detail_target(self)
            prefetch_comments(self)
        else:
            view.focus = Focus.TREE
        self.force_render()

    def toggle_focus(self) -> None:
        view = self.view
        if not view.show_details:
            return
        view.focus = Focus.DETAILS if view.focus is Focus.TREE else Focus.TREE
        self.force_render()

    def _edit_prompt(self) -> str:
        action = self._edit_action
        target = self._edit_target_id
        if action == "comment":
            return self._t("PROMPT_COMMENT", id=target)
        if action == "labels":
            return self._t("PROMPT_LABELS", id=target)
        if action == "delete":
            count = self._descendant_count(target)
            if count:
                return translate_count("PROMPT_DELETE_CASCADE", count, lang=self.language, id=target)
            return self._t("PROMPT_DELETE", id=target)
        parent = self._pending_create_parent_id
        if parent:
            return self._t("PROMPT_CREATE", parent=parent)
        return self._t("PROMPT_CREATE_ROOT")

    def _descendant_count(self, issue_id: str) -> int:
        node = self.view.find_node(issue_id)
        if node is None:
            return 0
        return sum(1 for _ in walk_nodes(node.children))

    def start_create(self) -> None:
        if self.writer is None:
            self.set_status_message(self._t("STATUS_NO_WRITER"), ttl=4)
            self.force_render()
            return
        node = self.view.selected_node
        self._edit_action = "create"
        self._pending_create_parent_id = node.id if node is not None else ""
        self.start_editing("")

    def _selected_for_change(self) -> Optional[Node]:
        if self.writer is None:
            self.set_status_message(self._t("STATUS_READ_ONLY"), ttl=4)
            self.force_render()
            return None
        node = self.view.selected_node
        if node is None:
            self.set_status_message(self._t("STATUS_NOTHING_SELECTED"), ttl=4)
            self.force_render()
        return node

    def _start_prompt(self, action: str) -> None:
        node = self._selected_for_change()
        if node is None:
            return
        self._edit_action = action
        self._edit_target_id = node.id
        self.start_editing(", ".join(node.issue.labels) if action == "labels" else "")

    def start_comment(self) -> None:
        self._start_prompt("comment")

    def start_labels(self) -> None:
        self._start_prompt("labels")

    def start_delete(self) -> None:
        self._start_prompt("delete")

    def start_editing(self, current_value: str) -> None:
        self.editing_mode = True
        self.edit_buffer.text = current_value
        self.edit_buffer.cursor_position = len(current_value)
        if hasattr(self, "app") and self.app:
            self.app.layout.focus(self.edit_field)

    def save_edit(self) -> None:
        if not self.editing_mode:
            return
        text = self.edit_buffer.text.replace("\r", "").replace("\n", " ").strip()
        action = self._edit_action
        target = self._edit_target_id
        parent_id = self._pending_create_parent_id
        self.cancel_edit()
        if action == "comment":
            if text:
                self.add_comment(target, text)
        elif action == "labels":
            self.set_labels(target, parse_labels(text))
        elif action == "delete":
            if text.lower() in CONFIRM_ANSWERS:
                self.delete_issue(target)
        elif text:
            self.create_issue(text, parent_id)

    def cancel_edit(self) -> None:
        self.editing_mode = False
        self.edit_buffer.text = ""
        self._edit_action = "create"
        self._edit_target_id = ""
        self._pending_create_parent_id = ""
        if hasattr(self, "app") and self.app:
            self.app.layout.focus(self.main_window)
        self.force_render()

    def _start_worker(self, work, name: str, background: bool) -> None:
        if background:
            threading.Thread(target=work, daemon=True, name=name).start()
        else:
            work()

    def create_issue(self, title: str, parent_id: str = "", *, background: bool = True) -> None:
        """Create through the writer off the UI thread; the result arrives as IssueCreated."""
        writer = self.writer
        if writer is None:
            self.set_status_message(self._t("STATUS_NO_WRITER"), ttl=4)
            return

        def work() -> None:
            try:
                issue = writer.create(title, parent_id=parent_id)
            except Exception as exc:
                logger.warning("create failed: %s", exc)
                self.inbox.post(IssueCreated(parent_hint=parent_id, error=exc))
                return
            self.inbox.post(IssueCreated(issue=issue, parent_hint=parent_id))

        self._start_worker(work, "beadtree-create", background)

    def run_mutation(
        self,
        action: str,
        issue_id: str,
        call: Callable[[], None],
        *,
        detail: str = "",
        background: bool = True,
    ) -> None:
        """Run one writer call off the UI thread; the result arrives as MutationDone."""

        def work() -> None:
            try:
                call()
            except Exception as exc:
                logger.warning("%s %s failed: %s", action, issue_id, exc)
                self.inbox.post(MutationDone(action, issue_id, detail, error=exc))
                return
            self.inbox.post(MutationDone(action, issue_id, detail))

        self._start_worker(work, f"beadtree-{action}", background)

    def change_status(self, status: str, *, background: bool = True) -> None:
        node = self._selected_for_change()
        if node is None or node.issue.status == status:
            return
        writer = self.writer
        issue_id = node.id
        if node.issue.is_closed and status == "open":
            call = lambda: writer.reopen(issue_id)
        else:
            call = lambda: writer.update_status(issue_id, status)
        self.run_mutation("status", issue_id, call, detail=status, background=background)

    def cycle_status(self, *, background: bool = True) -> None:
        """open -> in_progress -> closed -> open; anything else goes to open."""
        node = self.view.selected_node
        current = node.issue.status if node is not None else ""
        idx = STATUS_CYCLE.index(current) if current in STATUS_CYCLE else -1
        self.change_status(STATUS_CYCLE[(idx + 1) % len(STATUS_CYCLE)], background=background)

    def add_comment(self, issue_id: str, text: str, *, background: bool = True) -> None:
        writer = self.writer
        if writer is None:
            return
        self.run_mutation("comment", issue_id, lambda: writer.add_comment(issue_id, text), background=background)

    def set_labels(self, issue_id: str, labels: List[str], *, background: bool = True) -> None:
        """Bring the issue's labels to exactly `labels` with add/remove calls."""
        writer = self.writer
        node = self.view.find_node(issue_id)
        if writer is None or node is None:
            return
        current = list(node.issue.labels)
        to_remove = [label for label in current if label not in labels]
        to_add = [label for label in labels if label not in current]
        if not to_remove and not to_add:
            return

        def call() -> None:
            for label in to_remove:
                writer.remove_label(issue_id, label)
            for label in to_add:
                writer.add_label(issue_id, label)

        self.run_mutation("labels", issue_id, call, background=background)

    def delete_issue(self, issue_id: str, *, background: bool = True) -> None:
        writer = self.writer
        if writer is None:
            return
        cascade = self._descendant_count(issue_id) > 0
        self.run_mutation("delete", issue_id, lambda: writer.delete(issue_id, cascade=cascade), background=background)

    def run(self) -> None:
        if self.settings.comments_prefetch:
            prefetch_comments(self)
        try:
            self.app.run()
        finally:
            self.reconciler.cancel_pending()


def _repo_name(db_path: str) -> str:
    if not db_path:
        return "beads"
    path = Path(db_path).expanduser().resolve()
    if path.parent.name == ".beads":
        return path.parent.parent.name or "beads"
    return path.parent.name or "beads"


def cmd_tui(
    roots: List[Node],
    source: IssueSource,
    writer: Optional[IssueWriter],
    settings: Settings,
    *,
    db_path: str = "",
    mod_time: float = 0.0,
) -> int:
    tui = BeadTreeTUI(
        roots,
        source=source,
        writer=writer,
        db_path=db_path,
        settings=settings,
        mod_time=mod_time,
    )
    tui.run()
    return 0


__all__ = ["BeadTreeTUI", "cmd_tui", "parse_labels", "CHROME_LINES", "STATUS_CYCLE", "CONFIRM_ANSWERS"]
