"""Background full refresh: poll, rebuild off-thread, reconcile on the UI thread."""

import logging
import threading
import time
from typing import Callable, Dict, List, NamedTuple, Optional

from application.ports import IssueSource
from core.errors import RefreshTimeoutError
from core.graph_builder import GraphBuilder
from core.node import Node, walk_nodes
from core.desktop.devtools.application.error_state import ErrorOrigin, ErrorState
from core.desktop.devtools.application.messages import EventualRefreshDue, Inbox, RefreshComplete
from core.desktop.devtools.application.tree_view import TreeView
from core.desktop.devtools.application.view_snapshot import capture, restore
from infrastructure.db_locator import latest_mod_time

logger = logging.getLogger("beadtree.refresh")

REFRESH_TIMEOUT = 10.0
EVENTUAL_REFRESH_DELAY = 2.0


class DiffSummary(NamedTuple):
    added: int = 0
    changed: int = 0
    removed: int = 0

    def __str__(self) -> str:
        return f"+{self.added} / Δ{self.changed} / -{self.removed}"


def build_digest(roots: List[Node]) -> Dict[str, str]:
    return {node.id: node.issue.version_marker() for node in walk_nodes(roots)}


def diff_digests(old: Dict[str, str], new: Dict[str, str]) -> DiffSummary:
    added = sum(1 for issue_id in new if issue_id not in old)
    removed = sum(1 for issue_id in old if issue_id not in new)
    changed = sum(1 for issue_id, marker in new.items() if issue_id in old and old[issue_id] != marker)
    return DiffSummary(added, changed, removed)


def collect_comment_state(roots: List[Node]) -> Dict[str, tuple]:
    return {
        node.id: (node.issue.comments, node.comments_loaded, node.comment_error)
        for node in walk_nodes(roots)
        if node.comments_loaded or node.comment_error
    }


def transfer_comment_state(roots: List[Node], state: Dict[str, tuple]) -> None:
    if not state:
        return
    for node in walk_nodes(roots):
        saved = state.get(node.id)
        if saved is None:
            continue
        node.issue.comments, node.comments_loaded, node.comment_error = saved


def _spawn_daemon(target: Callable[[], None]) -> None:
    threading.Thread(target=target, daemon=True, name="beadtree-refresh").start()


class RefreshReconciler:
    """Coordinates full rebuilds for one `TreeView`.

    At most one rebuild is in flight; triggers arriving meanwhile are dropped
    and the next poll picks up whatever changed.
    """

    def __init__(
        self,
        view: TreeView,
        source: IssueSource,
        inbox: Inbox,
        errors: ErrorState,
        db_path: str = "",
        *,
        builder: Optional[GraphBuilder] = None,
        timeout: float = REFRESH_TIMEOUT,
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.view = view
        self.source = source
        self.inbox = inbox
        self.errors = errors
        self.db_path = db_path
        self.builder = builder or GraphBuilder()
        self.timeout = timeout
        self._spawn = spawn or _spawn_daemon
        self._clock = clock
        self.in_flight = False
        self.last_mod_time = 0.0
        self.last_refresh_at: Optional[float] = None
        self.last_diff: Optional[DiffSummary] = None
        self.last_refresh_stats = ""
        self.listeners: List[Callable[[], None]] = []
        self._eventual_timer: Optional[threading.Timer] = None

    # -------------------------------------------------------------- triggers

    def check_for_changes(self) -> bool:
        """Start a rebuild when the database moved past the last seen mtime."""
        if self.in_flight or not self.db_path:
            return False
        try:
            mod_time = latest_mod_time(self.db_path)
        except OSError as exc:
            self.errors.record_exception(exc, ErrorOrigin.REFRESH, prefix="refresh check failed")
            self.last_refresh_stats = "refresh error"
            return False
        if mod_time <= self.last_mod_time:
            return False
        return self.start_refresh(mod_time)

    def force_refresh(self) -> bool:
        mod_time = None
        if self.db_path:
            try:
                mod_time = latest_mod_time(self.db_path)
            except OSError:
                mod_time = None
        return self.start_refresh(mod_time)

    def start_refresh(self, mod_time: Optional[float] = None) -> bool:
        if self.in_flight:
            return False
        self.in_flight = True
        self._spawn(lambda: self.inbox.post(self.fetch_and_build(mod_time)))
        return True

    def schedule_eventual_refresh(self, delay: float = EVENTUAL_REFRESH_DELAY) -> threading.Timer:
        if self._eventual_timer is not None:
            self._eventual_timer.cancel()
        timer = threading.Timer(delay, lambda: self.inbox.post(EventualRefreshDue()))
        timer.daemon = True
        timer.start()
        self._eventual_timer = timer
        return timer

    def cancel_pending(self) -> None:
        if self._eventual_timer is not None:
            self._eventual_timer.cancel()
            self._eventual_timer = None

    # ---------------------------------------------------------------- worker

    def fetch_and_build(self, mod_time: Optional[float] = None) -> RefreshComplete:
        """Export and build off the UI thread; never raises."""
        try:
            issues = self._export_with_timeout()
            roots = self.builder.build(issues)
        except Exception as exc:
            return RefreshComplete(error=exc, mod_time=mod_time)
        return RefreshComplete(roots=roots, digest=build_digest(roots), mod_time=mod_time)

    def _export_with_timeout(self):
        box: dict = {}

        def target() -> None:
            try:
                box["issues"] = self.source.export()
            except Exception as exc:
                box["error"] = exc

        worker = threading.Thread(target=target, daemon=True, name="beadtree-export")
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            raise RefreshTimeoutError(f"export did not finish within {self.timeout:g}s")
        if "error" in box:
            raise box["error"]
        return box.get("issues", [])

    # ------------------------------------------------------------- UI thread

    def handle_result(self, result: RefreshComplete) -> bool:
        self.in_flight = False
        if result.error is not None:
            logger.warning("refresh failed: %s", result.error)
            self.errors.record_exception(result.error, ErrorOrigin.REFRESH, prefix="refresh failed")
            self.last_refresh_stats = "refresh error"
            return False
        self.apply_refresh(result.roots, result.digest, result.mod_time)
        return True

    def apply_refresh(
        self,
        new_roots: List[Node],
        new_digest: Optional[Dict[str, str]] = None,
        mod_time: Optional[float] = None,
    ) -> DiffSummary:
        view = self.view
        snapshot = capture(view)
        old_digest = build_digest(view.roots)
        comment_state = collect_comment_state(view.roots)

        view.roots = list(new_roots)
        transfer_comment_state(view.roots, comment_state)
        if mod_time:
            self.last_mod_time = mod_time

        restore(view, snapshot)

        if snapshot.selected_id and view.find_node(snapshot.selected_id) is not None:
            view.detail_issue_id = snapshot.selected_id
        else:
            view.detail_issue_id = ""

        if new_digest is None:
            new_digest = build_digest(view.roots)
        self.last_diff = diff_digests(old_digest, new_digest)
        self.last_refresh_stats = str(self.last_diff)
        self.last_refresh_at = self._clock()
        self.errors.clear_refresh()
        logger.debug("refresh applied: %s", self.last_diff)
        for listener in list(self.listeners):
            listener()
        return self.last_diff


__all__ = [
    "REFRESH_TIMEOUT",
    "EVENTUAL_REFRESH_DELAY",
    "DiffSummary",
    "build_digest",
    "diff_digests",
    "collect_comment_state",
    "transfer_comment_state",
    "RefreshReconciler",
]
