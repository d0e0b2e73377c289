"""Best-effort comment prefetch through a bounded worker pool."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from application.ports import IssueSource
from core.node import Node, index_nodes, walk_nodes
from core.desktop.devtools.application.messages import CommentBatchLoaded, CommentLoaded, Inbox

logger = logging.getLogger("beadtree.comments")

MAX_CONCURRENT_COMMENT_FETCHES = 8


def collect_comment_nodes(roots: List[Node], priority_ids: Iterable[str] = ()) -> List[Node]:
    """Nodes still lacking comments, with `priority_ids` first."""
    pending = [node for node in walk_nodes(roots) if not node.comments_loaded]
    first = [pid for pid in priority_ids if pid]
    if not first:
        return pending
    rank = {pid: idx for idx, pid in enumerate(first)}
    return sorted(pending, key=lambda node: rank.get(node.id, len(rank)))


class CommentLoader:
    def __init__(
        self,
        source: IssueSource,
        inbox: Inbox,
        *,
        max_workers: int = MAX_CONCURRENT_COMMENT_FETCHES,
        spawn: Optional[Callable[[Callable[[], None]], None]] = None,
    ):
        self.source = source
        self.inbox = inbox
        self.max_workers = max(1, max_workers)
        self._spawn = spawn or self._spawn_daemon
        self.in_flight = False

    @staticmethod
    def _spawn_daemon(target: Callable[[], None]) -> None:
        threading.Thread(target=target, daemon=True, name="beadtree-comments").start()

    def prefetch(self, roots: List[Node], priority_ids: Iterable[str] = ()) -> int:
        if self.in_flight:
            return 0
        nodes = collect_comment_nodes(roots, priority_ids)
        if not nodes:
            return 0
        issue_ids = [node.id for node in nodes]
        self.in_flight = True
        self._spawn(lambda: self.inbox.post(self.fetch_batch(issue_ids)))
        return len(issue_ids)

    def _fetch_one(self, issue_id: str) -> CommentLoaded:
        try:
            return CommentLoaded(issue_id, list(self.source.comments(issue_id) or []))
        except Exception as exc:
            logger.debug("comments for %s failed: %s", issue_id, exc)
            return CommentLoaded(issue_id, error=exc)

    def fetch_batch(self, issue_ids: List[str]) -> CommentBatchLoaded:
        workers = min(self.max_workers, max(1, len(issue_ids)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="beadtree-comment") as pool:
            results = list(pool.map(self._fetch_one, issue_ids))
        return CommentBatchLoaded(results)

    def apply(self, roots: List[Node], batch: CommentBatchLoaded) -> int:
        """Attach fetched comments to the current generation of nodes."""
        self.in_flight = False
        index = index_nodes(roots)
        applied = 0
        for result in batch.results:
            node = index.get(result.issue_id)
            if node is None:
                continue
            if result.error is not None:
                node.comment_error = str(result.error)
                node.comments_loaded = False
                continue
            node.issue.comments = list(result.comments)
            node.comments_loaded = True
            node.comment_error = ""
            applied += 1
        return applied


__all__ = ["MAX_CONCURRENT_COMMENT_FETCHES", "collect_comment_nodes", "CommentLoader"]
