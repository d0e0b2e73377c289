"""Completion messages posted by background workers to the UI loop."""

import queue
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core.issue import Comment, Issue
from core.node import Node


@dataclass
class RefreshComplete:
    roots: List[Node] = field(default_factory=list)
    digest: Dict[str, str] = field(default_factory=dict)
    mod_time: Optional[float] = None
    error: Optional[BaseException] = None


@dataclass
class CommentLoaded:
    issue_id: str
    comments: List[Comment] = field(default_factory=list)
    error: Optional[BaseException] = None


@dataclass
class CommentBatchLoaded:
    results: List[CommentLoaded] = field(default_factory=list)


@dataclass
class EventualRefreshDue:
    pass


@dataclass
class IssueCreated:
    issue: Optional[Issue] = None
    parent_hint: str = ""
    error: Optional[BaseException] = None


@dataclass
class MutationDone:
    """Outcome of a status/delete/comment/label call made through the writer."""

    action: str
    issue_id: str
    detail: str = ""
    error: Optional[BaseException] = None


class Inbox:
    """Thread-safe mailbox drained on the UI thread.

    Workers call `post`; the UI calls `drain` from its render path. `on_post`
    (usually ``app.invalidate``) wakes the loop up.
    """

    def __init__(self, on_post: Optional[Callable[[], None]] = None):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self.on_post = on_post

    def post(self, message: object) -> None:
        self._queue.put(message)
        if self.on_post:
            self.on_post()

    def drain(self, limit: int = 64) -> List[object]:
        items: List[object] = []
        while len(items) < limit:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return items

    def __len__(self) -> int:
        return self._queue.qsize()


__all__ = [
    "RefreshComplete",
    "CommentLoaded",
    "CommentBatchLoaded",
    "EventualRefreshDue",
    "IssueCreated",
    "MutationDone",
    "Inbox",
]
