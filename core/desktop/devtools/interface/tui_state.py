"""Small helpers to keep BeadTreeTUI methods slim."""

import logging
from typing import Optional

from core.errors import IssueLinkError
from core.desktop.devtools.application.error_state import ErrorOrigin
from core.desktop.devtools.application.messages import (
    CommentBatchLoaded,
    EventualRefreshDue,
    IssueCreated,
    MutationDone,
    RefreshComplete,
)
from core.desktop.devtools.interface.tui_navigation import sync_detail_target

logger = logging.getLogger("beadtree.tui")


def prefetch_comments(tui) -> int:
    if not tui.settings.comments_prefetch:
        return 0
    view = tui.view
    return tui.comment_loader.prefetch(view.roots, [view.detail_issue_id])


def handle_message(tui, message: object) -> None:
    if isinstance(message, RefreshComplete):
        if tui.reconciler.handle_result(message):
            prefetch_comments(tui)
    elif isinstance(message, CommentBatchLoaded):
        tui.comment_loader.apply(tui.view.roots, message)
    elif isinstance(message, EventualRefreshDue):
        tui.reconciler.force_refresh()
    elif isinstance(message, IssueCreated):
        handle_issue_created(tui, message)
    elif isinstance(message, MutationDone):
        handle_mutation_done(tui, message)
    else:
        logger.debug("ignoring unknown message %r", message)


def handle_issue_created(tui, message: IssueCreated) -> None:
    if isinstance(message.error, IssueLinkError):
        # the issue exists; only the parent link is missing
        error = message.error
        tui.errors.record_exception(error, ErrorOrigin.OPERATION, prefix="link failed")
        tui.set_status_message(tui._t("STATUS_LINK_FAILED", id=error.issue.id, parent=error.parent_id), ttl=6)
        tui.reconciler.force_refresh()
        return
    if message.error is not None or message.issue is None:
        error = message.error or RuntimeError("no issue returned")
        tui.errors.record_exception(error, ErrorOrigin.OPERATION, prefix="create failed")
        tui.set_status_message(tui._t("STATUS_CREATE_FAILED", error=getattr(error, "message", "") or error), ttl=6)
        return
    node = tui.injector.inject_or_refresh(message.issue, message.parent_hint)
    if node is not None:
        sync_detail_target(tui)
    tui.set_status_message(tui._t("STATUS_CREATED", id=message.issue.id))


_MUTATION_STATUS = {
    "status": "STATUS_STATUS_CHANGED",
    "delete": "STATUS_DELETED",
    "comment": "STATUS_COMMENTED",
    "labels": "STATUS_LABELS_UPDATED",
}


def handle_mutation_done(tui, message: MutationDone) -> None:
    """Report the outcome and pull the new state from the database."""
    if message.error is not None:
        error = message.error
        tui.errors.record_exception(error, ErrorOrigin.OPERATION, prefix=f"{message.action} failed")
        tui.set_status_message(
            tui._t("STATUS_ACTION_FAILED", action=message.action, error=getattr(error, "message", "") or error),
            ttl=6,
        )
        return
    if message.action == "comment":
        node = tui.view.find_node(message.issue_id)
        if node is not None:
            node.comments_loaded = False

    tui.set_status_message(tui._t(_MUTATION_STATUS[message.action], id=message.issue_id, status=message.detail))
    tui.reconciler.force_refresh()


def pump_inbox(tui) -> int:
    """Apply everything background workers posted since the last render."""
    messages = tui.inbox.drain()
    for message in messages:
        handle_message(tui, message)
    return len(messages)


def maybe_reload(tui, now: Optional[float] = None) -> None:
    from time import time

    pump_inbox(tui)
    interval = tui.settings.auto_refresh_seconds
    if interval <= 0:
        return
    ts = now if now is not None else time()
    if ts - tui._last_check < interval:
        return
    tui._last_check = ts
    tui.reconciler.check_for_changes()


__all__ = [
    "prefetch_comments",
    "handle_message",
    "handle_issue_created",
    "handle_mutation_done",
    "pump_inbox",
    "maybe_reload",
]
