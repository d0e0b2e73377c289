"""Status bar builder for BeadTreeTUI."""

import time
from datetime import datetime
from typing import List, Tuple

from prompt_toolkit.formatted_text import FormattedText

from core.desktop.devtools.interface.constants import TIMESTAMP_FORMAT


def _refresh_fragments(tui) -> List[Tuple[str, str]]:
    reconciler = tui.reconciler
    if reconciler.in_flight:
        return [("class:warning", tui._t("REFRESHING"))]
    if not tui.settings.auto_refresh and reconciler.last_refresh_at is None:
        return [("class:text.dimmer", tui._t("AUTO_REFRESH_OFF"))]
    if reconciler.last_refresh_at is None:
        return [("class:text.dimmer", tui._t("REFRESH_NEVER"))]
    stamp = datetime.fromtimestamp(reconciler.last_refresh_at).strftime(TIMESTAMP_FORMAT)
    return [
        ("class:text.dim", f"{tui._t('REFRESH_LABEL')} {stamp} "),
        ("class:text", reconciler.last_refresh_stats),
    ]


def build_status_text(tui) -> FormattedText:
    view = tui.view
    stats = view.stats()
    parts: List[Tuple[str, str]] = [
        ("class:header", f"{tui.repo_name} "),
        ("class:text.dim", "| "),
        (
            "class:text",
            tui._t(
                "STATS",
                total=stats.total,
                in_progress=stats.in_progress,
                ready=stats.ready,
                blocked=stats.blocked,
                closed=stats.closed,
            ),
        ),
        ("class:text.dim", " | "),
        ("class:header", tui._t(view.view_mode.label_key)),
    ]
    if view.filter_text or getattr(tui, "search_mode", False):
        cursor = "▏" if getattr(tui, "search_mode", False) else ""
        preview = view.filter_text
        if len(preview) > 25:
            preview = preview[:24] + "…"
        parts.extend(
            [
                ("class:text.dim", f" | {tui._t('FILTER_LABEL')}: "),
                ("class:prompt", f"{preview}{cursor}"),
            ]
        )
    parts.append(("class:text.dim", " | "))
    parts.extend(_refresh_fragments(tui))

    if getattr(tui, "status_message", "") and time.time() < getattr(tui, "status_message_expires", 0):
        parts.extend(
            [
                ("class:text.dim", " | "),
                ("class:header", tui.status_message[:80]),
            ]
        )
    elif getattr(tui, "status_message", ""):
        tui.status_message = ""

    record = tui.errors.last
    if record is not None:
        label = tui._t("WARNING_LABEL") if record.warning else tui._t("ERROR_LABEL")
        style = "class:warning" if record.warning else "class:error"
        parts.extend(
            [
                ("class:text.dim", " | "),
                (style, f"{label}: {record.message[:80]}"),
            ]
        )
    return FormattedText(parts)


__all__ = ["build_status_text"]
