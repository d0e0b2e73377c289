import time

import pytest
from prompt_toolkit.formatted_text import fragment_list_to_text

from config import Settings
from core import Dependency, Issue, build_graph
from core.desktop.devtools.application.error_state import ErrorOrigin
from core.desktop.devtools.interface.tui_app import BeadTreeTUI
from core.desktop.devtools.interface.tui_status import build_status_text


def _issues():
    return [
        Issue(id="e1", title="Epic one"),
        Issue(id="e2", title="Epic two"),
        Issue(id="t", title="Shared task", dependencies=[Dependency("e1", "parent-child"), Dependency("e2", "parent-child")]),
        Issue(id="s", title="Subtask alpha", status="in_progress", dependencies=[Dependency("t", "parent-child")]),
    ]


@pytest.fixture
def make_tui(monkeypatch):
    monkeypatch.setattr(BeadTreeTUI, "get_terminal_width", staticmethod(lambda: 120))
    monkeypatch.setattr(BeadTreeTUI, "get_terminal_height", staticmethod(lambda: 20))

    def factory(auto_refresh_seconds=0):
        settings = Settings(comments_prefetch=False, auto_refresh_seconds=auto_refresh_seconds)
        return BeadTreeTUI(build_graph(_issues()), settings=settings, repo_name="demo")

    return factory


def _status(tui):
    return fragment_list_to_text(build_status_text(tui))


def test_status_shows_repo_stats_and_mode(make_tui):
    text = _status(make_tui())
    assert text.startswith("demo | 4 issues · 1 active · 3 ready · 0 blocked · 0 closed | All")
    assert "auto-refresh off" in text


def test_refresh_states(make_tui):
    tui = make_tui(auto_refresh_seconds=3)
    assert "not refreshed yet" in _status(tui)

    tui.reconciler.in_flight = True
    assert "refreshing…" in _status(tui)

    tui.reconciler.in_flight = False
    tui.reconciler.last_refresh_at = time.time()
    tui.reconciler.last_refresh_stats = "+1 / Δ0 / -0"
    text = _status(tui)
    assert "refresh " in text
    assert text.endswith("+1 / Δ0 / -0")


def test_filter_shown_with_cursor_while_typing(make_tui):
    tui = make_tui()
    tui.search_mode = True
    tui.set_filter_text("al")
    assert "filter: al▏" in _status(tui)
    tui.search_mode = False
    text = _status(tui)
    assert "filter: al" in text and "▏" not in text


def test_status_message_expires(make_tui):
    tui = make_tui()
    tui.set_status_message("created bd-9")
    assert "created bd-9" in _status(tui)
    tui.status_message_expires = time.time() - 1
    assert "created bd-9" not in _status(tui)
    assert tui.status_message == ""


def test_errors_and_warnings(make_tui):
    tui = make_tui()
    tui.errors.record("refresh failed: database is locked", ErrorOrigin.REFRESH)
    assert _status(tui).endswith("error: refresh failed: database is locked")
    tui.errors.record("insertion took 80ms (target: <50ms)", ErrorOrigin.OPERATION, warning=True)
    assert "warning: insertion took 80ms" in _status(tui)
