import json
import sqlite3

import pytest

from core import build_graph, walk_nodes
from core.errors import SourceError
from infrastructure.jsonl_source import JsonlIssueSource
from infrastructure.sqlite_source import SQLiteIssueSource

SCHEMA = """
CREATE TABLE issues (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    design TEXT NOT NULL DEFAULT '',
    acceptance_criteria TEXT NOT NULL DEFAULT '',
    notes TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'open',
    priority INTEGER NOT NULL DEFAULT 2,
    issue_type TEXT NOT NULL DEFAULT 'task',
    assignee TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    closed_at TEXT,
    external_ref TEXT,
    deleted_at TEXT
);
CREATE TABLE labels (issue_id TEXT NOT NULL, label TEXT NOT NULL);
CREATE TABLE dependencies (issue_id TEXT NOT NULL, depends_on_id TEXT NOT NULL, type TEXT NOT NULL);
CREATE TABLE comments (id INTEGER PRIMARY KEY, issue_id TEXT NOT NULL, author TEXT NOT NULL, text TEXT NOT NULL, created_at TEXT NOT NULL);
"""


def _make_db(path):
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA)
    rows = [
        ("bd-1", "Epic", "open", 1, "epic", None),
        ("bd-2", "Child", "in_progress", 2, "task", None),
        ("bd-3", "Blocker", "open", 0, "bug", None),
        ("bd-4", "Gone", "tombstone", 2, "task", None),
        ("bd-5", "Deleted", "open", 2, "task", "2025-01-09T00:00:00Z"),
    ]
    for issue_id, title, status, priority, issue_type, deleted in rows:
        conn.execute(
            "INSERT INTO issues (id, title, status, priority, issue_type, created_at, updated_at, deleted_at)"
            " VALUES (?, ?, ?, ?, ?, '2025-01-01T00:00:00Z', '2025-01-02T00:00:00Z', ?)",
            (issue_id, title, status, priority, issue_type, deleted),
        )
    conn.executemany(
        "INSERT INTO dependencies VALUES (?, ?, ?)",
        [
            ("bd-2", "bd-1", "parent-child"),
            ("bd-2", "bd-3", "blocks"),
            ("bd-2", "bd-4", "blocks"),
            ("bd-5", "bd-1", "parent-child"),
        ],
    )
    conn.executemany("INSERT INTO labels VALUES (?, ?)", [("bd-1", "ui"), ("bd-1", "backend")])
    conn.execute("INSERT INTO comments VALUES (1, 'bd-2', 'ann', 'looks good', '2025-01-03T00:00:00Z')")
    conn.commit()
    conn.close()


def test_sqlite_export_skips_deleted_and_their_edges(tmp_path):
    db = tmp_path / "beads.db"
    _make_db(db)
    issues = SQLiteIssueSource(db).export()
    by_id = {i.id: i for i in issues}
    assert sorted(by_id) == ["bd-1", "bd-2", "bd-3"]
    assert by_id["bd-1"].labels == ["backend", "ui"]
    assert [(d.target_id, d.dep_type) for d in by_id["bd-2"].dependencies] == [("bd-1", "parent-child"), ("bd-3", "blocks")]
    assert [d.issue_id for d in by_id["bd-1"].dependents] == ["bd-2"]
    assert by_id["bd-2"].status == "in_progress"


def test_sqlite_export_builds_strict_graph(tmp_path):
    db = tmp_path / "beads.db"
    _make_db(db)
    roots = build_graph(SQLiteIssueSource(db).export())
    nodes = {n.id: n for n in walk_nodes(roots)}
    assert [c.id for c in nodes["bd-1"].children] == ["bd-2"]
    assert nodes["bd-2"].is_blocked


def test_sqlite_comments(tmp_path):
    db = tmp_path / "beads.db"
    _make_db(db)
    comments = SQLiteIssueSource(db).comments("bd-2")
    assert [(c.author, c.text) for c in comments] == [("ann", "looks good")]
    assert SQLiteIssueSource(db).comments("bd-1") == []


def test_sqlite_missing_tables_raise_source_error(tmp_path):
    db = tmp_path / "empty.db"
    sqlite3.connect(db).close()
    with pytest.raises(SourceError):
        SQLiteIssueSource(db).export()


def _write_jsonl(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")


def test_jsonl_export_and_comment_cache(tmp_path):
    path = tmp_path / "issues.jsonl"
    _write_jsonl(
        path,
        [
            {"id": "bd-1", "title": "Epic", "status": "open", "priority": 1},
            {
                "id": "bd-2",
                "title": "Child",
                "status": "open",
                "dependencies": [
                    {"issue_id": "bd-2", "depends_on_id": "bd-1", "type": "parent-child"},
                    {"issue_id": "bd-2", "depends_on_id": "bd-9", "type": "blocks"},
                ],
                "comments": [{"id": 7, "issue_id": "bd-2", "author": "bo", "text": "hi"}],
            },
            {"id": "bd-9", "title": "Old", "status": "tombstone"},
        ],
    )
    source = JsonlIssueSource(path)
    issues = source.export()
    assert [i.id for i in issues] == ["bd-1", "bd-2"]
    assert [d.target_id for d in issues[1].dependencies] == ["bd-1"]
    assert issues[1].comments == []
    assert [c.text for c in source.comments("bd-2")] == ["hi"]
    assert source.comments("bd-1") == []


def test_jsonl_bad_line_reports_line_number(tmp_path):
    path = tmp_path / "issues.jsonl"
    path.write_text('{"id": "bd-1", "title": "ok"}\n{not json\n', encoding="utf-8")
    with pytest.raises(SourceError, match=":2:"):
        JsonlIssueSource(path).export()


def test_jsonl_missing_file(tmp_path):
    with pytest.raises(SourceError):
        JsonlIssueSource(tmp_path / "nope.jsonl").export()
